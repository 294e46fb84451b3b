# sale_orders/api/serializers.py

"""
SALE ORDER SERIALIZERS

READ side only: writes go through services/sale_order_service.py,
which validates the raw camelCase payload as a whole.

Input serializers below cover the small action bodies
(status change, cost quote) where DRF field validation is enough.
"""

from rest_framework import serializers

from sale_orders.models import SaleOrder
from sale_orders.services.order_lifecycle import next_actions


class SaleOrderSerializer(serializers.ModelSerializer):
    orderNo = serializers.CharField(source="order_no", read_only=True)

    # order info
    customerId = serializers.IntegerField(source="customer_id", read_only=True)
    customerName = serializers.CharField(source="customer.name", read_only=True)
    customerCode = serializers.CharField(source="customer.code", read_only=True)
    customerRefNo = serializers.CharField(source="customer_ref_no", read_only=True)
    orderDate = serializers.DateField(source="order_date", read_only=True)
    type = serializers.CharField(source="order_type", read_only=True)
    deliverySchedule = serializers.DateTimeField(source="delivery_schedule", read_only=True)
    itemRefNo = serializers.CharField(source="item_ref_no", read_only=True)
    urgentOrder = serializers.BooleanField(source="urgent_order", read_only=True)
    freeLens = serializers.BooleanField(source="free_lens", read_only=True)
    freeFitting = serializers.BooleanField(source="free_fitting", read_only=True)

    # lens configuration
    lensId = serializers.IntegerField(source="lens_id", read_only=True)
    lensName = serializers.CharField(source="lens.name", read_only=True, default=None)
    categoryId = serializers.IntegerField(source="category_id", read_only=True)
    typeId = serializers.IntegerField(source="lens_type_id", read_only=True)
    diaId = serializers.IntegerField(source="dia_id", read_only=True)
    fittingId = serializers.IntegerField(source="fitting_id", read_only=True)
    coatingId = serializers.IntegerField(source="coating_id", read_only=True)
    coatingName = serializers.CharField(source="coating.name", read_only=True, default=None)
    tintingId = serializers.IntegerField(source="tinting_id", read_only=True)

    # eyes
    rightEye = serializers.BooleanField(source="right_eye", read_only=True)
    leftEye = serializers.BooleanField(source="left_eye", read_only=True)
    rightSpherical = serializers.DecimalField(source="right_spherical", max_digits=6, decimal_places=2, read_only=True)
    rightCylindrical = serializers.DecimalField(source="right_cylindrical", max_digits=6, decimal_places=2, read_only=True)
    rightAxis = serializers.DecimalField(source="right_axis", max_digits=6, decimal_places=2, read_only=True)
    rightAdd = serializers.DecimalField(source="right_add", max_digits=6, decimal_places=2, read_only=True)
    rightDia = serializers.CharField(source="right_dia", read_only=True)
    rightBase = serializers.CharField(source="right_base", read_only=True)
    rightBaseSize = serializers.CharField(source="right_base_size", read_only=True)
    rightBled = serializers.CharField(source="right_bled", read_only=True)
    leftSpherical = serializers.DecimalField(source="left_spherical", max_digits=6, decimal_places=2, read_only=True)
    leftCylindrical = serializers.DecimalField(source="left_cylindrical", max_digits=6, decimal_places=2, read_only=True)
    leftAxis = serializers.DecimalField(source="left_axis", max_digits=6, decimal_places=2, read_only=True)
    leftAdd = serializers.DecimalField(source="left_add", max_digits=6, decimal_places=2, read_only=True)
    leftDia = serializers.CharField(source="left_dia", read_only=True)
    leftBase = serializers.CharField(source="left_base", read_only=True)
    leftBaseSize = serializers.CharField(source="left_base_size", read_only=True)
    leftBled = serializers.CharField(source="left_bled", read_only=True)

    # dispatch
    dispatchStatus = serializers.CharField(source="dispatch_status", read_only=True)
    assignedPersonId = serializers.UUIDField(source="assigned_person_id", read_only=True)
    dispatchId = serializers.CharField(source="dispatch_id", read_only=True)
    estimatedDate = serializers.DateField(source="estimated_date", read_only=True)
    estimatedTime = serializers.CharField(source="estimated_time", read_only=True)
    actualDate = serializers.DateField(source="actual_date", read_only=True)
    actualTime = serializers.CharField(source="actual_time", read_only=True)
    dispatchNotes = serializers.CharField(source="dispatch_notes", read_only=True)

    # pricing
    lensPrice = serializers.DecimalField(source="lens_price", max_digits=12, decimal_places=2, read_only=True)
    fittingPrice = serializers.DecimalField(source="fitting_price", max_digits=12, decimal_places=2, read_only=True)
    tintingPrice = serializers.DecimalField(source="tinting_price", max_digits=12, decimal_places=2, read_only=True)
    additionalPrice = serializers.JSONField(source="additional_price", read_only=True)

    # derived
    nextActions = serializers.SerializerMethodField()
    customerStanding = serializers.SerializerMethodField()

    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = SaleOrder
        fields = [
            "id",
            "orderNo",
            "status",
            "customerId",
            "customerName",
            "customerCode",
            "customerRefNo",
            "orderDate",
            "type",
            "deliverySchedule",
            "remark",
            "itemRefNo",
            "urgentOrder",
            "freeLens",
            "freeFitting",
            "lensId",
            "lensName",
            "categoryId",
            "typeId",
            "diaId",
            "fittingId",
            "coatingId",
            "coatingName",
            "tintingId",
            "rightEye",
            "leftEye",
            "rightSpherical",
            "rightCylindrical",
            "rightAxis",
            "rightAdd",
            "rightDia",
            "rightBase",
            "rightBaseSize",
            "rightBled",
            "leftSpherical",
            "leftCylindrical",
            "leftAxis",
            "leftAdd",
            "leftDia",
            "leftBase",
            "leftBaseSize",
            "leftBled",
            "dispatchStatus",
            "assignedPersonId",
            "dispatchId",
            "estimatedDate",
            "estimatedTime",
            "actualDate",
            "actualTime",
            "dispatchNotes",
            "lensPrice",
            "fittingPrice",
            "tintingPrice",
            "discount",
            "additionalPrice",
            "nextActions",
            "customerStanding",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_nextActions(self, obj):
        return next_actions(obj.status)

    def get_customerStanding(self, obj):
        # only present right after create / update
        standing = getattr(obj, "customer_standing", None)
        return standing.as_dict() if standing is not None else None


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SaleOrder.STATUS_CHOICES)
    expectedCurrentStatus = serializers.ChoiceField(
        choices=SaleOrder.STATUS_CHOICES,
        required=False,
        allow_null=True,
    )


class CostQuoteInputSerializer(serializers.Serializer):
    customerId = serializers.IntegerField(min_value=1)
    priceRecordId = serializers.IntegerField(min_value=1)
    fittingId = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
