# masters/serializers.py

"""
MASTER DATA SERIALIZERS (READ-ONLY)

Dropdown payloads for the sale-order form: {id, name, ...attributes}.
Keys are camelCase to match the order payload.
"""

from rest_framework import serializers

from masters.models import (
    Customer,
    LensBrand,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensPrice,
    LensProduct,
    LensTinting,
    LensType,
)


class MasterRecordSerializer(serializers.ModelSerializer):
    shortName = serializers.CharField(source="short_name", read_only=True)

    class Meta:
        fields = ["id", "name", "shortName"]
        read_only_fields = fields


class LensBrandSerializer(MasterRecordSerializer):
    class Meta(MasterRecordSerializer.Meta):
        model = LensBrand


class LensCategorySerializer(MasterRecordSerializer):
    class Meta(MasterRecordSerializer.Meta):
        model = LensCategory


class LensTypeSerializer(MasterRecordSerializer):
    class Meta(MasterRecordSerializer.Meta):
        model = LensType


class LensDiaSerializer(MasterRecordSerializer):
    class Meta(MasterRecordSerializer.Meta):
        model = LensDia


class LensCoatingSerializer(MasterRecordSerializer):
    class Meta(MasterRecordSerializer.Meta):
        model = LensCoating


class LensFittingSerializer(MasterRecordSerializer):
    fittingPrice = serializers.DecimalField(
        source="fitting_price", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta(MasterRecordSerializer.Meta):
        model = LensFitting
        fields = MasterRecordSerializer.Meta.fields + ["fittingPrice"]
        read_only_fields = fields


class LensTintingSerializer(MasterRecordSerializer):
    tintingPrice = serializers.DecimalField(
        source="tinting_price", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta(MasterRecordSerializer.Meta):
        model = LensTinting
        fields = MasterRecordSerializer.Meta.fields + ["tintingPrice"]
        read_only_fields = fields


class LensProductSerializer(serializers.ModelSerializer):
    productCode = serializers.CharField(source="product_code", read_only=True)
    brandId = serializers.IntegerField(source="brand_id", read_only=True)
    categoryId = serializers.IntegerField(source="category_id", read_only=True)
    typeId = serializers.IntegerField(source="lens_type_id", read_only=True)

    class Meta:
        model = LensProduct
        fields = ["id", "name", "productCode", "brandId", "categoryId", "typeId"]
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    shopName = serializers.CharField(source="shop_name", read_only=True)

    class Meta:
        model = Customer
        fields = ["id", "name", "code", "shopName", "phone", "email"]
        read_only_fields = fields


class LensPriceSerializer(serializers.ModelSerializer):
    lensId = serializers.IntegerField(source="lens_id", read_only=True)
    lensName = serializers.CharField(source="lens.name", read_only=True)
    coatingId = serializers.IntegerField(source="coating_id", read_only=True)
    coatingName = serializers.CharField(source="coating.name", read_only=True)

    class Meta:
        model = LensPrice
        fields = ["id", "lensId", "lensName", "coatingId", "coatingName", "price"]
        read_only_fields = fields


class LensPriceLookupQuerySerializer(serializers.Serializer):
    lensId = serializers.IntegerField(min_value=1)
    coatingId = serializers.IntegerField(min_value=1)
