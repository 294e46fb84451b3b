# users/views/me.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import effective_capabilities_for


class StaffProfileSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    displayName = serializers.CharField(source="display_name")
    role = serializers.CharField()
    capabilities = serializers.SerializerMethodField()

    def get_capabilities(self, user):
        return sorted(effective_capabilities_for(self.context.get("request"), user))


class MeView(APIView):
    """
    Current staff profile.

    The order screens read `capabilities` to decide which actions
    (Confirm Order, Start Production, Mark as Delivered...) to offer.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: StaffProfileSerializer})
    def get(self, request):
        serializer = StaffProfileSerializer(request.user, context={"request": request})
        return Response(serializer.data)
