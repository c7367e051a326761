"""Serializers for account administration."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from access_control.roles import Role

User = get_user_model()


class AccountUpdateSerializer(serializers.ModelSerializer):
    """Fields an account update may touch; ``role``/``is_active`` need admin rights."""

    ADMIN_FIELDS = ("role", "is_active")

    role = serializers.ChoiceField(choices=Role.choices(), required=False)

    class Meta:
        model = User
        fields = ["full_name", "bio", "role", "is_active"]
        extra_kwargs = {"full_name": {"min_length": 2, "required": False}}

    def touches_admin_fields(self) -> bool:
        return any(name in self.validated_data for name in self.ADMIN_FIELDS)


__all__ = ["AccountUpdateSerializer"]
