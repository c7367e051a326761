"""Account administration ViewSet."""

from django.contrib.auth import get_user_model
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.actions import ACCOUNT_ADMINISTER
from access_control.decisions import decide
from access_control.permissions import ActionPermission, enforce
from authentication.serializers import UserDetailSerializer
from core.listing import USERS, compose, paginate_queryset
from core.response import EnvelopeMixin, ResourceLookupMixin, api_response, listing_response
from . import services
from .serializers import AccountUpdateSerializer

User = get_user_model()


class UserViewSet(
    EnvelopeMixin,
    ResourceLookupMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """List, inspect, update, and delete accounts.

    Accounts are created through registration or ``init_admin`` only, so
    there is no create route. Updates fall back to ownership: an account may
    edit its own profile fields, while ``role`` and ``is_active`` always need
    ``account.administer``.
    """

    serializer_class = UserDetailSerializer
    permission_classes = [ActionPermission]
    queryset = User.objects.all()
    owner_field = "id"
    access_actions = {
        "list": "account.list",
        "retrieve": "account.view",
        "update": "account.update",
        "partial_update": "account.update",
        "destroy": "account.delete",
        "stats": "stats.view",
    }

    def list(self, request, *args, **kwargs):
        spec = compose(USERS, request.query_params, request.principal)
        items, total = paginate_queryset(self.get_queryset(), spec)
        return listing_response("users", self.get_serializer(items, many=True).data, spec, total)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        account = self.get_object()
        serializer = AccountUpdateSerializer(account, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        if serializer.touches_admin_fields():
            principal = request.principal
            enforce(decide(principal, ACCOUNT_ADMINISTER), ACCOUNT_ADMINISTER, principal)
        account = services.update_account(account, serializer.validated_data)
        return api_response(UserDetailSerializer(account).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_account(self.get_object(), request.principal)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.account_stats())


__all__ = ["UserViewSet"]
