"""Category ViewSet: public reads, editor writes, admin deletes."""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.permissions import ActionPermission
from core.listing import CATEGORIES, compose, paginate_queryset
from core.response import BaseViewSet, api_response, listing_response
from . import services
from .models import Category
from .serializers import CategorySerializer, CategoryTreeSerializer


class CategoryViewSet(BaseViewSet):
    serializer_class = CategorySerializer
    permission_classes = [ActionPermission]
    queryset = Category.objects.select_related("parent")
    lookup_value_regex = r"\d+"
    access_actions = {
        "list": None,
        "retrieve": None,
        "all": None,
        "tree": None,
        "create": "category.create",
        "update": "category.update",
        "partial_update": "category.update",
        "destroy": "category.delete",
    }

    def list(self, request, *args, **kwargs):
        """Paginated listing with search, ``active`` and ``parent`` filters."""
        spec = compose(CATEGORIES, request.query_params, request.principal)
        items, total = paginate_queryset(self.get_queryset(), spec)
        return listing_response("categories", self.get_serializer(items, many=True).data, spec, total)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = services.create_category(serializer.validated_data)
        return api_response(self.get_serializer(category).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        category = self.get_object()
        serializer = self.get_serializer(category, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        category = services.update_category(category, serializer.validated_data)
        return api_response(self.get_serializer(category).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_category(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="all")
    def all(self, request):
        """Every active category, unpaginated (for dropdowns)."""
        categories = Category.objects.filter(is_active=True)
        return api_response({"categories": CategoryTreeSerializer(categories, many=True).data})

    @action(detail=False, methods=["get"], url_path="tree")
    def tree(self, request):
        """Active categories as a nested forest."""
        forest = services.active_tree()
        serialize = lambda record: dict(CategoryTreeSerializer(record).data)  # noqa: E731
        return api_response({"categories": [node.as_dict(serialize) for node in forest]})


__all__ = ["CategoryViewSet"]
