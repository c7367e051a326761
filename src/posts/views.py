"""Post ViewSet: public published reads, role/ownership-gated writes."""

import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.actions import CONTENT_VIEW_UNPUBLISHED
from access_control.decisions import decide
from access_control.permissions import ActionPermission, enforce
from core.exceptions import NotFound
from core.listing import POSTS, compose, paginate_queryset
from core.response import BaseViewSet, api_response, listing_response
from . import services
from .models import Post
from .serializers import PostSerializer, PostSummarySerializer

logger = logging.getLogger(__name__)


class PostViewSet(BaseViewSet):
    serializer_class = PostSerializer
    permission_classes = [ActionPermission]
    queryset = Post.objects.select_related("author").prefetch_related("categories")
    lookup_value_regex = r"\d+"
    owner_field = "author_id"
    access_actions = {
        "list": None,
        "retrieve": None,
        "by_slug": None,
        "create": "content.create",
        "update": "content.update",
        "partial_update": "content.update",
        "destroy": "content.delete",
        "like": "content.like",
        "stats": "stats.view",
    }

    def _ensure_visible(self, post: Post) -> None:
        """Unpublished posts are visible to authors and above, or to their own author."""
        if post.status == Post.Status.PUBLISHED:
            return
        principal = self.request.principal
        enforce(decide(principal, CONTENT_VIEW_UNPUBLISHED, post.author_id), CONTENT_VIEW_UNPUBLISHED, principal)

    def list(self, request, *args, **kwargs):
        """Paginated listing; callers below author only see published posts."""
        spec = compose(POSTS, request.query_params, request.principal)
        items, total = paginate_queryset(self.get_queryset(), spec)
        return listing_response("posts", PostSummarySerializer(items, many=True).data, spec, total)

    def retrieve(self, request, *args, **kwargs):
        post = self.get_object()
        self._ensure_visible(post)
        return api_response(self.get_serializer(post).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[^/]+)")
    def by_slug(self, request, slug=None):
        """Fetch a post by slug and count the view."""
        try:
            post = self.get_queryset().get(slug=slug)
        except Post.DoesNotExist:
            raise NotFound("Post not found.") from None
        self._ensure_visible(post)
        services.record_view(post)
        return api_response(self.get_serializer(post).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        author = request.user
        post = services.create_post(author, serializer.validated_data)
        return api_response(self.get_serializer(post).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        post = self.get_object()
        serializer = self.get_serializer(post, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        post = services.update_post(post, serializer.validated_data)
        return api_response(self.get_serializer(post).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_post(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def like(self, request, pk=None):
        post = self.get_object()
        self._ensure_visible(post)
        likes = services.record_like(post)
        logger.debug("Post %s liked by %s", post.pk, request.principal.id)
        return api_response({"id": post.pk, "likes": likes})

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.post_stats())


__all__ = ["PostViewSet"]
