"""Root URL configuration for the CMS API."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from .views import HealthView

urlpatterns = [
    path("health/", HealthView.as_view(), name="health"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("auth/", include("authentication.urls")),
    path("", include("users.urls")),
    path("", include("categories.urls")),
    path("", include("posts.urls")),
]
