"""SPST root URL configuration."""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI / Interactive Docs
    path("api/schema/",  SpectacularAPIView.as_view(),       name="schema"),
    path("api/docs/",    SpectacularSwaggerView.as_view(), name="swagger-ui"),

    # Auth
    path("api/auth/",    include("apps.authentication.urls")),
    path("api/customers/", include("apps.authentication.customer_urls")),

    # Shipments, pallet waves, quotes
    path("api/",         include("apps.shipments.urls")),
    path("api/pallets/", include("apps.pallets.urls")),
    path("api/",         include("apps.quotes.urls")),

    # US duties collection + Stripe
    path("api/",         include("apps.payments.urls")),

    # Ops / Admin
    path("api/admin/",   include("apps.ops.urls")),
    path("api/health/",  include("apps.ops.health_urls")),
    path("api/ops/",     include("apps.ops.ops_urls")),
]

if "django_prometheus" in settings.INSTALLED_APPS:
    urlpatterns += [path("", include("django_prometheus.urls"))]

urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
