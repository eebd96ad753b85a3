"""
pytest configuration for SPST.
Sets Django settings and provides shared fixtures.
"""

import tempfile
from datetime import timedelta

import pytest
from django.conf import settings


def pytest_configure(config):
    """Configure Django settings before tests run."""
    if not settings.configured:
        settings.configure(
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME":   ":memory:",
                }
            },
            INSTALLED_APPS=[
                "django.contrib.admin",
                "django.contrib.contenttypes",
                "django.contrib.auth",
                "django.contrib.sessions",
                "django.contrib.messages",
                "django.contrib.staticfiles",
                "rest_framework",
                "rest_framework_simplejwt",
                "drf_spectacular",
                "django_filters",
                "corsheaders",
                "apps.authentication",
                "apps.shipments",
                "apps.pallets",
                "apps.quotes",
                "apps.payments",
                "apps.notifications",
                "apps.ops",
            ],
            AUTH_USER_MODEL="authentication.User",
            REST_FRAMEWORK={
                "DEFAULT_AUTHENTICATION_CLASSES": [
                    "rest_framework_simplejwt.authentication.JWTAuthentication",
                ],
                "DEFAULT_PERMISSION_CLASSES": [
                    "rest_framework.permissions.IsAuthenticated",
                ],
                "DEFAULT_FILTER_BACKENDS": [
                    "django_filters.rest_framework.DjangoFilterBackend",
                    "rest_framework.filters.SearchFilter",
                    "rest_framework.filters.OrderingFilter",
                ],
                "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
                "PAGE_SIZE": 50,
                "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
                "EXCEPTION_HANDLER": "apps.core.errors.api_exception_handler",
            },
            SPECTACULAR_SETTINGS={
                "TITLE": "SPST API",
                "VERSION": "1.0.0",
                "SERVE_INCLUDE_SCHEMA": False,
            },
            SECRET_KEY="test-secret-key-not-for-production",
            DEBUG=True,
            USE_TZ=True,
            TIME_ZONE="Europe/Rome",
            ROOT_URLCONF="spst.urls",
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            TEMPLATES=[{
                "BACKEND": "django.template.backends.django.DjangoTemplates",
                "DIRS": [],
                "APP_DIRS": True,
                "OPTIONS": {
                    "context_processors": [
                        "django.template.context_processors.debug",
                        "django.template.context_processors.request",
                        "django.contrib.auth.context_processors.auth",
                        "django.contrib.messages.context_processors.messages",
                    ],
                },
            }],
            MIDDLEWARE=[
                "django.middleware.security.SecurityMiddleware",
                "corsheaders.middleware.CorsMiddleware",
                "django.contrib.sessions.middleware.SessionMiddleware",
                "django.middleware.common.CommonMiddleware",
                "django.middleware.csrf.CsrfViewMiddleware",
                "django.contrib.auth.middleware.AuthenticationMiddleware",
                "django.contrib.messages.middleware.MessageMiddleware",
            ],
            STATIC_URL="/static/",
            STATIC_ROOT="/tmp/staticfiles_test",
            MEDIA_URL="/media/",
            MEDIA_ROOT=tempfile.mkdtemp(prefix="spst-media-"),
            CACHES={
                "default": {
                    "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
                }
            },
            CELERY_TASK_ALWAYS_EAGER=True,   # Execute tasks synchronously in tests
            CELERY_TASK_EAGER_PROPAGATES=True,
            CORS_ALLOW_ALL_ORIGINS=True,
            SIMPLE_JWT={
                "ACCESS_TOKEN_LIFETIME":  timedelta(hours=8),
                "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
                "ALGORITHM": "HS256",
                "AUTH_HEADER_TYPES": ("Bearer",),
            },
            BREAK_GLASS_EMAILS=["info@spst.it"],
            MIN_PALLETS_PER_WAVE=6,
            USA_SHIPPING_TABLE={
                6: 119, 12: 179, 18: 299, 24: 369, 30: 439,
                36: 489, 42: 549, 48: 629, 54: 719, 60: 799,
            },
            USA_DUTIES_RATE=0.15,
            STRIPE_PERCENT=0.0325,
            STRIPE_FIXED=0.25,
            PAYMENT_PROVIDER="stripe",
            # Dummy provider credentials (network calls are mocked in tests)
            PUBLIC_APP_URL="https://app.spst.test",
            RESEND_API_KEY="re_test_key",
            RESEND_NOREPLY_FROM="SPST <no-reply@spst.test>",
            DUTIES_FROM_EMAIL="duties@spst.test",
            STRIPE_API_BASE_URL="http://stripe-mock",
            STRIPE_SECRET_KEY="sk_test_123",
            STRIPE_WEBHOOK_SECRET="whsec_test_123",
        )

    # Bind shared_task to the project app so .delay() runs eagerly
    import spst.celery  # noqa: F401


@pytest.fixture(autouse=True)
def no_real_email():
    """Resend is never called for real; tests inspect this mock instead."""
    from unittest.mock import patch
    with patch("apps.notifications.service.resend.Emails.send", return_value={"id": "email_test"}) as send:
        yield send
