"""Authentication: registration, JWT login, own profile, staff customer search."""

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import serializers
from drf_spectacular.utils import extend_schema

from .access import IsStaff, resolve_actor
from .models import normalize_email

User = get_user_model()


# ── Serializers ───────────────────────────────────────────────────────────────
class UserRegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model  = User
        fields = ["email", "full_name", "phone", "password"]

    def validate_email(self, value):
        email = normalize_email(value)
        if User.objects.filter(email=email).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return email

    def create(self, validated_data):
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


class UserProfileSerializer(serializers.ModelSerializer):
    actor = serializers.SerializerMethodField()

    class Meta:
        model  = User
        fields = ["id", "email", "full_name", "phone", "actor", "created_at"]
        read_only_fields = ["id", "email", "created_at"]

    def get_actor(self, obj) -> dict:
        access = resolve_actor(obj)
        return {
            "kind":        access.kind,
            "role":        access.role,
            "carrier_ids": [str(c) for c in access.carrier_ids],
        }


# ── Views ─────────────────────────────────────────────────────────────────────
@extend_schema(tags=["Auth"])
class RegisterView(generics.CreateAPIView):
    """POST /api/auth/register/ — Create a customer account."""
    queryset           = User.objects.all()
    serializer_class   = UserRegisterSerializer
    permission_classes = [AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(
            {"ok": True, "message": "Account created. Please log in.", "id": str(user.id)},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Auth"])
class ProfileView(generics.RetrieveUpdateAPIView):
    """GET/PATCH /api/auth/me/ — Own profile plus resolved actor kind."""
    serializer_class   = UserProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user


SEARCH_LIMIT_DEFAULT = 10
SEARCH_LIMIT_MAX     = 50


def _search_limit(raw) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return SEARCH_LIMIT_DEFAULT
    return min(max(value, 1), SEARCH_LIMIT_MAX)


@extend_schema(tags=["Auth"], summary="Find customers by email, name or company (staff)")
class CustomerSearchView(APIView):
    """GET /api/customers/search/?q=&limit= — newest customers first."""
    permission_classes = [IsStaff]

    def get(self, request):
        from apps.shipments.models import ShipperDefaults

        q  = (request.query_params.get("q") or "").strip()
        qs = (
            User.objects.filter(is_active=True)
            .exclude(staff_profile__enabled=True)
            .exclude(carrier_links__enabled=True)
            .exclude(email__in=[normalize_email(e) for e in settings.BREAK_GLASS_EMAILS])
        )
        if q:
            companies = ShipperDefaults.objects.filter(mittente__rs__icontains=q).values("email_norm")
            qs = qs.filter(Q(email__icontains=q) | Q(full_name__icontains=q) | Q(email__in=companies))
        users = list(qs.order_by("-created_at", "email")[: _search_limit(request.query_params.get("limit"))])

        saved = dict(
            ShipperDefaults.objects
            .filter(email_norm__in=[u.email for u in users])
            .values_list("email_norm", "mittente")
        )
        customers = [
            {
                "id":           str(u.id),
                "email":        u.email,
                "full_name":    u.full_name,
                "phone":        u.phone,
                "company_name": (saved.get(u.email) or {}).get("rs", ""),
            }
            for u in users
        ]
        return Response({"ok": True, "customers": customers})
