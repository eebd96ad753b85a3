"""
Authentication models.
User is the custom auth model, keyed by email (customers, staff and carrier
users all sign in the same way). StaffUser grants back-office roles.
"""

import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager


def normalize_email(value) -> str:
    return str(value or "").strip().lower()


class UserManager(BaseUserManager):
    def create_user(self, email, password=None, **extra):
        if not email:
            raise ValueError("Email is required.")
        user = self.model(email=normalize_email(email), **extra)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password, **extra):
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra)

    def get_by_natural_key(self, username):
        return self.get(email=normalize_email(username))


class User(AbstractBaseUser, PermissionsMixin):
    """Every human actor in SPST: customer, back-office operator or carrier driver."""

    id         = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email      = models.EmailField(unique=True)
    full_name  = models.CharField(max_length=120, blank=True)
    phone      = models.CharField(max_length=30, blank=True)
    is_active  = models.BooleanField(default=True)
    is_staff   = models.BooleanField(default=False)  # Django admin access only
    created_at = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD  = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "User"

    def save(self, *args, **kwargs):
        self.email = normalize_email(self.email)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.email


class StaffUser(models.Model):
    """Back-office role grant. Disabled rows are ignored by the access check."""

    class Role(models.TextChoices):
        ADMIN    = "admin",    "Admin"
        STAFF    = "staff",    "Staff"
        OPERATOR = "operator", "Operator"

    user       = models.OneToOneField(User, on_delete=models.CASCADE, related_name="staff_profile")
    role       = models.CharField(max_length=10, choices=Role.choices, default=Role.STAFF)
    enabled    = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Staff user"

    def __str__(self):
        return f"{self.user.email} ({self.role})"
