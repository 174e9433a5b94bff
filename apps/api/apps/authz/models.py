"""
Authz models: auth_user (the doctor account).

Every clinical record is owned by exactly one User; the user's id is the
tenant boundary for all clinical queries.
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Doctor account.

    Fields:
    - id: UUID PK
    - email: unique, login identifier
    - name, phone
    - crm: medical council registration number
    - specialty, clinic_name, clinic_address
    - timezone, locale
    - notifications_enabled
    - created_at, updated_at
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    crm = models.CharField(max_length=20, blank=True, null=True, help_text='CRM registration number')
    specialty = models.CharField(max_length=100, blank=True, null=True)
    clinic_name = models.CharField(max_length=255, blank=True, null=True)
    clinic_address = models.CharField(max_length=500, blank=True, null=True)
    timezone = models.CharField(max_length=64, default='America/Sao_Paulo')
    locale = models.CharField(max_length=10, default='pt_BR')
    notifications_enabled = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Required for admin access
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'auth_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['email'], name='idx_user_email'),
            models.Index(fields=['is_active'], name='idx_user_active'),
        ]

    def __str__(self):
        return self.name or self.email
