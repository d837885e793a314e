from django.contrib.auth.models import AbstractUser
from django.db import models

from .exceptions import ImmutableRecordError


class AppendOnlyModel(models.Model):
    """Rows are written once. Corrections are new rows, never edits."""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(f'{self.__class__.__name__} records cannot be modified')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f'{self.__class__.__name__} records cannot be deleted')


class User(AbstractUser):
    """Extended user model with additional fields"""
    USER_TYPE_REGULAR = 1
    USER_TYPE_SUPERVISOR = 2
    USER_TYPE_CHOICES = [
        (USER_TYPE_REGULAR, 'Regular'),
        (USER_TYPE_SUPERVISOR, 'Supervisor'),
    ]

    email = models.EmailField(unique=True)
    user_phone = models.CharField(max_length=20, blank=True, default='')
    user_type = models.PositiveSmallIntegerField(choices=USER_TYPE_CHOICES, default=USER_TYPE_REGULAR)
    is_admin = models.BooleanField(default=False, help_text="Global administrator across every company")
    last_login_ip = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def is_global_admin(self):
        return self.is_admin or self.is_superuser


class UsersAudit(AppendOnlyModel):
    """Append-only trail of changes made to user accounts"""
    ACTION_CREATE = 'CREATE'
    ACTION_UPDATE = 'UPDATE'
    ACTION_DEACTIVATE = 'DEACTIVATE'
    ACTION_ACTIVATE = 'ACTIVATE'
    ACTION_PASSWORD_CHANGE = 'PASSWORD_CHANGE'
    ACTION_CHOICES = [
        (ACTION_CREATE, 'Create'),
        (ACTION_UPDATE, 'Update'),
        (ACTION_DEACTIVATE, 'Deactivate'),
        (ACTION_ACTIVATE, 'Activate'),
        (ACTION_PASSWORD_CHANGE, 'Password Change'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='audit_entries')
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_changes')
    action_type = models.CharField(max_length=20, choices=ACTION_CHOICES)
    changes_data = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'users_audit'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='users_audit_user_created_idx'),
            models.Index(fields=['action_type'], name='users_audit_action_idx'),
        ]

    def __str__(self):
        return f"{self.action_type} {self.user_id}"
