from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User, UsersAudit


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'first_name', 'last_name', 'user_type', 'is_admin', 'is_active']
    list_filter = ['is_active', 'is_admin', 'user_type']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('ERP', {'fields': ('user_phone', 'user_type', 'is_admin', 'last_login_ip')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('ERP', {'fields': ('email', 'user_phone', 'user_type', 'is_admin')}),
    )


@admin.register(UsersAudit)
class UsersAuditAdmin(admin.ModelAdmin):
    list_display = ['user', 'action_type', 'changed_by', 'ip_address', 'created_at']
    list_filter = ['action_type', 'created_at']
    search_fields = ['user__username', 'changed_by__username']
    ordering = ['-created_at']
    readonly_fields = ['user', 'changed_by', 'action_type', 'changes_data', 'ip_address', 'created_at']
