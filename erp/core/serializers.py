from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from .models import UsersAudit

User = get_user_model()


class RequiredMessageMixin:
    """Report missing and null fields as ``"<field> is required"``."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            field.error_messages['required'] = f'{name} is required'
            field.error_messages['null'] = f'{name} is required'
            if 'blank' in field.error_messages:
                field.error_messages['blank'] = f'{name} is required'


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'user_phone', 'user_type',
                  'is_admin', 'is_active', 'last_login', 'last_login_ip', 'created_at', 'updated_at']
        read_only_fields = fields


class UserCreateSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'first_name', 'last_name', 'user_phone', 'user_type', 'is_admin']


class UserUpdateSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    username = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(required=False)

    class Meta:
        model = User
        fields = ['username', 'email', 'first_name', 'last_name', 'user_phone', 'user_type', 'is_admin']


class PasswordChangeSerializer(RequiredMessageMixin, serializers.Serializer):
    new_password = serializers.CharField(write_only=True)


class OwnPasswordChangeSerializer(RequiredMessageMixin, serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)


class PasswordResetRequestSerializer(RequiredMessageMixin, serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetSerializer(RequiredMessageMixin, serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    new_password = serializers.CharField(write_only=True)


class CompanyAssignmentSerializer(RequiredMessageMixin, serializers.Serializer):
    company_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    remove_missing = serializers.BooleanField(default=True)


class UsersAuditSerializer(serializers.ModelSerializer):
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = UsersAudit
        fields = ['id', 'user', 'changed_by', 'action_type', 'changes_data', 'ip_address', 'created_at']

    def get_changed_by(self, obj):
        if obj.changed_by_id is None:
            return None
        return {'id': obj.changed_by_id, 'username': obj.changed_by.username}


class CustomTokenObtainPairSerializer(RequiredMessageMixin, TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        # Ensure user is active
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['is_admin'] = user.is_global_admin
        return token


class CustomTokenRefreshSerializer(RequiredMessageMixin, TokenRefreshSerializer):
    """Token refresh that reports deleted or inactive users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except User.DoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')
