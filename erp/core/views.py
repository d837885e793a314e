import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated

from . import services
from .exceptions import PermissionDeniedError
from .filters import UserFilter
from .permissions import IsGlobalAdmin
from .responses import api_response, paginated_response
from .serializers import (
    CompanyAssignmentSerializer, CustomTokenObtainPairSerializer, CustomTokenRefreshSerializer,
    OwnPasswordChangeSerializer, PasswordChangeSerializer, PasswordResetRequestSerializer,
    PasswordResetSerializer, UserCreateSerializer, UserSerializer, UserUpdateSerializer,
    UsersAuditSerializer,
)
from .utils import get_client_ip

logger = logging.getLogger(__name__)

User = get_user_model()


def _user_payload(user):
    from erp.companies.models import UsersCompanies

    data = UserSerializer(user).data
    memberships = (
        UsersCompanies.objects.filter(user=user)
        .select_related('company')
        .order_by('company_id')
    )
    data['companies'] = [
        {
            'id': m.company_id,
            'company_name': m.company.company_name,
            'is_admin': m.is_admin,
        }
        for m in memberships
    ]
    return data


# Auth

@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Exchange username/password for an access and refresh token pair"""
    serializer = CustomTokenObtainPairSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.user

    user.last_login_ip = get_client_ip(request)
    user.save(update_fields=['last_login_ip'])
    logger.info(f"User {user.username} logged in")

    tokens = serializer.validated_data
    return api_response({
        'access': tokens['access'],
        'refresh': tokens['refresh'],
        'user': _user_payload(user),
    }, message='Login successful')


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_token(request):
    serializer = CustomTokenRefreshSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return api_response(serializer.validated_data, message='Token refreshed')


@api_view(['POST'])
@permission_classes([AllowAny])
def request_password_reset(request):
    serializer = PasswordResetRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.request_password_reset(serializer.validated_data['email'])
    return api_response(message='Password reset email sent')


@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password(request):
    serializer = PasswordResetSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.reset_password(
        serializer.validated_data['uid'],
        serializer.validated_data['token'],
        serializer.validated_data['new_password'],
        request=request,
    )
    return api_response(message='Password has been reset')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    """Current user with company memberships"""
    return api_response(_user_payload(request.user))


# Users

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_list_create(request):
    """List users or create a new user"""
    if request.method == 'GET':
        queryset = UserFilter(request.query_params, queryset=User.objects.all()).qs
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(username__icontains=search) |
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search)
            )
        return paginated_response(request, queryset.order_by('id'), UserSerializer)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.create_user(serializer.validated_data, changed_by=request.user, request=request)
    return api_response(UserSerializer(user).data, message='User created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_detail(request, pk):
    """Retrieve or update a user. Users are deactivated, never deleted."""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return api_response(_user_payload(user))
    if request.method == 'DELETE':
        raise PermissionDeniedError('Users cannot be deleted. Deactivate the user instead.')

    serializer = UserUpdateSerializer(user, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    user = services.update_user(user.pk, serializer.validated_data, changed_by=request.user, request=request)
    return api_response(UserSerializer(user).data, message='User updated successfully')


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_deactivate(request, pk):
    user = services.set_user_active(pk, False, changed_by=request.user, request=request)
    return api_response(UserSerializer(user).data, message='User deactivated successfully')


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_activate(request, pk):
    user = services.set_user_active(pk, True, changed_by=request.user, request=request)
    return api_response(UserSerializer(user).data, message='User activated successfully')


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_change_password(request, pk):
    """Administrative password change, no current password needed"""
    serializer = PasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.change_password(pk, serializer.validated_data['new_password'], changed_by=request.user, request=request)
    return api_response(message='Password changed successfully')


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated])
def own_change_password(request):
    serializer = OwnPasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.change_password(
        request.user.pk,
        serializer.validated_data['new_password'],
        changed_by=request.user,
        request=request,
        current_password=serializer.validated_data['current_password'],
    )
    return api_response(message='Password changed successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_audit_history(request, pk):
    user = get_object_or_404(User, pk=pk)
    queryset = user.audit_entries.select_related('changed_by').order_by('-created_at', '-id')
    return paginated_response(request, queryset, UsersAuditSerializer)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_companies(request, pk):
    """Replace the set of companies a user belongs to"""
    from erp.companies.models import Company, UsersCompanies

    user = get_object_or_404(User, pk=pk)
    serializer = CompanyAssignmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    company_ids = services.require_existing_ids(
        Company.objects.all(), serializer.validated_data['company_ids'], 'company_ids'
    )
    result = services.replace_associations(
        UsersCompanies, 'user', user, 'company', company_ids,
        remove_missing=serializer.validated_data['remove_missing'],
    )
    return api_response(result, message='User companies updated successfully')
