import logging

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from erp.core.exceptions import PermissionDeniedError
from erp.core.permissions import IsGlobalAdmin
from erp.core.responses import api_response, paginated_response
from erp.core.utils import get_company_id, get_int_param, require_company_admin
from . import services
from .models import CompanyGroup, Country, Sucursal
from .serializers import (
    CompanyGroupSerializer, CompanySerializer, CountrySerializer,
    SucursalAssignmentSerializer, SucursalSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


# Group views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def group_list_create(request):
    if request.method == 'GET':
        queryset = CompanyGroup.objects.all().order_by('id')
        group_status = get_int_param(request, 'status')
        if group_status is not None:
            queryset = queryset.filter(group_status=group_status)
        return paginated_response(request, queryset, CompanyGroupSerializer)

    serializer = CompanyGroupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    group = serializer.save(created_by=request.user)
    return api_response(CompanyGroupSerializer(group).data, message='Group created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def group_detail(request, pk):
    group = get_object_or_404(CompanyGroup, pk=pk)

    if request.method == 'GET':
        return api_response(CompanyGroupSerializer(group).data)
    if request.method == 'DELETE':
        group.group_status = 0
        group.save(update_fields=['group_status', 'updated_at'])
        return api_response(message='Group deactivated successfully')

    serializer = CompanyGroupSerializer(group, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return api_response(serializer.data, message='Group updated successfully')


# Country views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def country_list_create(request):
    if request.method == 'GET':
        countries = services.get_countries(status=get_int_param(request, 'status'))
        return api_response(countries)

    if not request.user.is_global_admin:
        raise PermissionDeniedError('Administrator privileges required')
    serializer = CountrySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    country = services.create_country(serializer.validated_data)
    return api_response(CountrySerializer(country).data, message='Country created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def country_detail(request, pk):
    country = get_object_or_404(Country, pk=pk)

    if request.method == 'GET':
        return api_response(CountrySerializer(country).data)

    if not request.user.is_global_admin:
        raise PermissionDeniedError('Administrator privileges required')
    serializer = CountrySerializer(country, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    country = services.update_country(country, serializer.validated_data)
    return api_response(CountrySerializer(country).data, message='Country updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def country_continents(request):
    """List continents of active countries"""
    return api_response(services.get_regions('continent_name'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def country_subcontinents(request):
    """List subcontinents of active countries"""
    return api_response(services.get_regions('subcontinent_name'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def countries_by_continent(request, name):
    """List active countries of a continent"""
    return paginated_response(request, services.get_countries_by_region('continent_name', name), CountrySerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def countries_by_subcontinent(request, name):
    """List active countries of a subcontinent"""
    return paginated_response(request, services.get_countries_by_region('subcontinent_name', name),
                              CountrySerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def country_by_iso2(request, iso2):
    """Retrieve a country by its ISO2 code"""
    return api_response(CountrySerializer(services.get_country_by_iso2(iso2)).data)


# Company views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def company_list_create(request):
    """Global admins see every company, other users only their own"""
    if request.method == 'GET':
        queryset = services.get_user_companies(request.user)
        company_status = get_int_param(request, 'status')
        if company_status is not None:
            queryset = queryset.filter(company_status=company_status)
        return paginated_response(request, queryset, CompanySerializer)

    if not request.user.is_global_admin:
        raise PermissionDeniedError('Administrator privileges required')
    serializer = CompanySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    company = services.create_company(serializer.validated_data, user=request.user)
    return api_response(CompanySerializer(company).data, message='Company created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def company_detail(request, pk):
    company = get_object_or_404(services.get_user_companies(request.user), pk=pk)

    if request.method == 'GET':
        return api_response(CompanySerializer(company).data)

    require_company_admin(request, company.pk)
    if request.method == 'DELETE':
        company.company_status = 0
        company.save(update_fields=['company_status', 'updated_at'])
        logger.info(f"Company {company.pk} deactivated by {request.user.username}")
        return api_response(message='Company deactivated successfully')

    serializer = CompanySerializer(company, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    company = services.update_company(company, serializer.validated_data)
    return api_response(CompanySerializer(company).data, message='Company updated successfully')


# Sucursal views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sucursal_list_create(request):
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = Sucursal.objects.filter(company_id=company_id).order_by('id')
        sucursal_status = get_int_param(request, 'status')
        if sucursal_status is not None:
            queryset = queryset.filter(sucursal_status=sucursal_status)
        return paginated_response(request, queryset, SucursalSerializer)

    require_company_admin(request, company_id)
    serializer = SucursalSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    sucursal = serializer.save(company_id=company_id)
    return api_response(SucursalSerializer(sucursal).data, message='Sucursal created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sucursal_detail(request, pk):
    company_id = get_company_id(request)
    sucursal = services.get_sucursal(company_id, pk)

    if request.method == 'GET':
        return api_response(SucursalSerializer(sucursal).data)

    require_company_admin(request, company_id)
    if request.method == 'DELETE':
        sucursal.sucursal_status = 0
        sucursal.save(update_fields=['sucursal_status', 'updated_at'])
        return api_response(message='Sucursal deactivated successfully')

    serializer = SucursalSerializer(sucursal, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return api_response(serializer.data, message='Sucursal updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsGlobalAdmin])
def user_sucursales(request, pk):
    """Replace the set of sucursales a user is assigned to"""
    user = get_object_or_404(User, pk=pk)
    serializer = SucursalAssignmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = services.assign_user_sucursales(
        user, serializer.validated_data['sucursal_ids'],
        remove_missing=serializer.validated_data['remove_missing'],
    )
    return api_response(result, message='User sucursales updated successfully')
