import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from erp.companies.models import Company
from erp.core.exceptions import NotFoundError, PermissionDeniedError
from erp.core.responses import api_response, paginated_response
from erp.core.utils import get_company_id, get_int_param, require_company_admin
from . import services
from .models import Currency, CurrencyExchange
from .serializers import (
    CompanyCurrencyAssignmentSerializer, ConversionResultSerializer, ConvertSerializer,
    CurrencyExchangeHistorySerializer,
    CurrencyExchangeSerializer, CurrencySerializer,
)

logger = logging.getLogger(__name__)


# Coin views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def currency_list_create(request):
    """List all currencies or create a new currency"""
    if request.method == 'GET':
        currencies = services.get_currencies(status=get_int_param(request, 'status'))
        return api_response(currencies)

    if not request.user.is_global_admin:
        raise PermissionDeniedError('Administrator privileges required')
    serializer = CurrencySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    currency = services.create_currency(serializer.validated_data)
    return api_response(CurrencySerializer(currency).data, message='Currency created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def currency_detail(request, pk):
    """Retrieve or update a currency"""
    currency = get_object_or_404(Currency, pk=pk)

    if request.method == 'GET':
        return api_response(CurrencySerializer(currency).data)

    if not request.user.is_global_admin:
        raise PermissionDeniedError('Administrator privileges required')
    serializer = CurrencySerializer(currency, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    currency = services.update_currency(currency, serializer.validated_data)
    return api_response(CurrencySerializer(currency).data, message='Currency updated successfully')


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def company_currencies(request, pk):
    """Currencies enabled for a company. PUT replaces the whole set."""
    company = get_object_or_404(Company, pk=pk)
    if request.method == 'GET':
        if get_company_id(request) != company.pk:
            raise PermissionDeniedError('Invalid Company ID')
        currencies = Currency.objects.filter(company_currencies__company=company).order_by('currency_iso_code')
        return api_response(CurrencySerializer(currencies, many=True).data)

    require_company_admin(request, company.pk)
    serializer = CompanyCurrencyAssignmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = services.assign_company_currencies(
        company, serializer.validated_data['currency_ids'],
        remove_missing=serializer.validated_data['remove_missing'],
    )
    return api_response(result, message='Company currencies updated successfully')


# Currency exchange views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def exchange_list_create(request):
    """List exchange rates or create a new rate"""
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = (
            CurrencyExchange.objects.select_related('currency')
            .filter(company_id=company_id)
            .order_by('currency_exc_type', 'currency__currency_name')
        )
        exchange_status = get_int_param(request, 'status')
        if exchange_status is not None:
            queryset = queryset.filter(currency_exc_status=exchange_status)
        exchange_type = get_int_param(request, 'type')
        if exchange_type is not None:
            queryset = queryset.filter(currency_exc_type=exchange_type)
        return paginated_response(request, queryset, CurrencyExchangeSerializer)

    require_company_admin(request, company_id)
    serializer = CurrencyExchangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    exchange = services.create_exchange(company_id, serializer.validated_data, user=request.user)
    return api_response(CurrencyExchangeSerializer(exchange).data, message='Currency exchange created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def exchange_detail(request, pk):
    """Retrieve, update or deactivate an exchange rate"""
    company_id = get_company_id(request)
    exchange = CurrencyExchange.objects.select_related('currency').filter(pk=pk, company_id=company_id).first()
    if exchange is None:
        raise NotFoundError('Currency exchange not found')

    if request.method == 'GET':
        return api_response(CurrencyExchangeSerializer(exchange).data)

    require_company_admin(request, company_id)
    if request.method == 'DELETE':
        services.update_exchange(exchange.pk, {'currency_exc_status': 0}, user=request.user, company_id=company_id)
        return api_response(message='Currency exchange deactivated successfully')

    serializer = CurrencyExchangeSerializer(exchange, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    exchange = services.update_exchange(exchange.pk, serializer.validated_data, user=request.user,
                                        company_id=company_id)
    return api_response(CurrencyExchangeSerializer(exchange).data, message='Currency exchange updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def exchange_history(request):
    """List exchange rate history, newest first"""
    company_id = get_company_id(request)
    queryset = services.get_exchange_history(company_id, get_int_param(request, 'currency_id'))
    return paginated_response(request, queryset, CurrencyExchangeHistorySerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def exchange_convert(request):
    """Convert an amount between two company currencies"""
    company_id = get_company_id(request)
    serializer = ConvertSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = services.convert_between(
        company_id,
        serializer.validated_data['from_currency_id'],
        serializer.validated_data['to_currency_id'],
        serializer.validated_data['amount'],
    )
    return api_response(ConversionResultSerializer(result).data, message='Conversion successful')
