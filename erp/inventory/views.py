import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from erp.core.exceptions import NotFoundError, ValidationError
from erp.core.responses import api_response, paginated_response
from erp.catalog.services import get_variant
from erp.core.utils import get_company_id, get_int_param, require_company_admin
from . import services
from .filters import (
    InventoryLotFilter, InventoryLotStorageFilter, InventoryMovementFilter, InventoryStorageFilter,
    InventoryVariantStorageFilter,
)
from .models import InventoryLot, InventoryLotStorage, InventoryMovement, InventoryStorage, InventoryVariantStorage
from .serializers import (
    InventoryLotSerializer, InventoryLotStorageSerializer, InventoryMovementSerializer,
    InventoryStorageSerializer, InventoryVariantStorageSerializer, LotValidationSerializer,
    MovementCreateSerializer, ReverseMovementSerializer, TransferSerializer,
)
from .validators import validate_lot_data

logger = logging.getLogger(__name__)


def _check_allow_negative(request, company_id, allow_negative):
    if allow_negative:
        require_company_admin(request, company_id)
    return allow_negative


# Storage views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def storage_list_create(request):
    """List all storages or create a new storage"""
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = InventoryStorage.objects.filter(company_id=company_id)
        queryset = InventoryStorageFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('inv_storage_code'), InventoryStorageSerializer)

    require_company_admin(request, company_id)
    serializer = InventoryStorageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    storage = services.create_storage(company_id, serializer.validated_data)
    return api_response(InventoryStorageSerializer(storage).data, message='Storage created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def storage_detail(request, pk):
    """Retrieve, update or deactivate a storage"""
    company_id = get_company_id(request)
    storage = services.get_storage(company_id, pk)

    if request.method == 'GET':
        return api_response(InventoryStorageSerializer(storage).data)

    require_company_admin(request, company_id)
    if request.method == 'DELETE':
        storage.inv_storage_status = 0
        storage.save(update_fields=['inv_storage_status', 'updated_at'])
        return api_response(message='Storage deactivated successfully')

    serializer = InventoryStorageSerializer(storage, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    storage = services.update_storage(storage, serializer.validated_data)
    return api_response(InventoryStorageSerializer(storage).data, message='Storage updated successfully')


# Lot views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def lot_list_create(request):
    """List all lots or create a new lot"""
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = InventoryLot.objects.filter(company_id=company_id)
        queryset = InventoryLotFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('-created_at', '-id'), InventoryLotSerializer)

    serializer = InventoryLotSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    lot = services.create_lot(company_id, serializer.validated_data)
    return api_response(InventoryLotSerializer(lot).data, message='Lot created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def lot_detail(request, pk):
    """Retrieve, update or delete a lot"""
    company_id = get_company_id(request)
    lot = services.get_lot(company_id, pk)

    if request.method == 'GET':
        return api_response(InventoryLotSerializer(lot).data)
    if request.method == 'DELETE':
        services.delete_lot(lot)
        return api_response(message='Lot deleted successfully')

    serializer = InventoryLotSerializer(lot, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    lot = services.update_lot(lot, serializer.validated_data)
    return api_response(InventoryLotSerializer(lot).data, message='Lot updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lot_summary(request):
    """Get lot counts by status and expiration"""
    company_id = get_company_id(request)
    summary = services.get_lots_summary(company_id, get_int_param(request, 'inv_var_id'))
    return api_response(summary)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def lot_validate(request):
    """Dry-run the lot field rules without writing anything."""
    serializer = LotValidationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return api_response(validate_lot_data(serializer.validated_data))


# Movement views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def movement_list_create(request):
    """List stock movements or record a new movement"""
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = InventoryMovement.objects.filter(storage__company_id=company_id)
        queryset = InventoryMovementFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('-created_at', '-id'), InventoryMovementSerializer)

    serializer = MovementCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    movements = services.record_movement(
        data['id_inv_storage'],
        data['inv_var_id'],
        data['movement_type'],
        data['quantity'],
        request.user,
        lot_id=data.get('inv_lot_id'),
        reason=data.get('movement_reason'),
        related_doc=data.get('related_doc'),
        destination_storage_id=data.get('destination_storage_id'),
        allow_negative=_check_allow_negative(request, company_id, data['allow_negative']),
        company_id=company_id,
    )
    return api_response(InventoryMovementSerializer(movements, many=True).data,
                        message='Movement recorded successfully', status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def movement_detail(request, pk):
    """Retrieve a stock movement"""
    company_id = get_company_id(request)
    movement = InventoryMovement.objects.filter(pk=pk, storage__company_id=company_id).first()
    if movement is None:
        raise NotFoundError('Movement not found')
    return api_response(InventoryMovementSerializer(movement).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def movement_transfer(request):
    """Transfer stock between two storages"""
    company_id = get_company_id(request)
    serializer = TransferSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    movements = services.record_transfer(
        data['source_storage_id'],
        data['destination_storage_id'],
        data['inv_var_id'],
        data['quantity'],
        request.user,
        lot_id=data.get('inv_lot_id'),
        reason=data.get('movement_reason'),
        related_doc=data.get('related_doc'),
        allow_negative=_check_allow_negative(request, company_id, data['allow_negative']),
        company_id=company_id,
    )
    return api_response(InventoryMovementSerializer(movements, many=True).data,
                        message='Transfer recorded successfully', status_code=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def movement_reverse(request, pk):
    """Reverse a stock movement"""
    company_id = get_company_id(request)
    serializer = ReverseMovementSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    movements = services.reverse_movement(pk, request.user, reason=serializer.validated_data.get('movement_reason'),
                                          company_id=company_id)
    return api_response(InventoryMovementSerializer(movements, many=True).data,
                        message='Movement reversed successfully', status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def movement_statistics(request):
    """Get movement totals with optional filtering"""
    company_id = get_company_id(request)
    filterset = InventoryMovementFilter(request.query_params, queryset=InventoryMovement.objects.none())
    if not filterset.is_valid():
        raise ValidationError(errors=[{'path': field, 'msg': str(messages[0])}
                                      for field, messages in filterset.errors.items()])
    params = filterset.form.cleaned_data
    stats = services.get_movement_statistics(
        company_id,
        date_from=params.get('date_from'),
        date_to=params.get('date_to'),
        movement_type=params.get('movement_type'),
    )
    return api_response(stats)


# Balance views
def _required_int_param(request, name):
    value = get_int_param(request, name)
    if value is None:
        raise ValidationError(errors=[{'path': name, 'msg': f'{name} is required'}])
    return value


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def variant_storage_list(request):
    """List variant stock per storage"""
    company_id = get_company_id(request)
    queryset = InventoryVariantStorage.objects.filter(storage__company_id=company_id)
    queryset = InventoryVariantStorageFilter(request.query_params, queryset=queryset).qs
    return paginated_response(request, queryset.order_by('variant_id', 'storage_id'),
                              InventoryVariantStorageSerializer)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def variant_storage_detail(request, pk):
    """Retrieve a variant stock row or update its minimum"""
    company_id = get_company_id(request)
    balance = InventoryVariantStorage.objects.filter(pk=pk, storage__company_id=company_id).first()
    if balance is None:
        raise NotFoundError('Variant storage not found')

    if request.method == 'GET':
        return api_response(InventoryVariantStorageSerializer(balance).data)

    require_company_admin(request, company_id)
    serializer = InventoryVariantStorageSerializer(balance, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return api_response(serializer.data, message='Variant storage updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lot_storage_list(request):
    """List lot stock per storage"""
    company_id = get_company_id(request)
    queryset = InventoryLotStorage.objects.select_related('lot').filter(storage__company_id=company_id)
    queryset = InventoryLotStorageFilter(request.query_params, queryset=queryset).qs
    return paginated_response(request, queryset.order_by('lot_id', 'storage_id'), InventoryLotStorageSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def variant_storage_summary(request):
    """Stock totals of a variant across storages"""
    company_id = get_company_id(request)
    variant = get_variant(company_id, _required_int_param(request, 'inv_var_id'))
    summary = services.get_variant_stock_summary(variant.pk, get_int_param(request, 'id_inv_storage'))
    return api_response({'inv_var_id': variant.pk, **summary})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lot_storage_summary(request):
    """Stock totals of a lot across storages"""
    company_id = get_company_id(request)
    lot = services.get_lot(company_id, _required_int_param(request, 'inv_lot_id'))
    summary = services.get_lot_stock_summary(lot.pk, get_int_param(request, 'id_inv_storage'))
    return api_response({'inv_lot_id': lot.pk, **summary})
