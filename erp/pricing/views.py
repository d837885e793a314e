from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from erp.catalog.services import get_variant
from erp.core.responses import api_response, paginated_response
from erp.core.utils import get_company_id, get_int_param, require_company_admin
from . import services
from .models import TypeOfPrice
from .serializers import InventoryPriceHistorySerializer, PriceSnapshotSerializer, TypeOfPriceSerializer


# Type of price views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def type_of_price_list_create(request):
    """List types of prices or create a new one"""
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = TypeOfPrice.objects.filter(company_id=company_id)
        status_param = get_int_param(request, 'status')
        if status_param is not None:
            queryset = queryset.filter(typeprice_status=status_param)
        return paginated_response(request, queryset.order_by('typeprice_name'), TypeOfPriceSerializer)

    require_company_admin(request, company_id)
    serializer = TypeOfPriceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    typeprice = services.create_type_of_price(company_id, serializer.validated_data)
    return api_response(TypeOfPriceSerializer(typeprice).data, message='Type of price created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def type_of_price_detail(request, pk):
    """Retrieve, update or deactivate a type of price"""
    company_id = get_company_id(request)
    typeprice = services.get_type_of_price(company_id, pk)

    if request.method == 'GET':
        return api_response(TypeOfPriceSerializer(typeprice).data)

    require_company_admin(request, company_id)
    if request.method == 'DELETE':
        typeprice.typeprice_status = 0
        typeprice.save(update_fields=['typeprice_status', 'updated_at'])
        return api_response(message='Type of price deactivated successfully')

    serializer = TypeOfPriceSerializer(typeprice, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    typeprice = services.update_type_of_price(typeprice, serializer.validated_data)
    return api_response(TypeOfPriceSerializer(typeprice).data, message='Type of price updated successfully')


# Price views
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def price_create(request):
    """Create a price snapshot and make it current"""
    company_id = get_company_id(request)
    serializer = PriceSnapshotSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    snapshot = services.snapshot_price(
        data['inv_var_id'],
        data['typeprice_id'],
        data['price_base_local'],
        data['tax_amount_local'],
        data['cost_local'],
        request.user,
        cost_avg_local=data.get('cost_avg_local'),
        valid_from=data.get('valid_from'),
        company_id=company_id,
    )
    return api_response(InventoryPriceHistorySerializer(snapshot).data, message='Inventory price created',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def price_detail(request, pk):
    """Retrieve a price snapshot"""
    company_id = get_company_id(request)
    return api_response(InventoryPriceHistorySerializer(services.get_price(company_id, pk)).data)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated])
def price_set_current(request, pk):
    """Make an older price snapshot current"""
    company_id = get_company_id(request)
    snapshot = services.set_current(pk, company_id=company_id)
    return api_response(InventoryPriceHistorySerializer(snapshot).data, message='Inventory price set as current')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def variant_price_history(request, variant_id):
    """List price history of a variant"""
    company_id = get_company_id(request)
    variant = get_variant(company_id, variant_id)
    queryset = services.get_price_history(variant.pk, get_int_param(request, 'typeprice_id'))
    return paginated_response(request, queryset.select_related('typeprice'), InventoryPriceHistorySerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def variant_current_prices(request, variant_id):
    """Get current prices of a variant"""
    company_id = get_company_id(request)
    variant = get_variant(company_id, variant_id)
    prices = services.get_current_prices(variant.pk)
    return api_response(InventoryPriceHistorySerializer(prices, many=True).data)
