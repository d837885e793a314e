import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from erp.companies.services import get_sucursal
from erp.core.exceptions import NotFoundError
from erp.core.responses import api_response, paginated_response
from erp.core.utils import get_company_id, get_int_param, require_company_admin
from . import services
from .filters import InventoryFamilyFilter, InventoryFilter, InventoryVariantFilter, TaxFilter
from .models import Inventory, InventoryAttr, InventoryFamily, InventoryVariant, Tax
from .serializers import (
    AttrValueSerializer, IdListSerializer, InventoryAttrSerializer, InventoryFamilySerializer,
    InventorySerializer, InventoryVariantSerializer, TaxSerializer, VariantCreateSerializer,
)

logger = logging.getLogger(__name__)


def _get_tax(company_id, pk):
    tax = Tax.objects.filter(pk=pk, company_id=company_id).first()
    if tax is None:
        raise NotFoundError('Tax not found')
    return tax


# Tax views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def tax_list_create(request):
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = TaxFilter(request.query_params, queryset=Tax.objects.filter(company_id=company_id)).qs
        return paginated_response(request, queryset.order_by('tax_code'), TaxSerializer)

    require_company_admin(request, company_id)
    serializer = TaxSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    tax = services.create_tax(company_id, serializer.validated_data)
    return api_response(TaxSerializer(tax).data, message='Tax created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def tax_detail(request, pk):
    company_id = get_company_id(request)
    tax = _get_tax(company_id, pk)

    if request.method == 'GET':
        return api_response(TaxSerializer(tax).data)

    require_company_admin(request, company_id)
    if request.method == 'DELETE':
        tax.tax_status = 0
        tax.save(update_fields=['tax_status', 'updated_at'])
        return api_response(message='Tax deactivated successfully')

    serializer = TaxSerializer(tax, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    tax = services.update_tax(tax, serializer.validated_data)
    return api_response(TaxSerializer(tax).data, message='Tax updated successfully')


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def sucursal_taxes(request, pk):
    """Taxes applied at a sucursal. PUT replaces the whole set."""
    company_id = get_company_id(request)
    sucursal = get_sucursal(company_id, pk)

    if request.method == 'GET':
        taxes = Tax.objects.filter(sucursal_taxes__sucursal=sucursal).order_by('tax_code')
        return api_response(TaxSerializer(taxes, many=True).data)

    require_company_admin(request, company_id)
    serializer = IdListSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = services.assign_sucursal_taxes(sucursal, serializer.validated_data['ids'],
                                            remove_missing=serializer.validated_data['remove_missing'])
    return api_response(result, message='Sucursal taxes updated successfully')


# Family views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def family_list_create(request):
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = InventoryFamily.objects.filter(company_id=company_id)
        queryset = InventoryFamilyFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('id'), InventoryFamilySerializer)

    require_company_admin(request, company_id)
    serializer = InventoryFamilySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    family = services.create_family(company_id, serializer.validated_data)
    return api_response(InventoryFamilySerializer(family).data, message='Inventory family created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def family_detail(request, pk):
    company_id = get_company_id(request)
    family = services.get_family(company_id, pk)

    if request.method == 'GET':
        return api_response(InventoryFamilySerializer(family).data)

    require_company_admin(request, company_id)
    if request.method == 'DELETE':
        family.inv_family_status = 0
        family.save(update_fields=['inv_family_status', 'updated_at'])
        return api_response(message='Inventory family deactivated successfully')

    serializer = InventoryFamilySerializer(family, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    family = services.update_family(family, serializer.validated_data)
    return api_response(InventoryFamilySerializer(family).data, message='Inventory family updated successfully')


# Item views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inventory_list_create(request):
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = Inventory.objects.select_related('family').filter(company_id=company_id)
        queryset = InventoryFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('id'), InventorySerializer)

    serializer = InventorySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    taxes = data.pop('taxes', None)
    variants = data.pop('variants', None)
    inventory = services.create_inventory(company_id, data, taxes=taxes, variants=variants)
    return api_response(InventorySerializer(inventory).data, message='Inventory created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_detail(request, pk):
    company_id = get_company_id(request)
    inventory = services.get_inventory(company_id, pk)

    if request.method == 'GET':
        return api_response(InventorySerializer(inventory).data)
    if request.method == 'DELETE':
        inventory.inv_status = 0
        inventory.save(update_fields=['inv_status', 'updated_at'])
        return api_response(message='Inventory deactivated successfully')

    serializer = InventorySerializer(inventory, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    taxes = data.pop('taxes', None)
    data.pop('variants', None)
    inventory = services.update_inventory(inventory, data, taxes=taxes)
    return api_response(InventorySerializer(inventory).data, message='Inventory updated successfully')


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def inventory_taxes(request, pk):
    company_id = get_company_id(request)
    inventory = services.get_inventory(company_id, pk)

    if request.method == 'GET':
        taxes = Tax.objects.filter(inventory_taxes__inventory=inventory).order_by('tax_code')
        return api_response(TaxSerializer(taxes, many=True).data)

    serializer = IdListSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = services.assign_inventory_taxes(inventory, serializer.validated_data['ids'],
                                             remove_missing=serializer.validated_data['remove_missing'])
    return api_response(result, message='Inventory taxes updated successfully')


# Variant views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def variant_list_create(request):
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = InventoryVariant.objects.filter(inventory__company_id=company_id)
        queryset = InventoryVariantFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('id'), InventoryVariantSerializer)

    serializer = VariantCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    inventory_id = data.pop('inventory_id')
    attr_values = data.pop('attr_values', None)
    variant = services.create_variant(company_id, inventory_id, data, attr_values=attr_values)
    return api_response(InventoryVariantSerializer(variant).data, message='Variant created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def variant_detail(request, pk):
    company_id = get_company_id(request)
    variant = services.get_variant(company_id, pk)

    if request.method == 'GET':
        return api_response(InventoryVariantSerializer(variant).data)
    if request.method == 'DELETE':
        variant.inv_var_status = 0
        variant.save(update_fields=['inv_var_status', 'updated_at'])
        return api_response(message='Variant deactivated successfully')

    serializer = InventoryVariantSerializer(variant, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    attr_values = data.pop('attr_values', None)
    variant = services.update_variant(variant, data, attr_values=attr_values)
    return api_response(InventoryVariantSerializer(variant).data, message='Variant updated successfully')


# Attribute views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def attr_list_create(request):
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = InventoryAttr.objects.prefetch_related('values').filter(company_id=company_id)
        attr_status = get_int_param(request, 'status')
        if attr_status is not None:
            queryset = queryset.filter(attr_status=attr_status)
        return paginated_response(request, queryset.order_by('attr_name'), InventoryAttrSerializer)

    serializer = InventoryAttrSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    values = data.pop('attr_values', None)
    attr = services.create_attr(company_id, data, values=values)
    return api_response(InventoryAttrSerializer(attr).data, message='Attribute created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def attr_detail(request, pk):
    company_id = get_company_id(request)
    attr = services.get_attr(company_id, pk)

    if request.method == 'GET':
        return api_response(InventoryAttrSerializer(attr).data)
    if request.method == 'DELETE':
        attr.attr_status = 0
        attr.save(update_fields=['attr_status', 'updated_at'])
        return api_response(message='Attribute deactivated successfully')

    serializer = InventoryAttrSerializer(attr, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    data.pop('attr_values', None)
    attr = services.update_attr(attr, data)
    return api_response(InventoryAttrSerializer(attr).data, message='Attribute updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attr_value_create(request, pk):
    company_id = get_company_id(request)
    attr = services.get_attr(company_id, pk)
    serializer = AttrValueSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    value = services.add_attr_value(attr, serializer.validated_data['attr_value'])
    return api_response(AttrValueSerializer(value).data, message='Attribute value created successfully',
                        status_code=status.HTTP_201_CREATED)
