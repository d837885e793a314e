import django_filters
from django.db.models import Q

from .models import InventoryLot, InventoryLotStorage, InventoryMovement, InventoryStorage, InventoryVariantStorage


class InventoryStorageFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='inv_storage_status')
    id_sucursal = django_filters.NumberFilter(field_name='sucursal_id')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = InventoryStorage
        fields = ['status', 'id_sucursal', 'search']

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(inv_storage_code__icontains=value) | Q(inv_storage_name__icontains=value))


class InventoryLotFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='lot_status')
    inv_var_id = django_filters.NumberFilter(field_name='variant_id')
    lot_number = django_filters.CharFilter(field_name='lot_number', lookup_expr='icontains')
    expiring_before = django_filters.DateFilter(field_name='expiration_date', lookup_expr='lte')

    class Meta:
        model = InventoryLot
        fields = ['status', 'inv_var_id', 'lot_number', 'expiring_before']


class InventoryMovementFilter(django_filters.FilterSet):
    """Filter movements by variant, lot, storage, type, user, document and date range"""
    inv_var_id = django_filters.NumberFilter(field_name='variant_id')
    inv_lot_id = django_filters.NumberFilter(field_name='lot_id')
    id_inv_storage = django_filters.NumberFilter(field_name='storage_id')
    movement_type = django_filters.NumberFilter(field_name='movement_type')
    user_id = django_filters.NumberFilter(field_name='user_id')
    related_doc = django_filters.CharFilter(field_name='related_doc')
    correlation_id = django_filters.UUIDFilter(field_name='correlation_id')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = InventoryMovement
        fields = ['inv_var_id', 'inv_lot_id', 'id_inv_storage', 'movement_type', 'user_id', 'related_doc',
                  'correlation_id', 'date_from', 'date_to']


class InventoryVariantStorageFilter(django_filters.FilterSet):
    inv_var_id = django_filters.NumberFilter(field_name='variant_id')
    id_inv_storage = django_filters.NumberFilter(field_name='storage_id')

    class Meta:
        model = InventoryVariantStorage
        fields = ['inv_var_id', 'id_inv_storage']


class InventoryLotStorageFilter(django_filters.FilterSet):
    inv_lot_id = django_filters.NumberFilter(field_name='lot_id')
    inv_var_id = django_filters.NumberFilter(field_name='variant_id')
    id_inv_storage = django_filters.NumberFilter(field_name='storage_id')

    class Meta:
        model = InventoryLotStorage
        fields = ['inv_lot_id', 'inv_var_id', 'id_inv_storage']
