import django_filters
from django.db.models import Q

from .models import Inventory, InventoryFamily, InventoryVariant, Tax


class TaxFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='tax_status')
    tax_type = django_filters.NumberFilter(field_name='tax_type')

    class Meta:
        model = Tax
        fields = ['status', 'tax_type']


class InventoryFamilyFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='inv_family_status')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = InventoryFamily
        fields = ['status', 'search']

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(inv_family_code__icontains=value) | Q(inv_family_name__icontains=value))


class InventoryFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='inv_status')
    family = django_filters.NumberFilter(field_name='family_id')
    inv_type = django_filters.NumberFilter(field_name='inv_type')
    is_stockable = django_filters.BooleanFilter(field_name='inv_is_stockable')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Inventory
        fields = ['status', 'family', 'inv_type', 'is_stockable', 'search']

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(inv_code__icontains=value) | Q(inv_description__icontains=value))


class InventoryVariantFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='inv_var_status')
    inv_id = django_filters.NumberFilter(field_name='inventory_id')
    sku = django_filters.CharFilter(field_name='inv_var_sku', lookup_expr='icontains')

    class Meta:
        model = InventoryVariant
        fields = ['status', 'inv_id', 'sku']
