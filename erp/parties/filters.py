import django_filters
from django.db.models import Q

from .models import Customer


class CustomerFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(field_name='cust_status')
    exempt = django_filters.BooleanFilter(field_name='cust_exempt')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Customer
        fields = ['status', 'exempt', 'search']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(cust_code__icontains=value)
            | Q(cust_description__icontains=value)
            | Q(cust_id_fiscal__icontains=value)
        )
