import django_filters
from django.contrib.auth import get_user_model

User = get_user_model()


class UserFilter(django_filters.FilterSet):
    status = django_filters.NumberFilter(method='filter_status')
    user_type = django_filters.NumberFilter(field_name='user_type')
    is_admin = django_filters.BooleanFilter(field_name='is_admin')

    class Meta:
        model = User
        fields = ['status', 'user_type', 'is_admin']

    def filter_status(self, queryset, name, value):
        return queryset.filter(is_active=bool(value))
