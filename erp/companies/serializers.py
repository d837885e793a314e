from rest_framework import serializers

from erp.core.serializers import RequiredMessageMixin
from .models import Company, CompanyGroup, Country, Sucursal


class CompanyGroupSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    class Meta:
        model = CompanyGroup
        fields = ['id', 'group_name', 'group_status', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']


class CountrySerializer(RequiredMessageMixin, serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = ['id', 'country_name', 'country_iso2', 'country_iso3', 'country_phone_prefix',
                  'country_fiscal_id_label', 'country_currency_iso', 'continent_name', 'subcontinent_name',
                  'country_status', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'country_iso2': {'validators': []}}


class CompanySerializer(RequiredMessageMixin, serializers.ModelSerializer):
    group_id = serializers.PrimaryKeyRelatedField(
        queryset=CompanyGroup.objects.all(), source='group', required=False, allow_null=True
    )
    country_id = serializers.PrimaryKeyRelatedField(
        queryset=Country.objects.all(), source='country', required=False, allow_null=True
    )

    class Meta:
        model = Company
        fields = ['id', 'company_name', 'company_id_fiscal', 'company_status', 'group_id', 'country_id',
                  'company_is_principal', 'company_razon_social', 'company_slug', 'company_email',
                  'company_address', 'company_phone', 'company_website', 'company_color',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        # Uniqueness is reported as a conflict by the service layer
        extra_kwargs = {
            'company_name': {'validators': []},
            'company_id_fiscal': {'validators': []},
        }


class SucursalSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Sucursal
        fields = ['id', 'company_id', 'sucursal_name', 'sucursal_status', 'sucursal_id_fiscal',
                  'sucursal_email', 'sucursal_phone', 'sucursal_address', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SucursalAssignmentSerializer(RequiredMessageMixin, serializers.Serializer):
    sucursal_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    remove_missing = serializers.BooleanField(default=True)
