from rest_framework import serializers

from erp.core.serializers import RequiredMessageMixin
from .models import Customer


class CustomerSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'company_id', 'cust_code', 'cust_id_fiscal', 'cust_status', 'cust_description',
                  'cust_address', 'cust_address_complement', 'cust_address_city', 'cust_address_state',
                  'cust_exempt', 'cust_email', 'cust_telephone1', 'cust_telephone2', 'cust_cellphone',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []
