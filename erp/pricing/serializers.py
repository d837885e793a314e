from rest_framework import serializers

from erp.core.serializers import RequiredMessageMixin
from .models import InventoryPriceHistory, TypeOfPrice


class TypeOfPriceSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = TypeOfPrice
        fields = ['id', 'company_id', 'typeprice_name', 'typeprice_description', 'typeprice_status',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []


class InventoryPriceHistorySerializer(serializers.ModelSerializer):
    inv_var_id = serializers.IntegerField(source='variant_id', read_only=True)
    typeprice_id = serializers.IntegerField(read_only=True)
    typeprice_name = serializers.CharField(source='typeprice.typeprice_name', read_only=True)
    currency_id_local = serializers.IntegerField(source='currency_local_id', read_only=True)
    currency_id_stable = serializers.IntegerField(source='currency_stable_id', read_only=True)
    currency_id_ref = serializers.IntegerField(source='currency_ref_id', read_only=True)
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryPriceHistory
        fields = ['id', 'inv_var_id', 'typeprice_id', 'typeprice_name', 'is_current',
                  'price_local', 'price_stable', 'price_ref',
                  'price_base_local', 'price_base_stable', 'price_base_ref',
                  'tax_amount_local', 'tax_amount_stable', 'tax_amount_ref',
                  'cost_local', 'cost_stable', 'cost_ref',
                  'cost_avg_local', 'cost_avg_stable', 'cost_avg_ref',
                  'profit_local', 'profit_stable', 'profit_ref',
                  'currency_id_local', 'currency_id_stable', 'currency_id_ref',
                  'valid_from', 'user_id', 'created_at']
        read_only_fields = fields


class PriceSnapshotSerializer(RequiredMessageMixin, serializers.Serializer):
    inv_var_id = serializers.IntegerField()
    typeprice_id = serializers.IntegerField()
    price_base_local = serializers.DecimalField(max_digits=18, decimal_places=3, min_value=0)
    tax_amount_local = serializers.DecimalField(max_digits=18, decimal_places=3, min_value=0, required=False,
                                                default=0)
    cost_local = serializers.DecimalField(max_digits=18, decimal_places=3, min_value=0, required=False, default=0)
    cost_avg_local = serializers.DecimalField(max_digits=18, decimal_places=3, min_value=0, required=False,
                                              allow_null=True)
    valid_from = serializers.DateTimeField(required=False, allow_null=True)
