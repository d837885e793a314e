from rest_framework import serializers

from erp.core.serializers import RequiredMessageMixin
from .models import EXCHANGE_METHOD_CHOICES, EXCHANGE_TYPE_CHOICES, Currency, CurrencyExchange, CurrencyExchangeHistory


class CurrencySerializer(RequiredMessageMixin, serializers.ModelSerializer):
    class Meta:
        model = Currency
        fields = ['id', 'currency_iso_code', 'currency_name', 'currency_symbol', 'currency_status',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'currency_iso_code': {'validators': []}}


class CurrencyExchangeSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    currency_id = serializers.IntegerField()
    currency_exc_type = serializers.ChoiceField(choices=EXCHANGE_TYPE_CHOICES)
    currency_exc_rate = serializers.DecimalField(max_digits=18, decimal_places=8)
    exchange_method = serializers.ChoiceField(choices=EXCHANGE_METHOD_CHOICES, required=False)
    currency = CurrencySerializer(read_only=True)

    class Meta:
        model = CurrencyExchange
        fields = ['id', 'company_id', 'currency_id', 'currency', 'currency_exc_type', 'currency_exc_rate',
                  'exchange_method', 'currency_exc_status', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        # The (company, currency, type) triple is checked by the service layer
        validators = []


class CurrencyExchangeHistorySerializer(serializers.ModelSerializer):
    currency_exc_rate = serializers.DecimalField(max_digits=18, decimal_places=8)
    currency_iso_code = serializers.CharField(source='currency.currency_iso_code', read_only=True)

    class Meta:
        model = CurrencyExchangeHistory
        fields = ['id', 'exchange', 'company', 'currency', 'currency_iso_code', 'currency_exc_type',
                  'currency_exc_rate', 'exchange_method', 'currency_exc_status', 'created_by', 'created_at']


class ConvertSerializer(RequiredMessageMixin, serializers.Serializer):
    from_currency_id = serializers.IntegerField()
    to_currency_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=3)


class CompanyCurrencyAssignmentSerializer(RequiredMessageMixin, serializers.Serializer):
    currency_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    remove_missing = serializers.BooleanField(default=True)


class ConversionResultSerializer(serializers.Serializer):
    from_currency_id = serializers.IntegerField()
    to_currency_id = serializers.IntegerField()
    converted_amount = serializers.DecimalField(max_digits=18, decimal_places=3)
    from_rate = serializers.DecimalField(max_digits=18, decimal_places=8, allow_null=True)
    from_method = serializers.CharField(allow_null=True)
    to_rate = serializers.DecimalField(max_digits=18, decimal_places=8, allow_null=True)
    to_method = serializers.CharField(allow_null=True)
