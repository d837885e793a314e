from rest_framework import serializers

from erp.core.serializers import RequiredMessageMixin
from .models import (
    Inventory, InventoryAttr, InventoryAttrValue, InventoryFamily, InventoryVariant, Tax,
)


class TaxSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    currency_id = serializers.IntegerField(required=False, allow_null=True)

    class Meta:
        model = Tax
        fields = ['id', 'company_id', 'tax_code', 'tax_name', 'tax_description', 'tax_status', 'tax_type',
                  'tax_value', 'currency_id', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []


class InventoryFamilySerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    id_tax = serializers.IntegerField(source='tax_id', required=False, allow_null=True)

    class Meta:
        model = InventoryFamily
        fields = ['id', 'company_id', 'inv_family_code', 'inv_family_name', 'inv_family_status', 'id_tax',
                  'inv_is_stockable', 'inv_is_lot_managed', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []


class AttrValueSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    attr_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryAttrValue
        fields = ['id', 'attr_id', 'attr_value', 'attr_value_status', 'created_at']
        read_only_fields = ['created_at']
        validators = []


class InventoryAttrSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    values = AttrValueSerializer(many=True, read_only=True)
    attr_values = serializers.ListField(child=serializers.CharField(max_length=100), write_only=True,
                                        required=False)

    class Meta:
        model = InventoryAttr
        fields = ['id', 'company_id', 'attr_name', 'attr_description', 'attr_status', 'values', 'attr_values',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []


class InventoryVariantSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    inv_id = serializers.IntegerField(source='inventory_id', read_only=True)
    attr_values = serializers.ListField(child=serializers.IntegerField(), write_only=True, required=False)
    attributes = serializers.SerializerMethodField()

    class Meta:
        model = InventoryVariant
        fields = ['id', 'inv_id', 'inv_var_sku', 'inv_var_description', 'inv_var_status', 'attr_values',
                  'attributes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []

    def get_attributes(self, obj):
        return [
            {
                'attr_id': va.attr_value.attr_id,
                'attr_name': va.attr_value.attr.attr_name,
                'attr_value_id': va.attr_value_id,
                'attr_value': va.attr_value.attr_value,
            }
            for va in obj.variant_attrs.select_related('attr_value__attr').order_by('id')
        ]


class VariantCreateSerializer(InventoryVariantSerializer):
    inv_id = serializers.IntegerField(source='inventory_id')

    class Meta(InventoryVariantSerializer.Meta):
        pass


class NestedVariantSerializer(RequiredMessageMixin, serializers.Serializer):
    inv_var_sku = serializers.CharField(max_length=100)
    inv_var_description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    attr_values = serializers.ListField(child=serializers.IntegerField(), required=False)


class InventorySerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    id_inv_family = serializers.IntegerField(source='family_id')
    taxes = serializers.ListField(child=serializers.IntegerField(), write_only=True, required=False)
    variants = NestedVariantSerializer(many=True, write_only=True, required=False)
    tax_ids = serializers.SerializerMethodField()

    class Meta:
        model = Inventory
        fields = ['id', 'company_id', 'id_inv_family', 'inv_code', 'inv_description', 'inv_description_detail',
                  'inv_status', 'inv_type', 'inv_has_variants', 'inv_is_exempt', 'inv_is_stockable',
                  'inv_is_lot_managed', 'inv_url_image', 'taxes', 'variants', 'tax_ids',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []
        extra_kwargs = {
            'inv_is_stockable': {'required': False},
            'inv_is_lot_managed': {'required': False},
        }

    def get_tax_ids(self, obj):
        return sorted(obj.inventory_taxes.values_list('tax_id', flat=True))


class IdListSerializer(RequiredMessageMixin, serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    remove_missing = serializers.BooleanField(default=True)
