from rest_framework import serializers

from erp.companies.models import Sucursal
from erp.core.serializers import RequiredMessageMixin
from .models import (
    MOVEMENT_TYPE_CHOICES, InventoryLot, InventoryLotStorage, InventoryMovement, InventoryStorage,
    InventoryVariantStorage,
)


class InventoryStorageSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    company_id = serializers.IntegerField(read_only=True)
    id_sucursal = serializers.PrimaryKeyRelatedField(source='sucursal', queryset=Sucursal.objects.all(),
                                                     required=False, allow_null=True)

    class Meta:
        model = InventoryStorage
        fields = ['id', 'company_id', 'id_sucursal', 'inv_storage_code', 'inv_storage_name',
                  'inv_storage_description', 'inv_storage_status', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []


class InventoryLotSerializer(RequiredMessageMixin, serializers.ModelSerializer):
    """Length and range rules for lot fields live in ``validate_lot_data``."""
    company_id = serializers.IntegerField(read_only=True)
    inv_var_id = serializers.IntegerField(source='variant_id')
    lot_number = serializers.CharField()
    lot_origin = serializers.CharField(required=False, allow_blank=True)
    lot_unit_cost = serializers.DecimalField(max_digits=18, decimal_places=3, required=False, allow_null=True)
    lot_unit_cost_ref = serializers.DecimalField(max_digits=18, decimal_places=3, required=False, allow_null=True)
    lot_unit_currency_id = serializers.IntegerField(required=False, allow_null=True)
    lot_unit_currency_ref_id = serializers.IntegerField(required=False, allow_null=True)

    class Meta:
        model = InventoryLot
        fields = ['id', 'company_id', 'inv_var_id', 'lot_number', 'lot_origin', 'lot_status', 'expiration_date',
                  'manufacture_date', 'lot_notes', 'lot_unit_cost', 'lot_unit_currency_id', 'lot_unit_cost_ref',
                  'lot_unit_currency_ref_id', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        validators = []


class LotValidationSerializer(serializers.Serializer):
    lot_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lot_origin = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lot_unit_cost = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lot_unit_cost_ref = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    expiration_date = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    manufacture_date = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class InventoryMovementSerializer(serializers.ModelSerializer):
    id_inv_storage = serializers.IntegerField(source='storage_id', read_only=True)
    inv_var_id = serializers.IntegerField(source='variant_id', read_only=True)
    inv_lot_id = serializers.IntegerField(source='lot_id', read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    reverses_id = serializers.IntegerField(read_only=True)
    movement_type_display = serializers.CharField(source='get_movement_type_display', read_only=True)

    class Meta:
        model = InventoryMovement
        fields = ['id', 'id_inv_storage', 'inv_var_id', 'inv_lot_id', 'movement_type', 'movement_type_display',
                  'quantity', 'movement_reason', 'related_doc', 'user_id', 'correlation_id', 'transfer_role',
                  'reverses_id', 'created_at']
        read_only_fields = fields


class MovementCreateSerializer(RequiredMessageMixin, serializers.Serializer):
    id_inv_storage = serializers.IntegerField()
    inv_var_id = serializers.IntegerField()
    movement_type = serializers.ChoiceField(choices=MOVEMENT_TYPE_CHOICES)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3)
    inv_lot_id = serializers.IntegerField(required=False, allow_null=True)
    destination_storage_id = serializers.IntegerField(required=False, allow_null=True)
    movement_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
    related_doc = serializers.CharField(max_length=100, required=False, allow_blank=True)
    allow_negative = serializers.BooleanField(required=False, default=False)


class TransferSerializer(RequiredMessageMixin, serializers.Serializer):
    source_storage_id = serializers.IntegerField()
    destination_storage_id = serializers.IntegerField()
    inv_var_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3)
    inv_lot_id = serializers.IntegerField(required=False, allow_null=True)
    movement_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
    related_doc = serializers.CharField(max_length=100, required=False, allow_blank=True)
    allow_negative = serializers.BooleanField(required=False, default=False)


class ReverseMovementSerializer(serializers.Serializer):
    movement_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class InventoryVariantStorageSerializer(serializers.ModelSerializer):
    inv_var_id = serializers.IntegerField(source='variant_id', read_only=True)
    id_inv_storage = serializers.IntegerField(source='storage_id', read_only=True)
    last_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryVariantStorage
        fields = ['id', 'inv_var_id', 'id_inv_storage', 'inv_vs_stock', 'inv_vs_stock_reserved',
                  'inv_vs_stock_committed', 'inv_vs_stock_prev', 'inv_vs_stock_min', 'last_user_id',
                  'created_at', 'updated_at']
        # stock figures change only through movements; the minimum is configuration
        read_only_fields = ['inv_vs_stock', 'inv_vs_stock_reserved', 'inv_vs_stock_committed',
                            'inv_vs_stock_prev', 'created_at', 'updated_at']

    def validate_inv_vs_stock_min(self, value):
        if value < 0:
            raise serializers.ValidationError('inv_vs_stock_min cannot be negative')
        return value


class InventoryLotStorageSerializer(serializers.ModelSerializer):
    inv_lot_id = serializers.IntegerField(source='lot_id', read_only=True)
    inv_var_id = serializers.IntegerField(source='variant_id', read_only=True)
    id_inv_storage = serializers.IntegerField(source='storage_id', read_only=True)
    lot_number = serializers.CharField(source='lot.lot_number', read_only=True)
    last_user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryLotStorage
        fields = ['id', 'inv_lot_id', 'lot_number', 'inv_var_id', 'id_inv_storage', 'inv_ls_stock',
                  'inv_ls_stock_reserved', 'inv_ls_stock_committed', 'inv_ls_stock_prev', 'inv_ls_stock_min',
                  'last_user_id', 'created_at', 'updated_at']
        read_only_fields = fields
