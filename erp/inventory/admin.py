from django.contrib import admin

from .models import InventoryLot, InventoryLotStorage, InventoryMovement, InventoryStorage, InventoryVariantStorage


@admin.register(InventoryStorage)
class InventoryStorageAdmin(admin.ModelAdmin):
    list_display = ['inv_storage_code', 'inv_storage_name', 'company', 'sucursal', 'inv_storage_status']
    list_filter = ['inv_storage_status', 'company']
    search_fields = ['inv_storage_code', 'inv_storage_name']


@admin.register(InventoryLot)
class InventoryLotAdmin(admin.ModelAdmin):
    list_display = ['lot_number', 'variant', 'company', 'expiration_date', 'lot_unit_cost', 'lot_status']
    list_filter = ['lot_status', 'company']
    search_fields = ['lot_number', 'lot_origin']
    date_hierarchy = 'expiration_date'


@admin.register(InventoryVariantStorage)
class InventoryVariantStorageAdmin(admin.ModelAdmin):
    list_display = ['variant', 'storage', 'inv_vs_stock', 'inv_vs_stock_reserved', 'inv_vs_stock_min', 'updated_at']
    list_filter = ['storage']
    readonly_fields = ['inv_vs_stock', 'inv_vs_stock_prev', 'inv_vs_stock_reserved', 'inv_vs_stock_committed',
                       'last_user']


@admin.register(InventoryLotStorage)
class InventoryLotStorageAdmin(admin.ModelAdmin):
    list_display = ['lot', 'storage', 'variant', 'inv_ls_stock', 'updated_at']
    list_filter = ['storage']
    readonly_fields = ['inv_ls_stock', 'inv_ls_stock_prev', 'inv_ls_stock_reserved', 'inv_ls_stock_committed',
                       'last_user']


@admin.register(InventoryMovement)
class InventoryMovementAdmin(admin.ModelAdmin):
    list_display = ['id', 'movement_type', 'variant', 'storage', 'lot', 'quantity', 'transfer_role', 'user',
                    'created_at']
    list_filter = ['movement_type', 'storage']
    search_fields = ['related_doc', 'movement_reason']
    date_hierarchy = 'created_at'

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
