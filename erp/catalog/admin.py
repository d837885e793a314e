from django.contrib import admin

from .models import (
    Inventory, InventoryAttr, InventoryAttrValue, InventoryFamily, InventoryTax,
    InventoryVariant, InventoryVariantAttr, SucursalTax, Tax,
)


@admin.register(Tax)
class TaxAdmin(admin.ModelAdmin):
    list_display = ['tax_code', 'tax_name', 'company', 'tax_type', 'tax_value', 'tax_status']
    list_filter = ['tax_type', 'tax_status', 'company']
    search_fields = ['tax_code', 'tax_name']


@admin.register(InventoryFamily)
class InventoryFamilyAdmin(admin.ModelAdmin):
    list_display = ['inv_family_code', 'inv_family_name', 'company', 'inv_is_stockable', 'inv_is_lot_managed',
                    'inv_family_status']
    list_filter = ['inv_family_status', 'company']
    search_fields = ['inv_family_code', 'inv_family_name']


class InventoryTaxInline(admin.TabularInline):
    model = InventoryTax
    extra = 0


class InventoryVariantInline(admin.TabularInline):
    model = InventoryVariant
    extra = 0


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ['inv_code', 'inv_description', 'family', 'inv_type', 'inv_is_stockable', 'inv_status']
    list_filter = ['inv_status', 'inv_type', 'company']
    search_fields = ['inv_code', 'inv_description']
    inlines = [InventoryTaxInline, InventoryVariantInline]


class InventoryVariantAttrInline(admin.TabularInline):
    model = InventoryVariantAttr
    extra = 0


@admin.register(InventoryVariant)
class InventoryVariantAdmin(admin.ModelAdmin):
    list_display = ['inv_var_sku', 'inventory', 'inv_var_status', 'created_at']
    list_filter = ['inv_var_status']
    search_fields = ['inv_var_sku', 'inventory__inv_code']
    inlines = [InventoryVariantAttrInline]


class InventoryAttrValueInline(admin.TabularInline):
    model = InventoryAttrValue
    extra = 0


@admin.register(InventoryAttr)
class InventoryAttrAdmin(admin.ModelAdmin):
    list_display = ['attr_name', 'company', 'attr_status']
    list_filter = ['attr_status', 'company']
    inlines = [InventoryAttrValueInline]


@admin.register(SucursalTax)
class SucursalTaxAdmin(admin.ModelAdmin):
    list_display = ['sucursal', 'tax', 'created_at']
