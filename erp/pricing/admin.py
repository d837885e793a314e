from django.contrib import admin

from .models import InventoryPriceHistory, TypeOfPrice


@admin.register(TypeOfPrice)
class TypeOfPriceAdmin(admin.ModelAdmin):
    list_display = ['typeprice_name', 'company', 'typeprice_status', 'created_at']
    list_filter = ['typeprice_status', 'company']
    search_fields = ['typeprice_name']


@admin.register(InventoryPriceHistory)
class InventoryPriceHistoryAdmin(admin.ModelAdmin):
    list_display = ['variant', 'typeprice', 'is_current', 'price_local', 'price_stable', 'price_ref',
                    'valid_from', 'created_at']
    list_filter = ['is_current', 'typeprice']
    date_hierarchy = 'created_at'

    def has_change_permission(self, request, obj=None):
        return False
