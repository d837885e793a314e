from django.contrib import admin

from .models import CompanyCurrency, Currency, CurrencyExchange, CurrencyExchangeHistory


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ['currency_iso_code', 'currency_name', 'currency_symbol', 'currency_status']
    list_filter = ['currency_status']
    search_fields = ['currency_iso_code', 'currency_name']
    ordering = ['currency_iso_code']


@admin.register(CompanyCurrency)
class CompanyCurrencyAdmin(admin.ModelAdmin):
    list_display = ['company', 'currency', 'conversion_factor', 'created_at']
    list_filter = ['company']


@admin.register(CurrencyExchange)
class CurrencyExchangeAdmin(admin.ModelAdmin):
    list_display = ['company', 'currency', 'currency_exc_type', 'currency_exc_rate', 'exchange_method',
                    'currency_exc_status', 'updated_at']
    list_filter = ['currency_exc_type', 'exchange_method', 'currency_exc_status', 'company']


@admin.register(CurrencyExchangeHistory)
class CurrencyExchangeHistoryAdmin(admin.ModelAdmin):
    list_display = ['company', 'currency', 'currency_exc_type', 'currency_exc_rate', 'exchange_method',
                    'created_by', 'created_at']
    list_filter = ['currency_exc_type', 'company']
    readonly_fields = ['exchange', 'company', 'currency', 'currency_exc_type', 'currency_exc_rate',
                       'exchange_method', 'currency_exc_status', 'created_by', 'created_at']

    def has_delete_permission(self, request, obj=None):
        return False
