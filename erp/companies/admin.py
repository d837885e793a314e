from django.contrib import admin

from .models import Company, CompanyGroup, Country, Sucursal, UsersCompanies, UsersSucursales


@admin.register(CompanyGroup)
class CompanyGroupAdmin(admin.ModelAdmin):
    list_display = ['group_name', 'group_status', 'created_by', 'created_at']
    list_filter = ['group_status']
    search_fields = ['group_name']


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ['country_name', 'country_iso2', 'country_iso3', 'country_currency_iso', 'country_status']
    list_filter = ['country_status']
    search_fields = ['country_name', 'country_iso2']
    ordering = ['country_name']


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['company_name', 'company_id_fiscal', 'group', 'country', 'company_status', 'created_at']
    list_filter = ['company_status', 'country']
    search_fields = ['company_name', 'company_id_fiscal']
    ordering = ['company_name']


@admin.register(Sucursal)
class SucursalAdmin(admin.ModelAdmin):
    list_display = ['sucursal_name', 'company', 'sucursal_status', 'created_at']
    list_filter = ['sucursal_status', 'company']
    search_fields = ['sucursal_name']


@admin.register(UsersCompanies)
class UsersCompaniesAdmin(admin.ModelAdmin):
    list_display = ['user', 'company', 'is_admin', 'created_at']
    list_filter = ['is_admin', 'company']


@admin.register(UsersSucursales)
class UsersSucursalesAdmin(admin.ModelAdmin):
    list_display = ['user', 'sucursal', 'created_at']
