from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['cust_code', 'cust_description', 'cust_id_fiscal', 'company', 'cust_exempt', 'cust_status']
    list_filter = ['cust_status', 'cust_exempt', 'company']
    search_fields = ['cust_code', 'cust_description', 'cust_id_fiscal', 'cust_email']
