"""
URL configuration for the ERP backend.

Every app mounts its routes under ``/api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "ERP Management Admin Panel"
admin.site.site_title = "ERP Management Admin Portal"
admin.site.index_title = "Welcome to the ERP Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('erp.core.urls')),
    path('api/v1/', include('erp.companies.urls')),
    path('api/v1/', include('erp.currencies.urls')),
    path('api/v1/', include('erp.catalog.urls')),
    path('api/v1/', include('erp.inventory.urls')),
    path('api/v1/', include('erp.pricing.urls')),
    path('api/v1/', include('erp.parties.urls')),
]
