from django.urls import path

from . import views

urlpatterns = [
    path('taxes/', views.tax_list_create, name='tax-list-create'),
    path('taxes/<int:pk>/', views.tax_detail, name='tax-detail'),
    path('sucursales/<int:pk>/taxes/', views.sucursal_taxes, name='sucursal-taxes'),
    path('inventory/family/', views.family_list_create, name='family-list-create'),
    path('inventory/family/<int:pk>/', views.family_detail, name='family-detail'),
    path('inventory/items/', views.inventory_list_create, name='inventory-list-create'),
    path('inventory/items/<int:pk>/', views.inventory_detail, name='inventory-detail'),
    path('inventory/items/<int:pk>/taxes/', views.inventory_taxes, name='inventory-taxes'),
    path('inventory/variants/', views.variant_list_create, name='variant-list-create'),
    path('inventory/variants/<int:pk>/', views.variant_detail, name='variant-detail'),
    path('inventory/attributes/', views.attr_list_create, name='attr-list-create'),
    path('inventory/attributes/<int:pk>/', views.attr_detail, name='attr-detail'),
    path('inventory/attributes/<int:pk>/values/', views.attr_value_create, name='attr-value-create'),
]
