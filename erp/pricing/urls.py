from django.urls import path

from . import views

urlpatterns = [
    path('types-of-prices/', views.type_of_price_list_create, name='type-of-price-list-create'),
    path('types-of-prices/<int:pk>/', views.type_of_price_detail, name='type-of-price-detail'),
    path('inventory/prices/', views.price_create, name='price-create'),
    path('inventory/prices/<int:pk>/', views.price_detail, name='price-detail'),
    path('inventory/prices/<int:pk>/set-current/', views.price_set_current, name='price-set-current'),
    path('inventory/prices/variant/<int:variant_id>/', views.variant_price_history, name='variant-price-history'),
    path('inventory/prices/variant/<int:variant_id>/current/', views.variant_current_prices,
         name='variant-current-prices'),
]
