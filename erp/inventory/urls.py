from django.urls import path

from . import views

urlpatterns = [
    path('inventory/storages/', views.storage_list_create, name='storage-list-create'),
    path('inventory/storages/<int:pk>/', views.storage_detail, name='storage-detail'),
    path('inventory/lots/', views.lot_list_create, name='lot-list-create'),
    path('inventory/lots/summary/', views.lot_summary, name='lot-summary'),
    path('inventory/lots/validate/', views.lot_validate, name='lot-validate'),
    path('inventory/lots/<int:pk>/', views.lot_detail, name='lot-detail'),
    path('inventory/movements/', views.movement_list_create, name='movement-list-create'),
    path('inventory/movements/transfer/', views.movement_transfer, name='movement-transfer'),
    path('inventory/movements/statistics/', views.movement_statistics, name='movement-statistics'),
    path('inventory/movements/<int:pk>/', views.movement_detail, name='movement-detail'),
    path('inventory/movements/<int:pk>/reverse/', views.movement_reverse, name='movement-reverse'),
    path('inventory/variant-storages/', views.variant_storage_list, name='variant-storage-list'),
    path('inventory/variant-storages/summary/', views.variant_storage_summary, name='variant-storage-summary'),
    path('inventory/variant-storages/<int:pk>/', views.variant_storage_detail, name='variant-storage-detail'),
    path('inventory/lot-storages/', views.lot_storage_list, name='lot-storage-list'),
    path('inventory/lot-storages/summary/', views.lot_storage_summary, name='lot-storage-summary'),
]
