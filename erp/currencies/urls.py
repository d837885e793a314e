from django.urls import path

from . import views

urlpatterns = [
    path('coins/', views.currency_list_create, name='currency-list-create'),
    path('coins/<int:pk>/', views.currency_detail, name='currency-detail'),
    path('companies/<int:pk>/coins/', views.company_currencies, name='company-currencies'),
    path('currencies-exchanges/', views.exchange_list_create, name='exchange-list-create'),
    path('currencies-exchanges/history/', views.exchange_history, name='exchange-history'),
    path('currencies-exchanges/convert/', views.exchange_convert, name='exchange-convert'),
    path('currencies-exchanges/<int:pk>/', views.exchange_detail, name='exchange-detail'),
]
