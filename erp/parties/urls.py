from django.urls import path

from . import views

urlpatterns = [
    path('customers/', views.customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', views.customer_detail, name='customer-detail'),
]
