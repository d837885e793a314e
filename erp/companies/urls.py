from django.urls import path

from . import views

urlpatterns = [
    path('groups/', views.group_list_create, name='group-list-create'),
    path('groups/<int:pk>/', views.group_detail, name='group-detail'),
    path('countries/', views.country_list_create, name='country-list-create'),
    path('countries/<int:pk>/', views.country_detail, name='country-detail'),
    path('countries/continents/', views.country_continents, name='country-continents'),
    path('countries/subcontinents/', views.country_subcontinents, name='country-subcontinents'),
    path('countries/continent/<str:name>/', views.countries_by_continent, name='countries-by-continent'),
    path('countries/subcontinent/<str:name>/', views.countries_by_subcontinent, name='countries-by-subcontinent'),
    path('countries/iso2/<str:iso2>/', views.country_by_iso2, name='country-by-iso2'),
    path('companies/', views.company_list_create, name='company-list-create'),
    path('companies/<int:pk>/', views.company_detail, name='company-detail'),
    path('sucursales/', views.sucursal_list_create, name='sucursal-list-create'),
    path('sucursales/<int:pk>/', views.sucursal_detail, name='sucursal-detail'),
    path('users/<int:pk>/sucursales/', views.user_sucursales, name='user-sucursales'),
]
