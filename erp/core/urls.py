from django.urls import path

from . import views

urlpatterns = [
    # Auth endpoints
    path('auth/login/', views.login, name='login'),
    path('auth/refresh/', views.refresh_token, name='token-refresh'),
    path('auth/me/', views.me, name='auth-me'),
    path('auth/request-password-reset/', views.request_password_reset, name='request-password-reset'),
    path('auth/reset-password/', views.reset_password, name='reset-password'),

    # User endpoints
    path('users/', views.user_list_create, name='user-list-create'),
    path('users/me/change-password/', views.own_change_password, name='user-own-change-password'),
    path('users/<int:pk>/', views.user_detail, name='user-detail'),
    path('users/<int:pk>/deactivate/', views.user_deactivate, name='user-deactivate'),
    path('users/<int:pk>/activate/', views.user_activate, name='user-activate'),
    path('users/<int:pk>/change-password/', views.user_change_password, name='user-change-password'),
    path('users/<int:pk>/audit-history/', views.user_audit_history, name='user-audit-history'),
    path('users/<int:pk>/companies/', views.user_companies, name='user-companies'),
]
