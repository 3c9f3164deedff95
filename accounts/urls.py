from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from accounts import views

urlpatterns = [
    path('register/', views.admin_register, name='admin-register'),
    path('login/', views.admin_login, name='admin-login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
]
