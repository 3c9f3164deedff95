from django.urls import path

from otp import views

urlpatterns = [
    path('send/', views.send, name='otp-send'),
    path('verify/', views.verify, name='otp-verify'),
    path('resend/', views.resend, name='otp-resend'),
]
