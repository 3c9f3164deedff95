# donors/urls.py
from django.urls import path

from donors import views

urlpatterns = [
    # Registration / listing
    path('', views.donor_list, name='donor-list'),
    path('login/', views.donor_login, name='donor-login'),

    # Search
    path('bloodtype/<str:blood_type>/', views.donors_by_blood_type, name='donors-by-blood-type'),
    path('nearby/<str:lat>/<str:lng>/<str:distance>/', views.nearby_donors, name='donors-nearby'),

    # Profile
    path('<int:donor_id>/', views.donor_detail, name='donor-detail'),

    # Requests sent to the donor
    path('<int:donor_id>/requests/', views.donor_request_list, name='donor-requests'),
    path(
        '<int:donor_id>/requests/<int:request_id>/<str:action>/',
        views.donor_request_status,
        name='donor-request-status',
    ),
]
