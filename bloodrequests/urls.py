from django.urls import path

from bloodrequests import views

urlpatterns = [
    path('', views.blood_request_list, name='blood-request-list'),
    path('status/', views.request_status, name='blood-request-status'),
    path('<int:request_id>/', views.blood_request_detail, name='blood-request-detail'),

    # Matching and dispatch
    path('<int:request_id>/matches/', views.blood_request_matches, name='blood-request-matches'),
    path('<int:request_id>/send-to-donors/', views.send_to_donors, name='blood-request-send'),
    path('<int:request_id>/donors/<int:donor_id>/', views.send_to_single_donor, name='blood-request-send-donor'),

    # Donation
    path('<int:request_id>/confirm-donation/', views.confirm_donation_view, name='blood-request-confirm'),
    path('<int:request_id>/fulfill/', views.fulfill_request_view, name='blood-request-fulfill'),
]
