# api/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

# Staff-only reporting under /api/admin/
router = DefaultRouter()
router.register(r'donors', views.AdminDonorViewSet, basename='admin-donor')
router.register(r'requests', views.AdminBloodRequestViewSet, basename='admin-blood-request')

urlpatterns = [
    # Public
    path('donors/', include('donors.urls')),
    path('requests/', include('bloodrequests.urls')),
    path('otp/', include('otp.urls')),

    # Admin
    path('admin/', include('accounts.urls')),
    path('admin/dashboard/', views.dashboard_stats, name='admin-dashboard'),
    path('admin/', include(router.urls)),
]

# Available endpoints:
# GET|POST /api/donors/                                  - List / register donors
# POST     /api/donors/login/                            - Donor login
# GET|PUT|DELETE /api/donors/{id}/                       - Donor profile
# GET      /api/donors/{id}/requests/                    - Requests sent to a donor
# PUT      /api/donors/{id}/requests/{req}/{action}/     - accept / reject / donate
# GET      /api/donors/bloodtype/{type}/                 - Available donors of a type
# GET      /api/donors/nearby/{lat}/{lng}/{km}/          - Available donors nearby
#
# GET|POST /api/requests/                                - List / create requests
# GET      /api/requests/status/?phone=                  - Requester status report
# GET      /api/requests/{id}/                           - Request details
# GET      /api/requests/{id}/matches/?mode=             - Matching donors
# POST     /api/requests/{id}/send-to-donors/            - Dispatch to matching donors
# POST     /api/requests/{id}/donors/{donor}/            - Dispatch to one donor
# POST     /api/requests/{id}/confirm-donation/          - Accepted -> donated
# POST     /api/requests/{id}/fulfill/                   - Record a donation directly
#
# POST     /api/otp/send/ | verify/ | resend/            - Phone verification
#
# POST     /api/admin/register/ | login/                 - Admin accounts (JWT)
# GET      /api/admin/dashboard/                         - Statistics
# GET      /api/admin/donors/ | requests/                - Staff listings
