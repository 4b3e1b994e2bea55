"""
URL mappings for the exchange API.

Paths match the ones the web client already calls; trailing slashes
are deliberately omitted.
"""
from django.urls import path, include

from .auth_views import login_view, me_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.admin_hospitals import admin_hospital_list, admin_hospital_delete
from .views.hospitals import hospital_details, hospital_search
from .views.knowledge import knowledge_articles
from .views.requests import (
    requests_collection,
    request_detail,
    accept_request,
    reject_request,
    cancel_request,
    finalize_request,
)


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    # Hospital details / inventory
    path('api/hospital/details', hospital_details, name='hospital_details'),
    path('api/hospitals/search', hospital_search, name='hospital_search'),
    # Resource requests
    path('api/requests', requests_collection, name='requests'),
    path('api/requests/accept', accept_request, name='request_accept'),
    path('api/requests/reject', reject_request, name='request_reject'),
    path('api/requests/cancel', cancel_request, name='request_cancel'),
    path('api/requests/finalize', finalize_request, name='request_finalize'),
    path('api/requests/<int:pk>', request_detail, name='request_detail'),
    # Knowledge sharing
    path('api/knowledge', knowledge_articles, name='knowledge'),
    # Admin
    path('api/admin/hospitals', admin_hospital_list, name='admin_hospitals'),
    path('api/admin/hospitals/<int:pk>', admin_hospital_delete, name='admin_hospital_delete'),
]
