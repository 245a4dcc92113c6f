"""
Innkeep Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("rates/quote", views.rate_quote_view),
    path("rates/grid", views.rate_grid_view),
    path("rates/bulk/preview", views.bulk_preview_view),
    path("rates/bulk/commit", views.bulk_commit_view),
    path("rates/bulk/discard", views.bulk_discard_view),
    path("rates/audit", views.audit_list_view),
    path("availability/check", views.availability_check_view),
]
