"""Back-office admin URLs."""
from django.urls import path
from .views import DashboardSummaryView, BackofficeLinkListView, BackofficeLinkDetailView

urlpatterns = [
    path("dashboard/summary/", DashboardSummaryView.as_view(),     name="admin-dashboard"),
    path("links/",             BackofficeLinkListView.as_view(),   name="admin-links"),
    path("links/<uuid:pk>/",   BackofficeLinkDetailView.as_view(), name="admin-link-detail"),
]
