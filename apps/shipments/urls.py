from django.urls import path
from .views import (
    ShipmentListCreateView, ShipmentDetailView, ShipmentStatusView, ShipmentTrackingView,
    ShipmentPackagesView, ShipmentAttachmentsView, ShipmentUploadView, ShipmentDispatchedEmailView,
    ShipperDefaultsView,
)

urlpatterns = [
    path("spedizioni/",                      ShipmentListCreateView.as_view(),      name="shipment-list"),
    path("spedizioni/<uuid:pk>/",            ShipmentDetailView.as_view(),          name="shipment-detail"),
    path("spedizioni/<uuid:pk>/status/",     ShipmentStatusView.as_view(),          name="shipment-status"),
    path("spedizioni/<uuid:pk>/tracking/",   ShipmentTrackingView.as_view(),        name="shipment-tracking"),
    path("spedizioni/<uuid:pk>/colli/",      ShipmentPackagesView.as_view(),        name="shipment-colli"),
    path("spedizioni/<uuid:pk>/attachments/",ShipmentAttachmentsView.as_view(),     name="shipment-attachments"),
    path("spedizioni/<uuid:pk>/upload/",     ShipmentUploadView.as_view(),          name="shipment-upload"),
    path("spedizioni/<uuid:pk>/evasa/",      ShipmentDispatchedEmailView.as_view(), name="shipment-evasa"),
    path("impostazioni/",                    ShipperDefaultsView.as_view(),         name="shipper-defaults"),
]
