from django.urls import path
from .views import WaveListCreateView, WaveDetailView, WaveStatusView, PalletPoolView, CarrierListView

urlpatterns = [
    path("waves/",                  WaveListCreateView.as_view(), name="wave-list"),
    path("waves/<uuid:pk>/",        WaveDetailView.as_view(),     name="wave-detail"),
    path("waves/<uuid:pk>/status/", WaveStatusView.as_view(),     name="wave-status"),
    path("pool/",                   PalletPoolView.as_view(),     name="pallet-pool"),
    path("carriers/",               CarrierListView.as_view(),    name="pallet-carriers"),
]
