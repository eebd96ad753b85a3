from django.urls import path
from .views import (
    QuoteListCreateView, QuoteDetailView, PublicQuoteView, PublicQuoteAcceptView,
    StaffQuoteListView, StaffQuoteDetailView, StaffQuoteOptionsView, SendPublicLinkView,
    QuoteOptionDeleteView,
)

urlpatterns = [
    path("quotazioni/",                                  QuoteListCreateView.as_view(),   name="quote-list"),
    path("quotazioni/<uuid:pk>/",                        QuoteDetailView.as_view(),       name="quote-detail"),
    path("quote-public/<str:token>/",                    PublicQuoteView.as_view(),       name="quote-public"),
    path("quote-public/<str:token>/accept/",             PublicQuoteAcceptView.as_view(), name="quote-public-accept"),
    path("quote-requests/",                              StaffQuoteListView.as_view(),    name="quote-requests"),
    path("quote-requests/<uuid:pk>/",                    StaffQuoteDetailView.as_view(),  name="quote-request-detail"),
    path("quote-requests/<uuid:pk>/options/",            StaffQuoteOptionsView.as_view(), name="quote-request-options"),
    path("quote-requests/<uuid:pk>/send-public-link/",   SendPublicLinkView.as_view(),    name="quote-send-link"),
    path("quote-options/<uuid:pk>/",                     QuoteOptionDeleteView.as_view(), name="quote-option-delete"),
]
