from django.urls import path
from .views import DutiesQuoteView, CreateCheckoutView, StripeWebhookView

urlpatterns = [
    path("usa-shipping-pay/quote/",           DutiesQuoteView.as_view(),    name="duties-quote"),
    path("usa-shipping-pay/create-checkout/", CreateCheckoutView.as_view(), name="duties-checkout"),
    path("stripe/webhook/",                   StripeWebhookView.as_view(),  name="stripe-webhook"),
]
