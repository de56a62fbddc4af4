"""
Campaign API URLs for the Optician Marketplace
"""

from django.urls import path

from . import views

app_name = "campaigns"

urlpatterns = [
    path("email/", views.email_campaign, name="email"),
    path("whatsapp/", views.whatsapp_campaign, name="whatsapp"),
]
