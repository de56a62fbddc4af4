"""
Loyalty API URLs for the Optician Marketplace
"""

from django.urls import path

from . import views

app_name = "loyalty"

urlpatterns = [
    path("products/", views.reward_list, name="reward_list"),
    path("redeem/", views.redeem, name="redeem"),
    path("redemptions/", views.redemption_list, name="redemption_list"),
    path("redemptions/<uuid:redemption_id>/approve/", views.approve_redemption, name="approve_redemption"),
    path("redemptions/<uuid:redemption_id>/reject/", views.reject_redemption, name="reject_redemption"),
    path("redemption-items/<uuid:item_id>/confirm/", views.confirm_redemption_item, name="confirm_redemption_item"),
]
