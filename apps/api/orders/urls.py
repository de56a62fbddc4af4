"""
Order API URLs for the Optician Marketplace
"""

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("", views.order_list, name="order_list"),
    path("manual/", views.create_manual_order, name="create_manual_order"),
    path("items/<uuid:item_id>/confirm/", views.confirm_order_item, name="confirm_order_item"),
]
