"""
Product API URLs for the Optician Marketplace
"""

from django.urls import path

from . import views

app_name = "products"

urlpatterns = [
    path("", views.product_list, name="product_list"),
    path("<uuid:product_id>/", views.product_detail, name="product_detail"),
    path("<uuid:product_id>/stock/", views.update_stock, name="update_stock"),
]
