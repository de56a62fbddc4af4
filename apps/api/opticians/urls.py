"""
Optician API URLs for the Optician Marketplace
"""

from django.urls import path

from . import views

app_name = "opticians"

urlpatterns = [
    path("nearest/", views.nearest_opticians, name="nearest"),
    path("geocode/", views.geocode_opticians, name="geocode"),
    path("register/", views.register_optician, name="register"),
    path("me/points/", views.my_points, name="my_points"),
    path("<uuid:optician_id>/status/", views.update_status, name="update_status"),
    path("<uuid:optician_id>/points/", views.adjust_points, name="adjust_points"),
]
