"""
URL configuration for core project.

Only the Django admin is routed here; the record-keeping services are
called directly from Python.
"""
from django.contrib import admin
from django.urls import path

urlpatterns = [
    path('admin/', admin.site.urls),
]
