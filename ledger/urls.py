"""
Ledger — URL Configuration

Mounted under /warehouses/<warehouse_id>/movements/.

@file ledger/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import MovementViewSet

app_name = 'ledger'

router = DefaultRouter()
router.register('', MovementViewSet, basename='movement')

urlpatterns = [
    path('', include(router.urls)),
]
