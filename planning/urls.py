"""
Planning — URL Configuration

@file planning/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import PlannedMovementViewSet

app_name = 'planning'

router = DefaultRouter()
router.register('', PlannedMovementViewSet, basename='planned-movement')

urlpatterns = [
    path('', include(router.urls)),
]
