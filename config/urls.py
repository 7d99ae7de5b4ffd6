"""
Stock Ledger — Root URL Configuration

All API endpoints are namespaced under /api/v1/.
The DRF browsable API is available for route inspection in development.

@file config/urls.py
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.reverse import reverse

admin.site.site_header = 'Stock Ledger Administration'
admin.site.site_title = 'Stock Ledger'
admin.site.index_title = 'Warehouses, ledgers and planned movements'


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request, format=None):
    """Stock Ledger API v1 — endpoint directory."""
    warehouses = reverse('api-v1:warehouses:warehouse-list', request=request, format=format)
    return Response({
        'auth': {
            'register': reverse('api-v1:auth:register', request=request, format=format),
            'login': reverse('api-v1:auth:login', request=request, format=format),
            'refresh': reverse('api-v1:auth:token-refresh', request=request, format=format),
            'logout': reverse('api-v1:auth:logout', request=request, format=format),
            'me': reverse('api-v1:auth:me', request=request, format=format),
        },
        'warehouses': warehouses,
        'movements': warehouses + '{warehouse_id}/movements/',
        'planned_movements': reverse(
            'api-v1:planning:planned-movement-list', request=request, format=format,
        ),
    })


api_v1_patterns = [
    path('', api_root, name='api-root'),
    path('auth/', include('users.urls', namespace='auth')),
    path(
        'warehouses/<uuid:warehouse_id>/movements/',
        include('ledger.urls', namespace='ledger'),
    ),
    path('warehouses/', include('warehouses.urls', namespace='warehouses')),
    path('planned-movements/', include('planning.urls', namespace='planning')),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    # DRF session auth (powers the "Log in" button on the browsable API)
    path('api/auth/', include('rest_framework.urls', namespace='rest_framework')),

    # Versioned API
    path('api/v1/', include((api_v1_patterns, 'api-v1'))),
]
