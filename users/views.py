"""
Users — Views

Auth endpoints: register, login, refresh, logout, me.

@file users/views.py
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from core.constants import AUDIT_ACTION_LOGIN, AUDIT_ACTION_LOGOUT, LOGGER_NAME
from core.services import AuditService

from .serializers import (
    CustomTokenObtainPairSerializer,
    LogoutSerializer,
    RegisterSerializer,
    UserReadSerializer,
)
from .services import AuthService, UserService

logger = logging.getLogger(LOGGER_NAME)


class RegisterView(APIView):
    """POST /v1/auth/register — Create an account."""
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'auth'

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user = UserService.register_user(
            username=data['username'],
            password=data['password'],
            email=data.get('email') or None,
            first_name=data.get('first_name', ''),
            last_name=data.get('last_name', ''),
        )
        return Response(UserReadSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """POST /v1/auth/login — Authenticate and obtain JWT pair."""
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'auth'

    def post(self, request):
        serializer = CustomTokenObtainPairSerializer(
            data=request.data, context={'request': request},
        )
        serializer.is_valid(raise_exception=True)

        AuthService.log_auth_event(
            action=AUDIT_ACTION_LOGIN,
            user=serializer.user,
            **AuditService.request_meta(request),
        )

        return Response({
            'success': True,
            'data': {
                'access': serializer.validated_data['access'],
                'refresh': serializer.validated_data['refresh'],
                'user': serializer.validated_data['user'],
            },
        })


class LogoutView(APIView):
    """POST /v1/auth/logout — Blacklist the refresh token."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        refresh_token = serializer.validated_data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as exc:
                logger.info('Logout with unusable refresh token for %s: %s', request.user, exc)

        AuthService.log_auth_event(
            action=AUDIT_ACTION_LOGOUT,
            user=request.user,
            **AuditService.request_meta(request),
        )

        return Response({'success': True, 'data': None}, status=status.HTTP_200_OK)


class TokenRefreshAPIView(TokenRefreshView):
    """POST /v1/auth/refresh — Rotate refresh token."""
    pass


class MeView(APIView):
    """GET /v1/auth/me — Return the current authenticated user."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'success': True,
            'data': UserReadSerializer(request.user).data,
        })
