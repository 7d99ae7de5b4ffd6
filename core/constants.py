"""
Core — Shared Constants

Audit action names and pagination limits used across apps.

@file core/constants.py
"""

AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_UPDATE = 'UPDATE'
AUDIT_ACTION_DELETE = 'DELETE'
AUDIT_ACTION_SHIFT = 'SHIFT'
AUDIT_ACTION_LOGIN = 'LOGIN'
AUDIT_ACTION_LOGOUT = 'LOGOUT'

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500

# Logger name shared by every app.
LOGGER_NAME = 'stockledger'
