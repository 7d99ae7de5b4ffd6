"""
Core — Pagination

Page-number paginator for metadata lists and an id-ordered cursor
paginator for ledger histories, whose order must never shift between
pages while rows are appended.

@file core/pagination.py
"""

from rest_framework.pagination import CursorPagination, PageNumberPagination

from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class StandardPagination(PageNumberPagination):
    page_size = DEFAULT_PAGE_SIZE
    page_size_query_param = 'page_size'
    max_page_size = MAX_PAGE_SIZE


class LedgerCursorPagination(CursorPagination):
    page_size = DEFAULT_PAGE_SIZE
    page_size_query_param = 'page_size'
    max_page_size = MAX_PAGE_SIZE
    ordering = 'id'
