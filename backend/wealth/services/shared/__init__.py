"""Shared utilities for the services layer."""

from .pagination import Page, PageMeta, clamp, paginate

__all__ = ["Page", "PageMeta", "clamp", "paginate"]
