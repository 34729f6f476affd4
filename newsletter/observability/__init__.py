"""Observability helpers for the subscriber service.

Request IDs + structlog contextvars, and an in-memory metrics snapshot
covering HTTP traffic and subscriber store activity.
"""
