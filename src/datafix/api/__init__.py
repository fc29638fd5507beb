# src/datafix/api/__init__.py
"""
API Layer - response envelope, shared dependencies and auth routes.

Domain routes live in ``domains/*/api``.
"""
