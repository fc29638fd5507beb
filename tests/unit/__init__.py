# tests/unit/__init__.py
"""
Unit tests for DataFix.

Unit tests focus on testing individual functions, classes, and modules
in isolation from external dependencies like databases and APIs.
"""
