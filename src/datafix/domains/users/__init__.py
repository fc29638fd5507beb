# src/datafix/domains/users/__init__.py
"""
Users Domain - Profile roles and branch assignment
"""
