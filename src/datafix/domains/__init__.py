# src/datafix/domains/__init__.py
"""
Domain modules.

Each domain groups its view-model services and its API routers:
- tickets: submission, list, detail, workflow
- dashboard: statistics and charts
- users: profile management
- master_data: branch and feature lookups
"""
