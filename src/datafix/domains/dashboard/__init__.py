# src/datafix/domains/dashboard/__init__.py
"""
Dashboard Domain - Ticket statistics, monthly trend and feature distribution
"""
