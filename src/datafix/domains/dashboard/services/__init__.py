# src/datafix/domains/dashboard/services/__init__.py
"""
Dashboard Domain Services
"""

from .analytics import DashboardView, feature_distribution, success_rate, trend_data

__all__ = [
    "DashboardView",
    "feature_distribution",
    "success_rate",
    "trend_data",
]
