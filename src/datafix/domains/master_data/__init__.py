# src/datafix/domains/master_data/__init__.py
"""
Master Data Domain - Branch and feature lookups for selection inputs
"""
