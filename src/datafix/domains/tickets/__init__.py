# src/datafix/domains/tickets/__init__.py
"""
Tickets Domain - Data-correction requests

This domain handles:
- Ticket submission (form validation, detail lines, screenshots)
- Ticket list with search, filters and reassignment
- Ticket detail and admin resolution
- Status workflow policy
"""
