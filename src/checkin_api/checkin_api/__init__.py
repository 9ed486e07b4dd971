"""Check-in API package.

This package is organized by feature modules (users, organizations, attendance,
reports) with a thin Flask JSON controller layer over service/repository layers.
"""
