"""Reading List - Services Package

This package contains service modules for external integrations:
- Google Books search proxy
- HTTP client abstraction
"""
