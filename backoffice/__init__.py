"""
Backoffice: cross-cutting request helpers for a Flask admin backend.
"""

__version__ = "1.0.0"
