# backoffice/config/__init__.py
"""
Configuration module for the backoffice application.
"""

from .settings import Settings, configure_logging, get_settings

__all__ = ['Settings', 'configure_logging', 'get_settings']
