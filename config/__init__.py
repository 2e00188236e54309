"""
Configuration package for the plasmid simulation backend

This package contains application settings.
"""

from .settings import settings

__version__ = "1.0.0" 
