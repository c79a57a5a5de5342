"""Shelter Finder: nearest emergency shelters from a validated offline shelter set"""

__version__ = "1.0.0"
