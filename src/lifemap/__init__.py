"""Lifecycle mapping and project configurator resolution for Maven projects."""

__version__ = "0.1.0"
