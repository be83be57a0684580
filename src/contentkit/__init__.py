"""Content structures and smart content data providers."""

__version__ = "0.1.0"
