"""Comment and engagement service for blog posts."""

__version__ = "0.1.0"
