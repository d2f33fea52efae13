"""Country dashboard WSGI service with live enrichment, a caching document store and webhooks."""

__version__ = "0.1.0"
__all__ = ["__version__"]