"""Storefront: extensible eCommerce kernel and client build pipeline."""

__version__ = "1.0.0"
