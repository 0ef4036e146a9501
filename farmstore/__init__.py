"""Kmetija Maroša storefront backend: newsletter opt-in and discount codes."""

__version__ = "0.1.0"
