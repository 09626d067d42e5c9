"""Storefront cart and checkout engine."""
