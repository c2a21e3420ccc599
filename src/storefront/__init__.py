"""Storefront backend package."""
