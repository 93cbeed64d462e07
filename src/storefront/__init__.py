"""
Storefront Package

Fragrance storefront with bottle-size variants, reseller bulk pricing,
an in-session cart and hosted checkout, plus the admin services behind it.
"""

__version__ = "1.0.0"
