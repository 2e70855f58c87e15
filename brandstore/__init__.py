"""
BrandStore - e-commerce back office

A catalog and order service with:
- Catalog writes that keep rows and stored images in step
- Customer and admin accounts with bearer tokens
- Order placement and status tracking
- Razorpay payment capture and stock bookkeeping
"""

from brandstore.core.config import StoreConfig, get_config, set_config
from brandstore.core.errors import BrandStoreError

__all__ = [
    'StoreConfig',
    'get_config',
    'set_config',
    'BrandStoreError',
]

__version__ = '0.1.0'
