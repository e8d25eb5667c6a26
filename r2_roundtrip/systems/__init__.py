"""
S3-compatible storage systems.
"""

from .base import ObjectStorageSystem, classify_client_error
from .r2 import R2System

__all__ = ['ObjectStorageSystem', 'R2System', 'classify_client_error']
