"""
Cloudflare R2 round-trip workflow over the S3 API.
"""

__version__ = "0.1.0"
