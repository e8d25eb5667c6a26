"""
Cloudflare R2 object storage system implementation.
"""

import logging

from r2_roundtrip.configuration import StoreConfig
from r2_roundtrip.systems.base import ObjectStorageSystem

logger = logging.getLogger(__name__)


class R2System(ObjectStorageSystem):
    """Cloudflare R2 object storage system."""

    addressing_style = "path"

    def __init__(self, config: StoreConfig):
        super().__init__(config)
        logger.info("Initialized R2 system")
