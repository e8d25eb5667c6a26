"""
Scratch-file staging for uploads.
"""

import os
import logging
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


@contextmanager
def staged_payload(payload: bytes, scratch_dir: Optional[str] = None) -> Iterator[str]:
    """Write ``payload`` to a fresh scratch file and yield its path.

    The file is removed when the block exits, whether it returned or raised.
    A failed removal is logged so it never hides the error from the block.
    """
    fd, path = tempfile.mkstemp(prefix="r2-roundtrip-", suffix=".stage", dir=scratch_dir)
    try:
        with os.fdopen(fd, "wb") as scratch:
            scratch.write(payload)
        logger.debug(f"Staged {len(payload)} bytes in {path}")
        yield path
    finally:
        try:
            os.remove(path)
            logger.debug(f"Scratch file {path} is deleted")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Couldn't remove scratch file {path}: {e}")
