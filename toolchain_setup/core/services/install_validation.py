"""Installation path validation — is this path worth a cache write?"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def is_installation_path_valid(path: str | Path | None) -> bool:
    """Return True only if ``path`` exists and is readable.

    Empty or missing paths, permission problems and OS errors all
    collapse to False.  Never raises.
    """
    if not path:
        return False

    try:
        target = Path(path)
        if not target.exists():
            logger.debug("Install path does not exist: %s", target)
            return False
        return os.access(target, os.R_OK)
    except (OSError, TypeError, ValueError) as e:
        logger.debug("Install path check failed for %r: %s", path, e)
        return False
