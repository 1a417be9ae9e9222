"""
Copies the pack's own ``libraries`` and ``jarmods`` trees into the instance.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import *

from .archive import ArchivePath
from .fileops import copy_tree
from .layout import JARMODS_DIR, LIBRARIES_DIR

logger = logging.getLogger(__name__)

RESOURCE_DIRS: Tuple[str, ...] = (LIBRARIES_DIR, JARMODS_DIR)


def copy_resources(root: ArchivePath, version_root: Union[str, Path]) -> Dict[str, int]:
    """
    Copy each of RESOURCE_DIRS present under `root` to the same name under `version_root`.

    Absent trees are skipped. Returns directory name -> number of files copied.
    """
    version_root = Path(version_root)
    copied: Dict[str, int] = {}
    for name in RESOURCE_DIRS:
        src = root / name
        if not src.is_dir():
            continue
        copied[name] = copy_tree(src, version_root / name)
        logger.info("Copied %d file(s) from %s to %s", copied[name], src, version_root / name)
    return copied
