"""
Fixed names of the MultiMC archive layout and detection of the game-directory root.
"""

from __future__ import annotations

import logging
from typing import *

from .archive import ArchivePath

logger = logging.getLogger(__name__)

INSTANCE_CFG = "instance.cfg"
MMC_PACK_JSON = "mmc-pack.json"
PATCHES_DIR = "patches"
LIBRARIES_DIR = "libraries"
JARMODS_DIR = "jarmods"
PATCH_SUFFIX = ".json"

DOT_MINECRAFT = ".minecraft"
MINECRAFT = "minecraft"

# probed in this order; "{name}" is the instance's declared name
LAYOUT_CANDIDATES: Tuple[str, ...] = (
    "/" + DOT_MINECRAFT,
    "/" + MINECRAFT,
    "/{name}/" + DOT_MINECRAFT,
    "/{name}/" + MINECRAFT,
)
DEFAULT_LAYOUT = "/{name}/" + DOT_MINECRAFT


def detect_subdirectory(root: ArchivePath, name: str) -> str:
    """
    Return the archive path holding the game directory of the instance.

    The first existing candidate of LAYOUT_CANDIDATES wins. When none exists
    ``/<name>/.minecraft`` is returned without checking it.
    """
    for candidate in LAYOUT_CANDIDATES:
        path = candidate.format(name=name)
        if root.joinpath(path).exists():
            logger.debug("Detected game directory %s", path)
            return path
    path = DEFAULT_LAYOUT.format(name=name)
    logger.debug("No known game directory layout found, defaulting to %s", path)
    return path
