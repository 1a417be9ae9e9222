"""
multimcpack.patches
-------------------

Folds the ``patches/*.json`` fragments of a MultiMC pack into a version descriptor.

Each fragment becomes a version patch with priority 1 whose game arguments
are ``--tweakClass <class>`` for every tweaker followed by the java agent
argument. Fragments are applied in the archive's listing order.
"""

from __future__ import annotations

import logging
from typing import *

from .archive import ArchivePath
from .exceptions import MalformedPatchError
from .layout import PATCH_SUFFIX
from .types_models import MultiMCInstancePatch
from .version import Arguments, Version

logger = logging.getLogger(__name__)

TWEAK_CLASS_FLAG = "--tweakClass"
PATCH_PRIORITY = 1


def build_patch_arguments(patch: MultiMCInstancePatch, agent_argument: str) -> List[str]:
    arguments: List[str] = []
    for tweaker in patch.tweakers:
        arguments.append(TWEAK_CLASS_FLAG)
        arguments.append(tweaker)
    arguments.append(agent_argument)
    return arguments


def build_version_patch(patch: MultiMCInstancePatch, agent_argument: str) -> Version:
    return Version(
        id=patch.name,
        version=patch.version,
        priority=PATCH_PRIORITY,
        arguments=Arguments().add_game_arguments(build_patch_arguments(patch, agent_argument)),
        main_class=patch.main_class,
        libraries=list(patch.libraries),
    )


def iter_patch_files(patches_dir: ArchivePath) -> Iterator[ArchivePath]:
    """Patch descriptors directly under `patches_dir`, in listing order."""
    for entry in patches_dir.iterdir():
        if entry.is_file() and entry.name.endswith(PATCH_SUFFIX):
            yield entry


def read_patch(entry: ArchivePath) -> MultiMCInstancePatch:
    """
    Raises
    ------
    MalformedPatchError
        If the file is not UTF-8 JSON describing a patch.
    """
    try:
        text = entry.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedPatchError(f"Malformed patch {entry.path}: {exc}", path=entry.path) from exc
    return MultiMCInstancePatch.from_json(text, source=entry.path)


def merge_patches(version: Version, patches_dir: ArchivePath, agent_argument: str) -> Version:
    """
    Return `version` with every patch of `patches_dir` applied.

    A missing `patches_dir` leaves `version` unchanged. A malformed patch
    aborts the merge with MalformedPatchError.
    """
    if not patches_dir.is_dir():
        return version
    for entry in iter_patch_files(patches_dir):
        patch = read_patch(entry)
        version = version.add_patch(build_version_patch(patch, agent_argument))
        logger.debug("Applied patch %s %s from %s", patch.name, patch.version, entry.path)
    return version
