"""
Selection of the mod loaders a MultiMC pack asks for.
"""

from __future__ import annotations

import logging
from typing import *

from .types_models import MultiMCManifest

logger = logging.getLogger(__name__)

# mmc-pack.json component uid -> short name understood by GameBuilder
LOADER_COMPONENTS: Tuple[Tuple[str, str], ...] = (
    ("net.minecraftforge", "forge"),
    ("net.neoforged", "neoforge"),
    ("com.mumfrey.liteloader", "liteloader"),
    ("net.fabricmc.fabric-loader", "fabric"),
    ("org.quiltmc.quilt-loader", "quilt"),
)


def resolve_loaders(mmc_pack: Optional[MultiMCManifest], builder) -> Dict[str, str]:
    """
    Register the loader versions requested by `mmc_pack` with `builder`.

    For each known loader the first component with its uid is used; a
    component without a version requests nothing. Returns the registered
    short name -> version pairs (empty for vanilla packs).
    """
    selected: Dict[str, str] = {}
    if mmc_pack is None:
        return selected
    for uid, loader in LOADER_COMPONENTS:
        component = mmc_pack.find_component(uid)
        if component is None or not component.version:
            continue
        builder.version(loader, component.version)
        selected[loader] = component.version
        logger.debug("Requesting %s %s", loader, component.version)
    return selected
