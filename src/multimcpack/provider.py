"""
multimcpack.provider
--------------------

Recognition and reading of MultiMC-format modpack archives.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import *

from .archive import ArchivePath, ArchiveView
from .exceptions import ArchiveError, ManifestError
from .layout import INSTANCE_CFG, MMC_PACK_JSON
from .types_models import Modpack, MultiMCInstanceConfiguration, MultiMCManifest

logger = logging.getLogger(__name__)


class MultiMCModpackProvider:
    """Knows how to find and read the instance described by a MultiMC export."""

    NAME = "MultiMC"

    @staticmethod
    def get_root_path(root: ArchivePath) -> ArchivePath:
        """
        Return the directory of the archive holding ``instance.cfg``.

        That is `root` itself when it holds the file, otherwise the first
        child directory that does. Falls back to `root`.

        Raises
        ------
        ArchiveError
            If the archive is empty.
        """
        if (root / INSTANCE_CFG).is_file():
            return root
        children = list(root.iterdir())
        if not children:
            raise ArchiveError("Empty modpack")
        for child in children:
            if child.is_dir() and (child / INSTANCE_CFG).is_file():
                return child
        return root

    @classmethod
    def read_manifest(cls, zip_path: Union[str, Path], encoding: Optional[str] = None) -> Modpack:
        """
        Read the instance description of a modpack archive.

        Parameters
        ----------
        zip_path : Path
            The modpack archive.
        encoding : Optional[str]
            Encoding of entry names; detected from the archive when None.

        Returns
        -------
        Modpack

        Raises
        ------
        ArchiveError
            If the archive cannot be opened or is empty.
        ManifestError
            If instance.cfg is missing or mmc-pack.json is malformed.
        """
        zip_path = Path(zip_path)
        with ArchiveView.open(zip_path, encoding=encoding, auto_detect_encoding=encoding is None) as archive:
            root = cls.get_root_path(archive.root)
            cfg = root / INSTANCE_CFG
            if not cfg.is_file():
                raise ManifestError(f"{INSTANCE_CFG} not found in {zip_path}")

            mmc_pack = None
            pack_json = root / MMC_PACK_JSON
            if pack_json.is_file():
                try:
                    mmc_pack = MultiMCManifest.from_dict(json.loads(pack_json.read_text()))
                except ValueError as exc:
                    raise ManifestError(f"Malformed {MMC_PACK_JSON} in {zip_path}: {exc}") from exc

            text = cfg.read_bytes().decode("utf-8", errors="replace")
            default_name = root.name or zip_path.stem
            config = MultiMCInstanceConfiguration.from_cfg(text, default_name, mmc_pack)
            logger.info("Read MultiMC modpack %r (minecraft %s) from %s", config.name, config.game_version, zip_path)
            return Modpack(
                name=config.name,
                manifest=config,
                description=config.notes,
                game_version=config.game_version,
                encoding=archive.encoding,
            )
