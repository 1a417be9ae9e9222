"""
types_models.py

Typed dataclasses for the MultiMC modpack format.

Purpose
-------
- Provide typed, documented containers for mmc-pack.json, instance.cfg,
  patches/*.json and the modpack configuration written next to an instance.
- Supply `from_dict()` factories to convert raw JSON into typed objects.
- Keep original raw payload available in `.data` for forward-compatibility.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from .exceptions import MalformedPatchError, ManifestError
from .version import Library

MINECRAFT_UID = "net.minecraft"


@dataclass
class MultiMCManifestComponent:
    """
    One entry of the ``components`` list in mmc-pack.json.

    Attributes
    ----------
    uid : str
        Component identifier, e.g. ``net.minecraftforge``.
    version : Optional[str]
        Requested component version; may be absent.
    """
    uid: str
    version: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MultiMCManifestComponent":
        d = d or {}
        return cls(
            uid=d.get("uid") or "",
            version=d.get("version"),
            data=d,
        )


@dataclass
class MultiMCManifest:
    """mmc-pack.json: the ordered list of components an instance is built from."""
    format_version: int = 1
    components: List[MultiMCManifestComponent] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MultiMCManifest":
        if not isinstance(d, dict):
            raise ManifestError("mmc-pack.json must contain a JSON object")
        components = d.get("components") or []
        if not isinstance(components, list):
            raise ManifestError("mmc-pack.json 'components' must be a list")
        return cls(
            format_version=int(d.get("formatVersion", 1)),
            components=[MultiMCManifestComponent.from_dict(c) for c in components if isinstance(c, dict)],
            data=d,
        )

    def find_component(self, uid: str) -> Optional[MultiMCManifestComponent]:
        """First component with the given uid, or None."""
        for component in self.components:
            if component.uid == uid:
                return component
        return None

    def to_dict(self) -> Dict[str, Any]:
        return self.data or {
            "formatVersion": self.format_version,
            "components": [c.data or {"uid": c.uid, "version": c.version} for c in self.components],
        }


def parse_instance_cfg(text: str) -> Dict[str, str]:
    """
    Parse instance.cfg content into a dict.

    Lines are ``key=value``; blank lines, ``#`` comments and section headers
    such as ``[General]`` are ignored. A repeated key keeps its last value.
    """
    values: Dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or (stripped.startswith("[") and stripped.endswith("]")):
            continue
        if "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        values[key.strip()] = value
    return values


@dataclass
class MultiMCInstanceConfiguration:
    """
    The instance described by a MultiMC modpack.

    Attributes
    ----------
    name : str
        Instance folder name inside the archive; probed by layout detection.
    display_name : Optional[str]
        The ``name`` key of instance.cfg.
    game_version : Optional[str]
        Minecraft version (``net.minecraft`` component, else ``IntendedVersion``).
    jvm_args : Optional[str]
        Raw ``JvmArgs`` value.
    notes : Optional[str]
        Free text notes of the pack author.
    mmc_pack : Optional[MultiMCManifest]
        Parsed mmc-pack.json, if the pack has one.
    properties : Dict[str,str]
        Every key of instance.cfg.
    """
    name: str
    display_name: Optional[str] = None
    game_version: Optional[str] = None
    jvm_args: Optional[str] = None
    notes: Optional[str] = None
    mmc_pack: Optional[MultiMCManifest] = None
    properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_cfg(cls, text: str, default_name: str, mmc_pack: Optional[MultiMCManifest] = None) -> "MultiMCInstanceConfiguration":
        props = parse_instance_cfg(text)
        game_version = None
        if mmc_pack is not None:
            minecraft = mmc_pack.find_component(MINECRAFT_UID)
            if minecraft is not None:
                game_version = minecraft.version
        if not game_version:
            game_version = props.get("IntendedVersion") or None
        return cls(
            name=default_name,
            display_name=props.get("name"),
            game_version=game_version,
            jvm_args=props.get("JvmArgs"),
            notes=props.get("notes"),
            mmc_pack=mmc_pack,
            properties=props,
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MultiMCInstanceConfiguration":
        d = d or {}
        pack = d.get("mmcPack")
        return cls(
            name=d.get("name") or "",
            display_name=d.get("displayName"),
            game_version=d.get("gameVersion"),
            jvm_args=d.get("jvmArgs"),
            notes=d.get("notes"),
            mmc_pack=MultiMCManifest.from_dict(pack) if pack else None,
            properties=dict(d.get("properties") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"name": self.name, "displayName": self.display_name, "gameVersion": self.game_version, "properties": self.properties}
        if self.jvm_args is not None:
            d["jvmArgs"] = self.jvm_args
        if self.notes is not None:
            d["notes"] = self.notes
        if self.mmc_pack is not None:
            d["mmcPack"] = self.mmc_pack.to_dict()
        return d


@dataclass
class MultiMCInstancePatch:
    """
    One ``patches/*.json`` file: a loader or mod fragment of the instance.

    Attributes
    ----------
    name : str
        Patch name, used as the id of the version patch built from it.
    uid : Optional[str]
        Component uid the patch belongs to.
    version : Optional[str]
        Component version.
    main_class : Optional[str]
        Main class override.
    tweakers : List[str]
        Tweak classes (``+tweakers``).
    libraries : List[Library]
        ``libraries`` followed by ``+libraries``.
    """
    name: str
    uid: Optional[str] = None
    version: Optional[str] = None
    main_class: Optional[str] = None
    tweakers: List[str] = field(default_factory=list)
    libraries: List[Library] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MultiMCInstancePatch":
        if not isinstance(d, dict):
            raise ValueError("patch must be a JSON object")
        name = d.get("name") or d.get("uid")
        if not isinstance(name, str) or not name:
            raise ValueError("patch has neither 'name' nor 'uid'")
        tweakers = d.get("+tweakers", d.get("tweakers")) or []
        if not isinstance(tweakers, list) or not all(isinstance(t, str) for t in tweakers):
            raise ValueError("'+tweakers' must be a list of class names")
        raw_libraries = list(d.get("libraries") or []) + list(d.get("+libraries") or [])
        return cls(
            name=name,
            uid=d.get("uid"),
            version=d.get("version"),
            main_class=d.get("mainClass"),
            tweakers=tweakers,
            libraries=[Library.from_dict(x) for x in raw_libraries],
            data=d,
        )

    @classmethod
    def from_json(cls, text: str, source: Optional[str] = None) -> "MultiMCInstancePatch":
        """
        Parse a patch file.

        Raises
        ------
        MalformedPatchError
            On invalid JSON or a payload that does not describe a patch.
        """
        try:
            return cls.from_dict(json.loads(text))
        except (ValueError, TypeError) as exc:
            raise MalformedPatchError(f"Malformed patch {source or '<string>'}: {exc}", path=source) from exc


@dataclass
class Modpack:
    """
    A modpack archive as read by a provider.

    Attributes
    ----------
    name : str
        Declared pack name.
    version : Optional[str]
        Pack version, if declared.
    game_version : Optional[str]
        Minecraft version the pack targets.
    encoding : Optional[str]
        Encoding of the archive entry names (None: UTF-8 / auto-detect).
    manifest : MultiMCInstanceConfiguration
        Format-specific manifest.
    """
    name: str
    manifest: MultiMCInstanceConfiguration
    version: Optional[str] = None
    description: Optional[str] = None
    game_version: Optional[str] = None
    encoding: Optional[str] = None


@dataclass
class ModpackFile:
    """A file installed from the pack and its SHA-1 at install time."""
    path: str
    hash: str

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModpackFile":
        return cls(path=d["path"], hash=d["hash"])

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "hash": self.hash}


@dataclass
class ModpackConfiguration:
    """
    modpack.json kept beside an installed instance.

    Records which provider installed the instance and which files came from
    the pack, so a later update can tell pack files from user changes.
    """
    type: str
    name: Optional[str] = None
    version: Optional[str] = None
    manifest: Dict[str, Any] = field(default_factory=dict)
    overrides: List[ModpackFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModpackConfiguration":
        if not isinstance(d, dict) or not isinstance(d.get("type"), str):
            raise ValueError("modpack configuration must be an object with a 'type'")
        return cls(
            type=d["type"],
            name=d.get("name"),
            version=d.get("version"),
            manifest=d.get("manifest") or {},
            overrides=[ModpackFile.from_dict(x) for x in (d.get("overrides") or [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "version": self.version,
            "manifest": self.manifest,
            "overrides": [f.to_dict() for f in self.overrides],
        }

    def override_hashes(self) -> Dict[str, str]:
        return {f.path: f.hash for f in self.overrides}
