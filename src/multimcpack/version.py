"""
version.py

Version descriptor model: the launcher-side JSON an installed instance is started from.

A Version is a base descriptor plus an ordered list of patches. Each patch is
itself a Version carrying the launch arguments, main class and libraries a
loader or mod contributes. Patches are merged with ``Version.add_patch``,
which never mutates the receiver.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, List, Dict, Any, Iterable, Iterator, Tuple

import dateutil.parser as _dateutil_parser


def _parse_dt(value: Any) -> Optional[datetime]:
    """Parse ISO/RFC date strings into datetime (None on failure)."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return _dateutil_parser.parse(str(value))
    except (ValueError, OverflowError):
        return None


@dataclass
class Library:
    """
    A maven-style library reference.

    Attributes
    ----------
    name : str
        Coordinate ``group:artifact:version[:classifier][@extension]``.
    url : Optional[str]
        Base URL of the maven repository hosting the artifact.
    artifact_url : Optional[str]
        Direct download URL (``downloads.artifact.url``).
    sha1 : Optional[str]
        Expected SHA-1 of the artifact.
    size : Optional[int]
        Expected size in bytes.
    hint : Optional[str]
        MultiMC hint (``MMC-hint``); ``"local"`` means the pack ships the file.
    data : Dict[str,Any]
        Original raw JSON payload.
    """
    name: str
    url: Optional[str] = None
    artifact_url: Optional[str] = None
    sha1: Optional[str] = None
    size: Optional[int] = None
    hint: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Library":
        if not isinstance(d, dict) or not isinstance(d.get("name"), str):
            raise ValueError(f"Library entry must be an object with a 'name': {d!r}")
        artifact = ((d.get("downloads") or {}).get("artifact")) or {}
        size = artifact.get("size")
        return cls(
            name=d["name"],
            url=d.get("url"),
            artifact_url=artifact.get("url"),
            sha1=artifact.get("sha1"),
            size=int(size) if size is not None else None,
            hint=d.get("MMC-hint"),
            data=d,
        )

    def to_dict(self) -> Dict[str, Any]:
        d = dict(self.data)
        d["name"] = self.name
        if self.url:
            d["url"] = self.url
        artifact = {k: v for k, v in (("url", self.artifact_url), ("sha1", self.sha1), ("size", self.size)) if v is not None}
        if artifact:
            downloads = dict(d.get("downloads") or {})
            downloads["artifact"] = {**(downloads.get("artifact") or {}), **artifact}
            d["downloads"] = downloads
        if self.hint:
            d["MMC-hint"] = self.hint
        return d

    def _coordinates(self) -> Tuple[str, str, str, Optional[str], str]:
        spec, _, extension = self.name.partition("@")
        parts = spec.split(":")
        if len(parts) < 3:
            raise ValueError(f"Invalid library coordinate: {self.name!r}")
        classifier = parts[3] if len(parts) > 3 else None
        return parts[0], parts[1], parts[2], classifier, extension or "jar"

    @property
    def path(self) -> str:
        """Relative maven path, e.g. ``com/example/lib/1.0/lib-1.0.jar``."""
        group, artifact, version, classifier, extension = self._coordinates()
        filename = f"{artifact}-{version}"
        if classifier:
            filename += f"-{classifier}"
        return f"{group.replace('.', '/')}/{artifact}/{version}/{filename}.{extension}"

    @property
    def download_url(self) -> Optional[str]:
        if self.artifact_url:
            return self.artifact_url
        if self.url:
            return self.url.rstrip("/") + "/" + self.path
        return None

    @property
    def is_local(self) -> bool:
        return self.hint == "local"


@dataclass(frozen=True)
class Arguments:
    """Game and JVM launch arguments, kept in order."""
    game: Tuple[str, ...] = ()
    jvm: Tuple[str, ...] = ()

    def add_game_arguments(self, arguments: Iterable[str]) -> "Arguments":
        return Arguments(game=self.game + tuple(arguments), jvm=self.jvm)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "Arguments":
        d = d or {}
        # rule-based argument objects are kept verbatim
        return cls(game=tuple(d.get("game") or ()), jvm=tuple(d.get("jvm") or ()))

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.game:
            d["game"] = list(self.game)
        if self.jvm:
            d["jvm"] = list(self.jvm)
        return d


@dataclass
class Version:
    """
    Version descriptor of an instance, or one patch applied to it.

    Attributes
    ----------
    id : str
        Instance name for the base descriptor, patch name for a patch.
    version : Optional[str]
        Game version for the base descriptor, component version for a patch.
    priority : Optional[int]
        Ordering priority of a patch.
    arguments : Optional[Arguments]
        Launch arguments contributed by this descriptor.
    main_class : Optional[str]
        Main class override.
    libraries : List[Library]
        Libraries contributed by this descriptor.
    patches : List[Version]
        Applied patches, in application order.
    """
    id: str
    version: Optional[str] = None
    priority: Optional[int] = None
    arguments: Optional[Arguments] = None
    main_class: Optional[str] = None
    libraries: List[Library] = field(default_factory=list)
    patches: List["Version"] = field(default_factory=list)
    inherits_from: Optional[str] = None
    jar: Optional[str] = None
    minecraft_arguments: Optional[str] = None
    release_time: Optional[datetime] = None
    time: Optional[datetime] = None
    type: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def add_patch(self, patch: "Version") -> "Version":
        """
        Return a copy of this descriptor with `patch` applied.

        A patch whose id is already present replaces the old one at its
        position; any other patch is appended.
        """
        patches = list(self.patches)
        for i, existing in enumerate(patches):
            if existing.id == patch.id:
                patches[i] = patch
                break
        else:
            patches.append(patch)
        return replace(self, patches=patches)

    def add_patches(self, patches: Iterable["Version"]) -> "Version":
        version = self
        for patch in patches:
            version = version.add_patch(patch)
        return version

    def get_patch(self, patch_id: str) -> Optional["Version"]:
        for patch in self.patches:
            if patch.id == patch_id:
                return patch
        return None

    @property
    def patch_ids(self) -> List[str]:
        return [p.id for p in self.patches]

    def all_libraries(self) -> Iterator[Library]:
        """Own libraries followed by each patch's, first occurrence of a coordinate wins."""
        seen = set()
        candidates = list(self.libraries)
        for patch in self.patches:
            candidates.extend(patch.all_libraries())
        for lib in candidates:
            if lib.name in seen:
                continue
            seen.add(lib.name)
            yield lib

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Version":
        if not isinstance(d, dict) or not d.get("id"):
            raise ValueError("Version JSON must be an object with an 'id'")
        arguments = d.get("arguments")
        return cls(
            id=d["id"],
            version=d.get("version"),
            priority=d.get("priority"),
            arguments=Arguments.from_dict(arguments) if arguments is not None else None,
            main_class=d.get("mainClass"),
            libraries=[Library.from_dict(x) for x in (d.get("libraries") or [])],
            patches=[cls.from_dict(x) for x in (d.get("patches") or [])],
            inherits_from=d.get("inheritsFrom"),
            jar=d.get("jar"),
            minecraft_arguments=d.get("minecraftArguments"),
            release_time=_parse_dt(d.get("releaseTime")),
            time=_parse_dt(d.get("time")),
            type=d.get("type"),
            data=d,
        )

    def to_dict(self) -> Dict[str, Any]:
        known = ("id", "version", "priority", "arguments", "mainClass", "libraries", "patches",
                 "inheritsFrom", "jar", "minecraftArguments", "releaseTime", "time", "type")
        d: Dict[str, Any] = {k: v for k, v in self.data.items() if k not in known}
        d["id"] = self.id
        optional = (
            ("version", self.version),
            ("priority", self.priority),
            ("arguments", self.arguments.to_dict() if self.arguments is not None else None),
            ("mainClass", self.main_class),
            ("inheritsFrom", self.inherits_from),
            ("jar", self.jar),
            ("minecraftArguments", self.minecraft_arguments),
            ("releaseTime", self.release_time.isoformat() if self.release_time else None),
            ("time", self.time.isoformat() if self.time else None),
            ("type", self.type),
        )
        for key, value in optional:
            if value is not None:
                d[key] = value
        if self.libraries:
            d["libraries"] = [lib.to_dict() for lib in self.libraries]
        if self.patches:
            d["patches"] = [p.to_dict() for p in self.patches]
        return d
