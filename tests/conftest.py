"""
Shared fixtures and helpers for the multimcpack test suite.
"""

import json
import zipfile
from pathlib import Path

import pytest

from multimcpack.paths import GameRepository

PACK_URL = "https://example.com/modpack/pack.toml"
JVM_ARGS = f"-javaagent:packwiz-installer-bootstrap.jar={PACK_URL}"


def make_zip(path, members):
    """Write `members` (dict or list of (name, data) pairs) to a zip, in the given order."""
    items = members.items() if isinstance(members, dict) else members
    with zipfile.ZipFile(path, "w") as zf:
        for member, data in items:
            if isinstance(data, (dict, list)):
                data = json.dumps(data)
            zf.writestr(member, data)
    return path


def make_legacy_zip(path, members, encoding):
    """
    Like make_zip, but entry names are stored as raw `encoding` bytes without the
    UTF-8 flag, the way older Windows zip tools write them.

    zipfile always flags non-ASCII names as UTF-8, so each name is written as an
    ASCII stand-in of the same byte length and swapped for the real bytes after.
    """
    swaps = []
    staged = []
    for index, (member, data) in enumerate(members):
        raw = member.encode(encoding)
        filler = ord("A") + index
        stand_in = bytes(b if b < 0x80 else filler for b in raw)
        swaps.append((stand_in, raw))
        staged.append((stand_in.decode("ascii"), data))
    make_zip(path, staged)
    blob = Path(path).read_bytes()
    for stand_in, raw in swaps:
        blob = blob.replace(stand_in, raw)
    Path(path).write_bytes(blob)
    return path


def forge_patch(name="Forge", version="14.23.5.2860", tweakers=("net.minecraftforge.fml.common.launcher.FMLTweaker",)):
    return {
        "formatVersion": 1,
        "name": name,
        "uid": "net.minecraftforge",
        "version": version,
        "mainClass": "net.minecraft.launchwrapper.Launch",
        "+tweakers": list(tweakers),
        "libraries": [
            {"name": "net.minecraftforge:forge:1.12.2-14.23.5.2860", "MMC-hint": "local"},
        ],
    }


def mmc_pack(*components):
    return {"formatVersion": 1, "components": [{"uid": "net.minecraft", "version": "1.12.2"}] + list(components)}


def pack_members(name="TestPack",
                 *,
                 jvm_args=JVM_ARGS,
                 patches=None,
                 components=({"uid": "net.minecraftforge", "version": "14.23.5.2860"},),
                 extra=()):
    """Members of a typical MultiMC export rooted at /<name>/."""
    run_cfg = "InstanceType=OneSix\n"
    if jvm_args is not None:
        run_cfg += f"JvmArgs={jvm_args}\n"
    members = [
        (f"{name}/instance.cfg", f"[General]\nname={name}\nInstanceType=OneSix\nIntendedVersion=1.12.2\n"),
        (f"{name}/mmc-pack.json", mmc_pack(*components)),
        (f"{name}/.minecraft/instance.cfg", run_cfg),
        (f"{name}/.minecraft/config/forge.cfg", "general {}\n"),
        (f"{name}/.minecraft/mods/example.jar", b"jar-bytes"),
    ]
    if patches is None:
        patches = [(f"{name}/patches/net.minecraftforge.json", forge_patch())]
    members.extend(patches)
    members.extend(extra)
    return members


@pytest.fixture
def repo(tmp_path):
    """A GameRepository rooted in a fresh temporary game directory."""
    return GameRepository(tmp_path / "game")


@pytest.fixture
def pack_zip(tmp_path):
    """Factory writing a MultiMC export to tmp_path and returning its path."""
    def _make(filename="TestPack.zip", **kwargs):
        return make_zip(tmp_path / filename, pack_members(**kwargs))
    return _make
