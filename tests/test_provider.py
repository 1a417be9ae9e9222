import pytest

from multimcpack.archive import ArchiveView
from multimcpack.exceptions import ArchiveError, ManifestError
from multimcpack.provider import MultiMCModpackProvider
from tests.conftest import make_legacy_zip, make_zip, pack_members


def test_read_manifest(pack_zip):
    modpack = MultiMCModpackProvider.read_manifest(pack_zip())
    assert modpack.name == "TestPack"
    assert modpack.game_version == "1.12.2"
    assert modpack.encoding == "utf-8"
    config = modpack.manifest
    assert config.display_name == "TestPack"
    assert config.mmc_pack.find_component("net.minecraftforge").version == "14.23.5.2860"
    assert config.properties["InstanceType"] == "OneSix"


def test_intended_version_without_mmc_pack(tmp_path):
    zip_path = make_zip(tmp_path / "legacy.zip", [
        ("Legacy/instance.cfg", "name=Legacy Pack\nIntendedVersion=1.7.10\n"),
    ])
    modpack = MultiMCModpackProvider.read_manifest(zip_path)
    assert modpack.name == "Legacy"
    assert modpack.manifest.display_name == "Legacy Pack"
    assert modpack.game_version == "1.7.10"
    assert modpack.manifest.mmc_pack is None


def test_instance_cfg_at_archive_root_uses_file_stem(tmp_path):
    zip_path = make_zip(tmp_path / "Flat.zip", [("instance.cfg", "IntendedVersion=1.20.1\n"), (".minecraft/options.txt", "")])
    assert MultiMCModpackProvider.read_manifest(zip_path).name == "Flat"


def test_root_path_prefers_folder_with_instance_cfg(tmp_path):
    zip_path = make_zip(tmp_path / "p.zip", [
        ("docs/readme.txt", "hi"),
        ("Pack/instance.cfg", "name=Pack"),
    ])
    with ArchiveView.open(zip_path) as archive:
        assert MultiMCModpackProvider.get_root_path(archive.root).path == "/Pack"


def test_root_path_of_empty_archive(tmp_path):
    zip_path = make_zip(tmp_path / "empty.zip", [])
    with ArchiveView.open(zip_path) as archive:
        with pytest.raises(ArchiveError):
            MultiMCModpackProvider.get_root_path(archive.root)


def test_missing_instance_cfg(tmp_path):
    zip_path = make_zip(tmp_path / "p.zip", [("Pack/.minecraft/options.txt", "")])
    with pytest.raises(ManifestError):
        MultiMCModpackProvider.read_manifest(zip_path)


def test_malformed_mmc_pack(tmp_path):
    members = [m for m in pack_members() if not m[0].endswith("mmc-pack.json")]
    members.append(("TestPack/mmc-pack.json", "{ broken"))
    zip_path = make_zip(tmp_path / "p.zip", members)
    with pytest.raises(ManifestError):
        MultiMCModpackProvider.read_manifest(zip_path)


def test_read_manifest_detects_legacy_name_encoding(tmp_path):
    zip_path = make_legacy_zip(tmp_path / "gbk.zip", [
        ("整合包测试/instance.cfg", "name=整合包测试\nIntendedVersion=1.20.1\n"),
        ("整合包测试/.minecraft/options.txt", ""),
    ], "gbk")
    modpack = MultiMCModpackProvider.read_manifest(zip_path)
    assert modpack.encoding == "gb18030"
    assert modpack.name == "整合包测试"
    assert modpack.game_version == "1.20.1"
