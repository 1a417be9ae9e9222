from multimcpack.builder import GameBuilder
from multimcpack.loaders import resolve_loaders
from multimcpack.types_models import MultiMCManifest


def _builder(repo):
    return GameBuilder(repo).name("pack").game_version("1.20.1")


def _pack(*components):
    return MultiMCManifest.from_dict({"components": [{"uid": "net.minecraft", "version": "1.20.1"}] + list(components)})


def test_vanilla_requests_only_game_version(repo):
    builder = _builder(repo)
    assert resolve_loaders(_pack(), builder) == {}
    assert builder.requested_versions == {"game": "1.20.1"}


def test_missing_mmc_pack_is_vanilla(repo):
    builder = _builder(repo)
    assert resolve_loaders(None, builder) == {}
    assert builder.requested_versions == {"game": "1.20.1"}


def test_single_versioned_loader(repo):
    builder = _builder(repo)
    selected = resolve_loaders(_pack({"uid": "net.fabricmc.fabric-loader", "version": "0.15.7"}), builder)
    assert selected == {"fabric": "0.15.7"}
    assert builder.requested_versions == {"game": "1.20.1", "fabric": "0.15.7"}


def test_unversioned_component_requests_nothing(repo):
    builder = _builder(repo)
    assert resolve_loaders(_pack({"uid": "net.neoforged"}), builder) == {}
    assert resolve_loaders(_pack({"uid": "net.neoforged", "version": ""}), builder) == {}
    assert builder.requested_versions == {"game": "1.20.1"}


def test_first_matching_component_is_used(repo):
    builder = _builder(repo)
    pack = _pack(
        {"uid": "org.quiltmc.quilt-loader", "version": "0.23.0"},
        {"uid": "org.quiltmc.quilt-loader", "version": "0.19.0"},
    )
    assert resolve_loaders(pack, builder) == {"quilt": "0.23.0"}


def test_every_known_loader(repo):
    builder = _builder(repo)
    pack = _pack(
        {"uid": "com.mumfrey.liteloader", "version": "1.12.2-SNAPSHOT"},
        {"uid": "net.minecraftforge", "version": "14.23.5.2860"},
        {"uid": "net.neoforged", "version": "20.4.80"},
        {"uid": "net.fabricmc.fabric-loader", "version": "0.15.7"},
        {"uid": "org.quiltmc.quilt-loader", "version": "0.23.0"},
        {"uid": "net.fabricmc.intermediary", "version": "1.20.1"},
    )
    selected = resolve_loaders(pack, builder)
    assert selected == {
        "forge": "14.23.5.2860",
        "neoforge": "20.4.80",
        "liteloader": "1.12.2-SNAPSHOT",
        "fabric": "0.15.7",
        "quilt": "0.23.0",
    }


def test_launcher_bookkeeping_keys_are_kept_but_ignored(repo):
    raw = {"uid": "net.fabricmc.fabric-loader", "version": "0.15.7",
           "cachedName": "Fabric Loader", "important": True, "dependencyOnly": False}
    pack = _pack(raw)
    builder = _builder(repo)
    assert resolve_loaders(pack, builder) == {"fabric": "0.15.7"}
    assert pack.find_component("net.fabricmc.fabric-loader").data["cachedName"] == "Fabric Loader"
    assert pack.to_dict()["components"][1]["important"] is True
