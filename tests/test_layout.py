from multimcpack.archive import ArchiveView
from multimcpack.layout import detect_subdirectory
from tests.conftest import make_zip


def _detect(tmp_path, members, name="Pack"):
    zip_path = make_zip(tmp_path / "layout.zip", members)
    with ArchiveView.open(zip_path) as archive:
        return detect_subdirectory(archive.root, name)


def test_root_dot_minecraft_wins_over_named_layouts(tmp_path):
    members = [
        ("Pack/minecraft/options.txt", "x"),
        (".minecraft/options.txt", "x"),
    ]
    assert _detect(tmp_path, members) == "/.minecraft"


def test_root_minecraft(tmp_path):
    members = [("minecraft/options.txt", "x"), ("Pack/.minecraft/options.txt", "x")]
    assert _detect(tmp_path, members) == "/minecraft"


def test_named_dot_minecraft_before_named_minecraft(tmp_path):
    members = [("Pack/minecraft/options.txt", "x"), ("Pack/.minecraft/options.txt", "x")]
    assert _detect(tmp_path, members) == "/Pack/.minecraft"


def test_named_minecraft(tmp_path):
    assert _detect(tmp_path, [("Pack/minecraft/options.txt", "x")]) == "/Pack/minecraft"


def test_other_names_are_not_probed(tmp_path):
    members = [("Other/.minecraft/options.txt", "x")]
    assert _detect(tmp_path, members) == "/Pack/.minecraft"


def test_falls_back_without_error(tmp_path):
    assert _detect(tmp_path, [("Pack/instance.cfg", "name=Pack")], name="Pack") == "/Pack/.minecraft"
