import pytest

from multimcpack.agent import JavaAgentSpec, parse_jvm_args, read_java_agent
from multimcpack.exceptions import MissingConfigurationKeyError


def test_reads_agent_from_instance_cfg(tmp_path):
    (tmp_path / "instance.cfg").write_text(
        "InstanceType=OneSix\n"
        "JvmArgs=-javaagent:packwiz-installer-bootstrap.jar=https://example.com/pack.toml\n"
        "JvmArgs=-javaagent:other.jar=https://example.com/other.toml\n",
        encoding="utf-8",
    )
    spec = read_java_agent(tmp_path)
    game_dir = str(tmp_path.resolve())
    assert spec == JavaAgentSpec(jar_path=f"{game_dir}/packwiz-installer-bootstrap.jar",
                                 pack_url="https://example.com/pack.toml")
    assert spec.argument == f"-javaagent:{game_dir}/packwiz-installer-bootstrap.jar=https://example.com/pack.toml"


def test_missing_jvm_args_line(tmp_path):
    (tmp_path / "instance.cfg").write_text("InstanceType=OneSix\nOverrideJavaArgs=true\n", encoding="utf-8")
    with pytest.raises(MissingConfigurationKeyError) as excinfo:
        read_java_agent(tmp_path)
    assert excinfo.value.key == "JvmArgs"


def test_missing_instance_cfg_is_io_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_java_agent(tmp_path)


def test_url_keeps_later_equals_signs():
    spec = parse_jvm_args("-javaagent:boot.jar=https://example.com/pack.toml?ref=main", "/games/pack")
    assert spec.jar_path == "/games/pack/boot.jar"
    assert spec.pack_url == "https://example.com/pack.toml?ref=main"


@pytest.mark.parametrize("value", [
    "-javaagent:boot.jar",
    "-javaagent:boot.jar=",
    "-Xmx4G=https://example.com/pack.toml",
    "-javaagent:=https://example.com/pack.toml",
])
def test_incomplete_values_are_rejected(value):
    with pytest.raises(MissingConfigurationKeyError):
        parse_jvm_args(value, "/games/pack")
