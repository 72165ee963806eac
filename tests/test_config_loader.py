import pytest

from near_contract_builder.cli.commands.config_loader import (
    DEFAULT_CONFIG,
    ensure_app_directories,
    load_and_resolve_config,
)


def write_config(tmp_path, text):
    config_dir = tmp_path / "config"
    config_dir.mkdir(exist_ok=True)
    path = config_dir / "application.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_default_file_falls_back_to_defaults(tmp_path):
    config = load_and_resolve_config(base_dir=tmp_path)
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_missing_explicit_file_is_fatal(tmp_path):
    with pytest.raises(SystemExit):
        load_and_resolve_config("nowhere.yml", base_dir=tmp_path)


def test_file_is_merged_over_defaults(tmp_path):
    write_config(tmp_path, "build_system:\n  command: /opt/rust/bin/cargo\nui:\n  type: tqdm\n")
    config = load_and_resolve_config(base_dir=tmp_path)

    assert config["build_system"]["command"] == "/opt/rust/bin/cargo"
    assert config["build_system"]["read_chunk_size"] == 4096
    assert config["ui"] == {"type": "tqdm", "enhanced_logging": True, "show_elapsed": True}
    assert DEFAULT_CONFIG["build_system"]["command"] == "cargo"


def test_log_file_is_resolved_against_config_folder(tmp_path):
    path = write_config(tmp_path, "logging:\n  log_file: ../logs/build.log\n")
    config = load_and_resolve_config(str(path), base_dir=tmp_path)

    assert config["logging"]["log_file"] == str((tmp_path / "logs" / "build.log").resolve())
    ensure_app_directories(config)
    assert (tmp_path / "logs").is_dir()


def test_empty_file_means_defaults(tmp_path):
    write_config(tmp_path, "")
    assert load_and_resolve_config(base_dir=tmp_path) == DEFAULT_CONFIG


@pytest.mark.parametrize("text", ["- just\n- a list\n", "build_system: [unclosed\n"])
def test_unusable_file_is_fatal(tmp_path, text):
    write_config(tmp_path, text)
    with pytest.raises(SystemExit):
        load_and_resolve_config(base_dir=tmp_path)
