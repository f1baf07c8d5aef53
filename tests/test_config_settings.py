import pytest

from memory_bridge.config import BackendKind, ConfigManager, config_manager, load_settings, resolve_config_path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "memory.yml"
    path.write_text(
        "\n".join(
            [
                "backend: http",
                "api_url: https://yaml.test/memory",
                "api_key: yaml-key",
                "context_window_length: 4",
                "logging:",
                "  level: debug",
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fresh_config_manager():
    config_manager._initialized = False
    config_manager._settings = None
    yield config_manager
    config_manager._initialized = False
    config_manager._settings = None


def test_defaults_without_sources(tmp_path):
    settings = load_settings(tmp_path / "missing.yml")

    assert settings.backend is BackendKind.HTTP
    assert settings.api_url is None
    assert settings.context_window_length == 10
    assert settings.workflows == {}
    assert settings.logging.level == "INFO"


def test_yaml_source(config_file):
    settings = load_settings(config_file)

    assert settings.api_url == "https://yaml.test/memory"
    assert settings.api_key.get_secret_value() == "yaml-key"
    assert settings.context_window_length == 4
    assert settings.logging.level == "DEBUG"


def test_env_overrides_yaml(config_file, monkeypatch):
    monkeypatch.setenv("MEMORY_BRIDGE_CONTEXT_WINDOW_LENGTH", "7")
    monkeypatch.setenv("MEMORY_BRIDGE_LOGGING__LEVEL", "warning")

    settings = load_settings(config_file)

    assert settings.context_window_length == 7
    assert settings.logging.level == "WARNING"
    assert settings.api_url == "https://yaml.test/memory"


def test_init_overrides_everything(config_file, monkeypatch):
    monkeypatch.setenv("MEMORY_BRIDGE_API_URL", "https://env.test/memory")

    settings = load_settings(config_file, api_url="https://init.test/memory")

    assert settings.api_url == "https://init.test/memory"


def test_dotenv_in_working_directory(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("MEMORY_BRIDGE_API_URL=https://dotenv.test/memory\n", encoding="utf-8")
    monkeypatch.setenv("MEMORY_BRIDGE_API_URL", "")
    monkeypatch.delenv("MEMORY_BRIDGE_API_URL")

    settings = load_settings(tmp_path / "missing.yml")

    assert settings.api_url == "https://dotenv.test/memory"


def test_workflow_commands_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("MEMORY_BRIDGE_BACKEND", "workflow")
    monkeypatch.setenv("MEMORY_BRIDGE_WORKFLOW_ID", "memory")
    monkeypatch.setenv("MEMORY_BRIDGE_WORKFLOWS", '{"memory": ["memory-store", "--json"]}')

    settings = load_settings(tmp_path / "missing.yml")

    assert settings.backend is BackendKind.WORKFLOW
    assert settings.workflows == {"memory": ["memory-store", "--json"]}


def test_broken_yaml_is_ignored(tmp_path, caplog):
    path = tmp_path / "broken.yml"
    path.write_text("api_url: [unclosed", encoding="utf-8")

    with caplog.at_level("ERROR"):
        settings = load_settings(path)

    assert settings.api_url is None
    failures = [r for r in caplog.records if r.msg == "Failed to load YAML config from %s: %s"]
    assert len(failures) == 1
    assert failures[0].args[0] == path


def test_non_mapping_yaml_is_ignored(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    assert load_settings(path).api_url is None


def test_config_path_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("MEMORY_BRIDGE_CONFIG_PATH", str(tmp_path / "custom.yml"))
    assert resolve_config_path() == tmp_path / "custom.yml"


def test_config_path_default_is_working_directory(tmp_path):
    assert resolve_config_path() == tmp_path / "memory_bridge.yml"


def test_config_manager_is_singleton():
    assert ConfigManager() is config_manager


def test_config_manager_caches_until_reload(fresh_config_manager, config_file, tmp_path):
    fresh_config_manager.load_config(config_path=config_file)
    assert fresh_config_manager.settings.context_window_length == 4

    fresh_config_manager.load_config(config_path=tmp_path / "missing.yml")
    assert fresh_config_manager.settings.context_window_length == 4

    fresh_config_manager.load_config(config_path=tmp_path / "missing.yml", force_reload=True)
    assert fresh_config_manager.settings.context_window_length == 10


def test_config_manager_falls_back_to_defaults(fresh_config_manager, tmp_path, caplog):
    path = tmp_path / "invalid.yml"
    path.write_text("context_window_length: many\n", encoding="utf-8")

    with caplog.at_level("ERROR"):
        fresh_config_manager.load_config(config_path=path, force_reload=True)

    assert fresh_config_manager.settings.context_window_length == 10
    assert any("Failed to validate settings" in r.getMessage() for r in caplog.records)
