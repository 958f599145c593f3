"""Tests for configuration loading and saving."""

import json
from pathlib import Path

import pytest

from agentdocs.config import (
    CONFIG_ENV_VAR,
    AgentDocsConfig,
    load_config,
    resolve_config_path,
    save_config,
)


class TestAgentDocsConfig:
    """Tests for AgentDocsConfig dataclass."""

    def test_default_values(self) -> None:
        """Should have sensible defaults."""
        config = AgentDocsConfig()

        assert config.bundled_dir is not None
        assert "bundled" in str(config.bundled_dir)
        assert config.user_dir == Path.home() / ".claude" / "agents"
        assert config.memory_root == Path.home() / ".claude" / "agent-memory"
        assert config.project_root is None
        assert config.project_agents_dir is None
        assert config.max_memory_lines == 200
        assert config.max_document_lines == 500
        assert config.allowed_models == ["sonnet", "opus", "haiku", "inherit"]
        assert config.exclude == ["README.md"]
        assert config.log_enabled is True

    def test_project_agents_dir(self, tmp_path: Path) -> None:
        config = AgentDocsConfig(project_root=tmp_path)

        assert config.project_agents_dir == tmp_path / ".claude" / "agents"

    def test_invalid_limits(self) -> None:
        with pytest.raises(ValueError, match="max_memory_lines"):
            AgentDocsConfig(max_memory_lines=0)
        with pytest.raises(ValueError, match="max_document_lines"):
            AgentDocsConfig(max_document_lines=0)

    def test_is_rule_disabled_case_insensitive(self) -> None:
        config = AgentDocsConfig(disabled_rules=["ad004"])

        assert config.is_rule_disabled("AD004") is True
        assert config.is_rule_disabled("AD005") is False


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nonexistent.json")

        assert config.max_memory_lines == 200

    def test_load_full_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps(
                {
                    "agents": {
                        "user_dir": str(tmp_path / "agents"),
                        "project_root": str(tmp_path / "project"),
                        "exclude": ["README.md", "drafts/*"],
                    },
                    "lint": {
                        "disabled": ["AD004"],
                        "max_lines": 300,
                        "models": ["sonnet"],
                    },
                    "memory": {"root": str(tmp_path / "memory"), "max_lines": 50},
                    "logging": {"dir": str(tmp_path / "logs"), "enabled": False},
                }
            )
        )

        config = load_config(config_file)

        assert config.user_dir == tmp_path / "agents"
        assert config.project_root == tmp_path / "project"
        assert config.exclude == ["README.md", "drafts/*"]
        assert config.disabled_rules == ["AD004"]
        assert config.max_document_lines == 300
        assert config.allowed_models == ["sonnet"]
        assert config.memory_root == tmp_path / "memory"
        assert config.max_memory_lines == 50
        assert config.log_dir == tmp_path / "logs"
        assert config.log_enabled is False

    def test_expands_user(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"memory": {"root": "~/notes"}}))

        config = load_config(config_file)

        assert config.memory_root == Path.home() / "notes"

    def test_invalid_json_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text("{ invalid json }")

        config = load_config(config_file)

        assert config.disabled_rules == []

    def test_non_object_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text("[1, 2, 3]")

        assert load_config(config_file).max_memory_lines == 200

    def test_invalid_values_fall_back(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps(
                {
                    "agents": "not a dict",
                    "lint": {"disabled": "AD004", "max_lines": -1},
                    "memory": {"max_lines": "many"},
                    "logging": {"enabled": "sometimes"},
                }
            )
        )

        config = load_config(config_file)

        assert config.disabled_rules == []
        assert config.max_document_lines == 500
        assert config.max_memory_lines == 200
        assert config.log_enabled is True

    def test_env_var_selects_file(self, tmp_path: Path, monkeypatch) -> None:
        config_file = tmp_path / "from-env.json"
        config_file.write_text(json.dumps({"lint": {"disabled": ["AD009"]}}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert resolve_config_path() == config_file
        assert load_config().disabled_rules == ["AD009"]

    def test_explicit_path_beats_env_var(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.json"))

        assert resolve_config_path(tmp_path / "explicit.json") == tmp_path / "explicit.json"


class TestSaveConfig:
    """Tests for save_config function."""

    def test_defaults_write_empty_object(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"

        save_config(AgentDocsConfig(), config_file)

        assert json.loads(config_file.read_text()) == {}

    def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        config_file = tmp_path / "nested" / "dir" / "config.json"

        save_config(AgentDocsConfig(), config_file)

        assert config_file.exists()

    def test_round_trip(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        original = AgentDocsConfig(
            project_root=tmp_path / "project",
            memory_root=tmp_path / "memory",
            disabled_rules=["AD003"],
            max_memory_lines=150,
            log_enabled=False,
        )

        save_config(original, config_file)
        loaded = load_config(config_file)

        assert loaded.project_root == original.project_root
        assert loaded.memory_root == original.memory_root
        assert loaded.disabled_rules == ["AD003"]
        assert loaded.max_memory_lines == 150
        assert loaded.log_enabled is False
