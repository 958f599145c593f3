"""Configuration loader.

Loads agentdocs configuration from ~/.agentdocs/config.json (or the file named
by AGENTDOCS_CONFIG) and provides defaults for agent discovery, linting and
memory notes.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".agentdocs" / "config.json"
CONFIG_ENV_VAR = "AGENTDOCS_CONFIG"

DEFAULT_ALLOWED_MODELS = ["sonnet", "opus", "haiku", "inherit"]
DEFAULT_EXCLUDE = ["README.md"]
DEFAULT_MAX_MEMORY_LINES = 200
DEFAULT_MAX_DOCUMENT_LINES = 500


@dataclass
class AgentDocsConfig:
    """Configuration for discovery, linting and memory notes.

    Attributes:
        bundled_dir: Agent documents shipped with the package (auto-detected if None).
        user_dir: User's personal agent directory (~/.claude/agents).
        project_root: Project whose .claude/ directory holds project agents and memory.
        memory_root: Root of user-scoped memory notes (~/.claude/agent-memory).
        max_memory_lines: Lines of MEMORY.md loaded into a prompt.
        max_document_lines: Length limit enforced by the linter.
        allowed_models: Model aliases the linter accepts.
        disabled_rules: Lint rule codes to skip.
        exclude: Filename globs ignored during discovery and linting.
        log_dir: Directory for JSONL logs.
        log_enabled: Whether the CLI writes JSONL logs.
    """

    bundled_dir: Path | None = None
    user_dir: Path | None = None
    project_root: Path | None = None
    memory_root: Path | None = None
    max_memory_lines: int = DEFAULT_MAX_MEMORY_LINES
    max_document_lines: int = DEFAULT_MAX_DOCUMENT_LINES
    allowed_models: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_MODELS))
    disabled_rules: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    log_dir: Path | None = None
    log_enabled: bool = True

    def __post_init__(self) -> None:
        """Validate config and set defaults."""
        if self.bundled_dir is None:
            self.bundled_dir = Path(__file__).parent / "bundled"

        if self.user_dir is None:
            self.user_dir = Path.home() / ".claude" / "agents"

        if self.memory_root is None:
            self.memory_root = Path.home() / ".claude" / "agent-memory"

        if self.log_dir is None:
            self.log_dir = Path.home() / ".agentdocs" / "logs"

        if self.max_memory_lines < 1:
            raise ValueError("max_memory_lines must be at least 1")

        if self.max_document_lines < 1:
            raise ValueError("max_document_lines must be at least 1")

    @property
    def project_agents_dir(self) -> Path | None:
        """Agent directory inside the configured project, if any."""
        if self.project_root is None:
            return None
        return self.project_root / ".claude" / "agents"

    def is_rule_disabled(self, code: str) -> bool:
        """Check if a lint rule is explicitly disabled."""
        return code.upper() in (r.upper() for r in self.disabled_rules)


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Pick the config file: explicit path, then $AGENTDOCS_CONFIG, then default."""
    if config_path is not None:
        return config_path
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Path | None = None) -> AgentDocsConfig:
    """Load AgentDocsConfig from a JSON file.

    The config file should have this structure:
    ```json
    {
      "agents": {
        "user_dir": "~/.claude/agents",
        "exclude": ["README.md", "drafts/*"]
      },
      "lint": {
        "disabled": ["AD004"],
        "max_lines": 400,
        "models": ["sonnet", "opus", "haiku", "inherit"]
      },
      "memory": {
        "root": "~/.claude/agent-memory",
        "max_lines": 200
      },
      "logging": {
        "dir": "~/.agentdocs/logs",
        "enabled": true
      }
    }
    ```

    Args:
        config_path: Path to config file. Falls back to $AGENTDOCS_CONFIG,
            then DEFAULT_CONFIG_PATH.

    Returns:
        AgentDocsConfig instance with loaded values.
    """
    path = resolve_config_path(config_path)

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return AgentDocsConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        return AgentDocsConfig()
    except OSError as e:
        logger.warning("Cannot read %s: %s. Using defaults.", path, e)
        return AgentDocsConfig()

    if not isinstance(data, dict):
        logger.warning("Config in %s is not an object. Using defaults.", path)
        return AgentDocsConfig()

    return _parse_config(data)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    return value if isinstance(value, dict) else {}


def _optional_path(value: Any) -> Path | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return Path(value).expanduser()


def _string_list(value: Any, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(v) for v in value]


def _positive_int(value: Any, default: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        return default
    return value


def _parse_config(data: dict[str, Any]) -> AgentDocsConfig:
    """Parse config dictionary into AgentDocsConfig."""
    agents_data = _section(data, "agents")
    lint_data = _section(data, "lint")
    memory_data = _section(data, "memory")
    logging_data = _section(data, "logging")

    log_enabled = logging_data.get("enabled", True)
    if not isinstance(log_enabled, bool):
        log_enabled = True

    return AgentDocsConfig(
        user_dir=_optional_path(agents_data.get("user_dir")),
        project_root=_optional_path(agents_data.get("project_root")),
        exclude=_string_list(agents_data.get("exclude"), DEFAULT_EXCLUDE),
        disabled_rules=_string_list(lint_data.get("disabled"), []),
        max_document_lines=_positive_int(
            lint_data.get("max_lines"), DEFAULT_MAX_DOCUMENT_LINES
        ),
        allowed_models=_string_list(lint_data.get("models"), DEFAULT_ALLOWED_MODELS),
        memory_root=_optional_path(memory_data.get("root")),
        max_memory_lines=_positive_int(
            memory_data.get("max_lines"), DEFAULT_MAX_MEMORY_LINES
        ),
        log_dir=_optional_path(logging_data.get("dir")),
        log_enabled=log_enabled,
    )


def save_config(config: AgentDocsConfig, config_path: Path | None = None) -> None:
    """Save AgentDocsConfig to a JSON file.

    Only values that differ from the defaults are written.

    Args:
        config: The config to save.
        config_path: Path to write to. Falls back like load_config.
    """
    path = resolve_config_path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    defaults = AgentDocsConfig()
    data: dict[str, Any] = {}

    agents_data: dict[str, Any] = {}
    if config.user_dir != defaults.user_dir:
        agents_data["user_dir"] = str(config.user_dir)
    if config.project_root is not None:
        agents_data["project_root"] = str(config.project_root)
    if config.exclude != defaults.exclude:
        agents_data["exclude"] = config.exclude

    lint_data: dict[str, Any] = {}
    if config.disabled_rules:
        lint_data["disabled"] = config.disabled_rules
    if config.max_document_lines != DEFAULT_MAX_DOCUMENT_LINES:
        lint_data["max_lines"] = config.max_document_lines
    if config.allowed_models != defaults.allowed_models:
        lint_data["models"] = config.allowed_models

    memory_data: dict[str, Any] = {}
    if config.memory_root != defaults.memory_root:
        memory_data["root"] = str(config.memory_root)
    if config.max_memory_lines != DEFAULT_MAX_MEMORY_LINES:
        memory_data["max_lines"] = config.max_memory_lines

    logging_data: dict[str, Any] = {}
    if config.log_dir != defaults.log_dir:
        logging_data["dir"] = str(config.log_dir)
    if not config.log_enabled:
        logging_data["enabled"] = False

    for key, section in (
        ("agents", agents_data),
        ("lint", lint_data),
        ("memory", memory_data),
        ("logging", logging_data),
    ):
        if section:
            data[key] = section

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise
