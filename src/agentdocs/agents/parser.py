"""Parser for agent definition documents with YAML frontmatter.

Reads agent Markdown files and extracts metadata (frontmatter) and
instructions (body). Uses python-frontmatter for robust parsing.
"""

from pathlib import Path
from typing import Any

import frontmatter

from .base import AgentDefinition, AgentSource, MemoryScope

_TRUE_STRINGS = ("true", "yes", "1", "on")
_FALSE_STRINGS = ("false", "no", "0", "off", "none", "")


class AgentParseError(Exception):
    """Raised when an agent document cannot be read or parsed."""

    pass


class AgentValidationError(AgentParseError):
    """Raised when agent frontmatter fails validation."""

    pass


def _parse_string_or_list(value: Any) -> list[str]:
    """Parse a value that can be a comma-separated string or a list."""
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    elif isinstance(value, list):
        return [str(t).strip() for t in value if str(t).strip()]
    return []


def _required_text(meta: dict[str, Any], key: str) -> str:
    """Extract a required, non-empty scalar field as a string."""
    if key not in meta or meta[key] is None:
        raise AgentValidationError(f"Missing required field: {key}")

    raw = meta[key]
    if not isinstance(raw, (str, int, float)) or isinstance(raw, bool):
        raise AgentValidationError(
            f"Field '{key}' must be a string, got {type(raw).__name__}"
        )
    value = str(raw).strip()
    if not value:
        raise AgentValidationError(f"Field '{key}' cannot be empty")
    return value


def parse_memory_value(value: Any) -> MemoryScope | None:
    """Interpret the `memory` frontmatter field.

    A boolean true means user scope. Strings may name a scope
    (user, project, local) or be a boolean-like word.

    Raises:
        AgentValidationError: If the value names no known scope.
    """
    if value is None or value is False:
        return None
    if value is True:
        return MemoryScope.USER
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _FALSE_STRINGS:
            return None
        if lowered in _TRUE_STRINGS:
            return MemoryScope.USER
        for scope in MemoryScope:
            if scope.value == lowered:
                return scope
    raise AgentValidationError(
        f"Field 'memory' must be a boolean or one of "
        f"{', '.join(s.value for s in MemoryScope)}, got {value!r}"
    )


def parse_agent_file(
    path: Path,
    source: AgentSource = AgentSource.BUNDLED,
) -> AgentDefinition:
    """Parse an agent Markdown file.

    Args:
        path: Path to the agent document.
        source: Where this document comes from (affects priority).

    Returns:
        The parsed AgentDefinition.

    Raises:
        AgentParseError: If the file cannot be read or parsed.
        AgentValidationError: If required fields are missing or invalid.
    """
    if not path.exists():
        raise AgentParseError(f"Agent file not found: {path}")

    if not path.is_file():
        raise AgentParseError(f"Not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise AgentParseError(f"Cannot read agent file {path}: {e}") from e

    return parse_agent_content(content, path=path, source=source)


def parse_agent_content(
    content: str,
    path: Path | None = None,
    source: AgentSource = AgentSource.BUNDLED,
) -> AgentDefinition:
    """Parse agent document content.

    Args:
        content: The raw Markdown text.
        path: Optional file path stored on the definition.
        source: Where this document comes from.

    Returns:
        The parsed AgentDefinition.

    Raises:
        AgentParseError: If the frontmatter is not valid YAML.
        AgentValidationError: If required fields are missing or invalid.
    """
    try:
        post = frontmatter.loads(content)
    except Exception as e:
        raise AgentParseError(f"Failed to parse frontmatter: {e}") from e

    meta = post.metadata
    if not meta:
        raise AgentValidationError("Missing frontmatter metadata block")

    name = _required_text(meta, "name")
    description = _required_text(meta, "description")

    model: str | None = None
    raw_model = meta.get("model")
    if raw_model is not None:
        model = str(raw_model).strip() or None

    return AgentDefinition(
        name=name,
        description=description,
        body=post.content.strip(),
        model=model,
        memory=parse_memory_value(meta.get("memory")),
        tools=_parse_string_or_list(meta.get("tools", [])),
        source=source,
        path=path,
    )
