"""Structural lint rules for agent documents.

Per-document rules take the parsed definition, its raw text and the active
config, and return a list of issues. The duplicate-name rule works across
all documents of a run.
"""

import re
from pathlib import Path
from typing import Callable, Iterator

from ..agents.base import AgentDefinition
from ..config import AgentDocsConfig
from .issues import LintIssue, Severity

INVALID_DOCUMENT = "AD001"
DUPLICATE_NAME = "AD002"
NAME_FORMAT = "AD003"
FILENAME_MISMATCH = "AD004"
UNKNOWN_MODEL = "AD005"
MEMORY_PATH = "AD006"
MEMORY_UNDECLARED = "AD007"
DOCUMENT_TOO_LONG = "AD008"
EMPTY_BODY = "AD009"
MEMORY_TOO_LONG = "AD010"

RULE_NAMES = {
    INVALID_DOCUMENT: "invalid-document",
    DUPLICATE_NAME: "duplicate-name",
    NAME_FORMAT: "name-format",
    FILENAME_MISMATCH: "filename-mismatch",
    UNKNOWN_MODEL: "unknown-model",
    MEMORY_PATH: "memory-path",
    MEMORY_UNDECLARED: "memory-undeclared",
    DOCUMENT_TOO_LONG: "document-too-long",
    EMPTY_BODY: "empty-body",
    MEMORY_TOO_LONG: "memory-too-long",
}

MAX_NAME_LENGTH = 64
NAME_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
MEMORY_PATH_PATTERN = re.compile(r"agent-memory(?:-local)?/([^/\s`'\"()\[\]]+)/")
_PLACEHOLDER = re.compile(r"^(<[^>]*>|\{[^}]*\}|\$\{?\w+\}?|\*)$")

DocumentRule = Callable[[AgentDefinition, str, AgentDocsConfig], list[LintIssue]]


def _path(agent: AgentDefinition) -> Path:
    return agent.path or Path("<string>")


def _line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def check_name_format(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    """Names are lowercase kebab-case and reasonably short."""
    if NAME_PATTERN.match(agent.name) and len(agent.name) <= MAX_NAME_LENGTH:
        return []
    return [
        LintIssue(
            NAME_FORMAT,
            Severity.WARNING,
            _path(agent),
            f"Name '{agent.name}' should be lowercase kebab-case "
            f"(max {MAX_NAME_LENGTH} characters)",
        )
    ]


def check_filename(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    if agent.path is None or agent.path.stem == agent.name:
        return []
    return [
        LintIssue(
            FILENAME_MISMATCH,
            Severity.WARNING,
            agent.path,
            f"File name '{agent.path.name}' does not match agent name '{agent.name}'",
        )
    ]


def check_model(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    if agent.model is None or agent.model in config.allowed_models:
        return []
    return [
        LintIssue(
            UNKNOWN_MODEL,
            Severity.WARNING,
            _path(agent),
            f"Model '{agent.model}' is not one of: {', '.join(config.allowed_models)}",
        )
    ]


def _memory_references(text: str) -> Iterator[tuple[str, re.Match[str]]]:
    """Yield (owner, match) for each memory path naming a concrete agent."""
    for match in MEMORY_PATH_PATTERN.finditer(text):
        owner = match.group(1)
        if not _PLACEHOLDER.match(owner):
            yield owner, match


def check_memory_paths(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    """Memory paths mentioned in the document must belong to this agent."""
    return [
        LintIssue(
            MEMORY_PATH,
            Severity.ERROR,
            _path(agent),
            f"Memory path '{match.group(0)}' belongs to '{owner}', "
            f"expected '{agent.name}'",
            line=_line_of(text, match.start()),
        )
        for owner, match in _memory_references(text)
        if owner != agent.name
    ]


def check_memory_undeclared(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    if agent.has_memory or next(_memory_references(text), None) is None:
        return []
    return [
        LintIssue(
            MEMORY_UNDECLARED,
            Severity.WARNING,
            _path(agent),
            "Document references a memory directory but does not declare 'memory'",
        )
    ]


def check_length(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    total = len(text.splitlines())
    if total <= config.max_document_lines:
        return []
    return [
        LintIssue(
            DOCUMENT_TOO_LONG,
            Severity.WARNING,
            _path(agent),
            f"Document has {total} lines (limit {config.max_document_lines})",
        )
    ]


def check_body(
    agent: AgentDefinition, text: str, config: AgentDocsConfig
) -> list[LintIssue]:
    if agent.body:
        return []
    return [
        LintIssue(EMPTY_BODY, Severity.WARNING, _path(agent), "Instruction body is empty")
    ]


DOCUMENT_RULES: dict[str, DocumentRule] = {
    NAME_FORMAT: check_name_format,
    FILENAME_MISMATCH: check_filename,
    UNKNOWN_MODEL: check_model,
    MEMORY_PATH: check_memory_paths,
    MEMORY_UNDECLARED: check_memory_undeclared,
    DOCUMENT_TOO_LONG: check_length,
    EMPTY_BODY: check_body,
}


def check_unique_names(agents: list[AgentDefinition]) -> list[LintIssue]:
    """Every name appears in at most one document."""
    by_name: dict[str, list[AgentDefinition]] = {}
    for agent in agents:
        by_name.setdefault(agent.name, []).append(agent)

    issues: list[LintIssue] = []
    for name, group in by_name.items():
        if len(group) < 2:
            continue
        for agent in group:
            others = ", ".join(str(_path(a)) for a in group if a is not agent)
            issues.append(
                LintIssue(
                    DUPLICATE_NAME,
                    Severity.ERROR,
                    _path(agent),
                    f"Agent name '{name}' is also defined in {others}",
                )
            )
    return issues


def check_memory_length(
    path: Path, total_lines: int, max_lines: int
) -> list[LintIssue]:
    if total_lines <= max_lines:
        return []
    return [
        LintIssue(
            MEMORY_TOO_LONG,
            Severity.WARNING,
            path,
            f"MEMORY.md has {total_lines} lines; only the first {max_lines} are loaded. "
            "Move detail into topic files",
        )
    ]
