"""Linter: runs the structural rules over a set of agent documents."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from ..agents.base import AgentDefinition, AgentSource
from ..agents.catalog import iter_agent_files
from ..agents.parser import AgentParseError, parse_agent_content
from ..config import AgentDocsConfig
from .issues import LintIssue, LintReport, Severity
from .rules import (
    DOCUMENT_RULES,
    DUPLICATE_NAME,
    INVALID_DOCUMENT,
    MEMORY_TOO_LONG,
    check_memory_length,
    check_unique_names,
)

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..memory import MemoryNotesStore

logger = logging.getLogger(__name__)


class Linter:
    """Checks agent documents for well-formedness.

    Example:
        linter = Linter(config)
        report = linter.lint_paths([Path(".claude/agents")])
        for issue in report.sorted_issues():
            print(issue.format())
    """

    def __init__(
        self,
        config: AgentDocsConfig | None = None,
        event_logger: JSONLLogger | None = None,
    ) -> None:
        self.config = config or AgentDocsConfig()
        self.event_logger = event_logger

    def _enabled(self, code: str) -> bool:
        return not self.config.is_rule_disabled(code)

    def collect(self, paths: list[Path]) -> list[Path]:
        """Expand files and directories into the Markdown files to lint.

        Explicitly named files are always included; directory contents are
        filtered by the exclude globs.
        """
        files: list[Path] = []
        seen: set[Path] = set()
        for path in paths:
            if path.is_dir():
                candidates = list(iter_agent_files(path, self.config.exclude))
            else:
                candidates = [path]
            for candidate in candidates:
                key = candidate.resolve()
                if key not in seen:
                    seen.add(key)
                    files.append(candidate)
        return files

    def lint_file(self, path: Path) -> tuple[AgentDefinition | None, list[LintIssue]]:
        """Lint a single document.

        Returns:
            The parsed definition (None if it failed to parse) and its issues.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return None, self._invalid(path, f"Cannot read file: {e}")

        try:
            agent = parse_agent_content(text, path=path, source=AgentSource.PROJECT)
        except AgentParseError as e:
            return None, self._invalid(path, str(e))

        issues: list[LintIssue] = []
        for code, rule in DOCUMENT_RULES.items():
            if self._enabled(code):
                issues.extend(rule(agent, text, self.config))
        return agent, issues

    def _invalid(self, path: Path, message: str) -> list[LintIssue]:
        if not self._enabled(INVALID_DOCUMENT):
            return []
        return [LintIssue(INVALID_DOCUMENT, Severity.ERROR, path, message)]

    def lint_paths(
        self,
        paths: list[Path],
        memory_store: MemoryNotesStore | None = None,
    ) -> LintReport:
        """Lint every document under the given paths.

        Missing paths are reported as invalid documents.

        Args:
            paths: Files or directories to lint.
            memory_store: If given, also check the memory notes of agents
                that declare memory.

        Returns:
            LintReport with all issues found.
        """
        started = time.monotonic()
        report = LintReport()
        agents: list[AgentDefinition] = []

        for path in paths:
            if not path.exists():
                report.extend(self._invalid(path, "Path does not exist"))

        for path in self.collect([p for p in paths if p.exists()]):
            report.files_checked += 1
            agent, issues = self.lint_file(path)
            report.extend(issues)
            if agent is not None:
                agents.append(agent)

        if self._enabled(DUPLICATE_NAME):
            report.extend(check_unique_names(agents))

        if memory_store is not None:
            report.extend(self.lint_memory(agents, memory_store))

        logger.debug(
            "Linted %d file(s): %d error(s), %d warning(s)",
            report.files_checked,
            len(report.errors),
            len(report.warnings),
        )
        if self.event_logger is not None:
            self.event_logger.log_lint_run(
                report.files_checked,
                len(report.errors),
                len(report.warnings),
                duration_ms=(time.monotonic() - started) * 1000,
            )
        return report

    def lint_memory(
        self, agents: list[AgentDefinition], store: MemoryNotesStore
    ) -> list[LintIssue]:
        """Check the MEMORY.md of each agent that declares memory."""
        if not self._enabled(MEMORY_TOO_LONG):
            return []

        issues: list[LintIssue] = []
        for agent in agents:
            if agent.memory is None:
                continue
            try:
                note = store.load(agent.name, agent.memory)
            except ValueError as e:
                logger.warning("Skipping memory check for %s: %s", agent.name, e)
                continue
            issues.extend(
                check_memory_length(note.path, note.total_lines, store.max_lines)
            )
        return issues
