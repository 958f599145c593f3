"""AgentCatalog: discovery and lookup of agent definition documents.

The catalog handles:
- Discovery: Scanning agent directories for Markdown documents
- Registry: Storing and retrieving definitions by name
- Prompt assembly: Document body plus the agent's memory block

It does not choose an agent for a task; the host runtime does that.
"""

from __future__ import annotations

import fnmatch
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from ..config import AgentDocsConfig
from .base import AgentDefinition, AgentSource
from .parser import AgentParseError, parse_agent_file

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..memory import MemoryNotesStore

logger = logging.getLogger(__name__)


def is_excluded(path: Path, patterns: list[str]) -> bool:
    """Check a file against exclude globs (matched on name and full path)."""
    return any(
        fnmatch.fnmatch(path.name, pattern) or fnmatch.fnmatch(path.as_posix(), pattern)
        for pattern in patterns
    )


def iter_agent_files(base_dir: Path, exclude: list[str] | None = None) -> Iterator[Path]:
    """Yield Markdown files under a directory, sorted, skipping excluded ones."""
    if not base_dir.is_dir():
        return
    for item in sorted(base_dir.rglob("*.md")):
        if item.is_file() and not is_excluded(item, exclude or []):
            yield item


class AgentCatalog:
    """Registry of agent definitions discovered from configured directories.

    Example:
        catalog = AgentCatalog(AgentDocsConfig(project_root=Path.cwd()))
        catalog.discover()

        agent = catalog.get("code-reviewer")
        prompt = catalog.build_prompt("code-reviewer", memory_store)

        # Reload only documents edited since discovery
        changed = catalog.refresh_changed()
    """

    def __init__(
        self,
        config: AgentDocsConfig | None = None,
        event_logger: JSONLLogger | None = None,
    ) -> None:
        self.config = config or AgentDocsConfig()
        self.event_logger = event_logger
        self._registry: dict[str, AgentDefinition] = {}
        self._mtimes: dict[str, float] = {}
        self._shadowed: list[AgentDefinition] = []
        self.failures: dict[Path, str] = {}

    def _source_dirs(self) -> list[tuple[AgentSource, Path | None]]:
        return [
            (AgentSource.BUNDLED, self.config.bundled_dir),
            (AgentSource.USER, self.config.user_dir),
            (AgentSource.PROJECT, self.config.project_agents_dir),
        ]

    def discover(self) -> list[AgentDefinition]:
        """Discover agent documents from configured directories.

        Scans directories in order of precedence (lowest to highest):
        bundled, user, project. When two documents share a name, the one
        from the higher priority source wins; within one source the first
        file in sorted order wins.

        Any earlier registry state is discarded, so calling it again rescans
        from scratch.

        Returns:
            Definitions parsed during this pass, including shadowed ones.
        """
        self.clear()
        started = time.monotonic()
        discovered: list[AgentDefinition] = []

        for source, directory in self._source_dirs():
            if directory is None or not directory.exists():
                continue
            for path in iter_agent_files(directory, self.config.exclude):
                try:
                    agent = parse_agent_file(path, source=source)
                except AgentParseError as e:
                    logger.warning("Failed to load agent from %s: %s", path, e)
                    self.failures[path] = str(e)
                    continue
                self.register(agent)
                discovered.append(agent)

        if self.event_logger is not None:
            self.event_logger.log_agent_load(
                loaded=len(discovered),
                failed=len(self.failures),
                duration_ms=(time.monotonic() - started) * 1000,
            )
        return discovered

    def register(self, agent: AgentDefinition) -> bool:
        """Register a definition, honoring source precedence.

        Returns:
            True if the definition is now the active one for its name.
        """
        existing = self._registry.get(agent.name)
        if existing is not None and agent.source.priority <= existing.source.priority:
            self._shadowed.append(agent)
            return False

        if existing is not None:
            self._shadowed.append(existing)
        self._registry[agent.name] = agent
        if agent.path is not None and agent.path.exists():
            self._mtimes[agent.name] = agent.path.stat().st_mtime
        return True

    def unregister(self, name: str) -> None:
        self._registry.pop(name, None)
        self._mtimes.pop(name, None)

    def get(self, name: str) -> AgentDefinition | None:
        return self._registry.get(name)

    def list_agents(self) -> list[AgentDefinition]:
        """Active definitions sorted by name."""
        return sorted(self._registry.values(), key=lambda a: a.name)

    @property
    def shadowed(self) -> list[AgentDefinition]:
        """Definitions hidden by another document with the same name."""
        return list(self._shadowed)

    @property
    def agent_count(self) -> int:
        return len(self._registry)

    def refresh_changed(self) -> list[str]:
        """Reload documents whose files changed since they were registered.

        Documents whose file was deleted are dropped from the registry, and
        the highest priority definition they shadowed takes their place.

        Returns:
            Names of agents that were reloaded.
        """
        reloaded: list[str] = []

        for name, agent in list(self._registry.items()):
            if agent.path is None or self._registry.get(name) is not agent:
                continue
            if not agent.path.exists():
                self.unregister(name)
                self._promote_shadowed(name)
                continue

            try:
                current_mtime = agent.path.stat().st_mtime
            except OSError as e:
                logger.warning("Cannot stat agent %s: %s", name, e)
                continue

            if current_mtime <= self._mtimes.get(name, 0):
                continue

            try:
                updated = parse_agent_file(agent.path, source=agent.source)
            except AgentParseError as e:
                logger.warning("Failed to reload agent %s: %s", name, e)
                continue

            self.unregister(name)
            if updated.name != name:
                self._promote_shadowed(name)
            if self.register(updated):
                reloaded.append(updated.name)
                logger.debug("Reloaded modified agent: %s", updated.name)
            else:
                logger.debug(
                    "Reloaded agent %s is shadowed by a higher priority source",
                    updated.name,
                )

        return reloaded

    def _promote_shadowed(self, name: str) -> AgentDefinition | None:
        """Activate the best shadowed definition for a name whose file still exists."""
        candidates = [
            a for a in self._shadowed
            if a.name == name and (a.path is None or a.path.exists())
        ]
        if not candidates:
            return None
        # max() keeps the first of equal priorities, matching discovery order
        best = max(candidates, key=lambda a: a.source.priority)
        self._shadowed = [a for a in self._shadowed if a is not best]
        self.register(best)
        logger.debug("Promoted shadowed agent %s from %s", name, best.source.value)
        return best

    def clear(self) -> None:
        self._registry.clear()
        self._mtimes.clear()
        self._shadowed.clear()
        self.failures.clear()

    def build_prompt(
        self, name: str, memory_store: MemoryNotesStore | None = None
    ) -> str:
        """Assemble the system prompt a host would load for an agent.

        The document body comes first. If the agent declares memory and a
        store is given, the agent's MEMORY.md block follows it.

        Raises:
            KeyError: If no agent has this name.
        """
        agent = self.get(name)
        if agent is None:
            raise KeyError(f"Agent not found: {name}")

        parts = [agent.body]
        if memory_store is not None and agent.memory is not None:
            note = memory_store.load(agent.name, agent.memory)
            block = memory_store.format_for_prompt(note)
            if block:
                parts.append(block)
        return "\n\n".join(p for p in parts if p)
