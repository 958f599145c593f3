"""Plain-file storage for agent memory notes.

Each agent that declares memory owns one directory holding a MEMORY.md
index plus optional topic files:

    ~/.claude/agent-memory/<name>/MEMORY.md          (user scope)
    <project>/.claude/agent-memory/<name>/MEMORY.md   (project scope)
    <project>/.claude/agent-memory-local/<name>/...   (local scope)

Only the first ``max_lines`` lines of MEMORY.md are loaded into a prompt;
topic files hold overflow detail and are read on demand. Files are never
locked, the last writer wins.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from ..agents.base import MemoryScope

logger = logging.getLogger(__name__)

INDEX_FILENAME = "MEMORY.md"
PROJECT_MEMORY_DIR = Path(".claude") / "agent-memory"
LOCAL_MEMORY_DIR = Path(".claude") / "agent-memory-local"

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class MemoryNoteError(ValueError):
    """Raised for invalid agent/topic names or unresolvable memory scopes."""

    pass


@dataclass(frozen=True)
class MemoryNote:
    """The loaded MEMORY.md of one agent.

    Attributes:
        agent: Agent name the note belongs to.
        scope: Where the note is stored.
        path: Location of MEMORY.md.
        content: Loaded text, cut to the store's line limit.
        topics: Names of topic files beside MEMORY.md.
        total_lines: Line count of the full file.
        truncated: True if content omits lines past the limit.
    """

    agent: str
    scope: MemoryScope
    path: Path
    content: str = ""
    topics: list[str] = field(default_factory=list)
    total_lines: int = 0
    truncated: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()


def _validate_name(value: str, kind: str) -> str:
    if not value or not _SAFE_NAME.match(value) or ".." in value:
        raise MemoryNoteError(f"Invalid {kind} name: {value!r}")
    return value


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MemoryNoteError(f"Cannot read memory note {path}: {e}") from e


class MemoryNotesStore:
    """Reads and writes memory notes following the agent-memory convention."""

    def __init__(
        self,
        memory_root: Path,
        project_root: Path | None = None,
        max_lines: int = 200,
    ) -> None:
        """Initialize the store.

        Args:
            memory_root: Directory holding user-scoped agent memory.
            project_root: Project directory for project and local scopes.
            max_lines: Lines of MEMORY.md loaded by load().
        """
        if max_lines < 1:
            raise ValueError("max_lines must be at least 1")
        self.memory_root = memory_root
        self.project_root = project_root
        self.max_lines = max_lines

    def memory_dir(self, agent: str, scope: MemoryScope = MemoryScope.USER) -> Path:
        """Directory that holds the agent's MEMORY.md and topic files.

        Raises:
            MemoryNoteError: If the agent name is unsafe or the scope needs
                a project root that is not configured.
        """
        _validate_name(agent, "agent")

        if scope is MemoryScope.USER:
            return self.memory_root / agent

        if self.project_root is None:
            raise MemoryNoteError(
                f"Memory scope '{scope.value}' requires a project root"
            )
        if scope is MemoryScope.PROJECT:
            return self.project_root / PROJECT_MEMORY_DIR / agent
        return self.project_root / LOCAL_MEMORY_DIR / agent

    def index_path(self, agent: str, scope: MemoryScope = MemoryScope.USER) -> Path:
        """Path of the agent's MEMORY.md."""
        return self.memory_dir(agent, scope) / INDEX_FILENAME

    def exists(self, agent: str, scope: MemoryScope = MemoryScope.USER) -> bool:
        return self.index_path(agent, scope).is_file()

    def load(self, agent: str, scope: MemoryScope = MemoryScope.USER) -> MemoryNote:
        """Load the agent's MEMORY.md, cut to max_lines.

        Returns an empty note when the file does not exist yet.
        """
        path = self.index_path(agent, scope)
        topics = self.list_topics(agent, scope)

        if not path.is_file():
            return MemoryNote(agent=agent, scope=scope, path=path, topics=topics)

        lines = _read_text(path).splitlines()
        truncated = len(lines) > self.max_lines
        if truncated:
            logger.debug(
                "MEMORY.md for %s has %d lines, loading first %d",
                agent,
                len(lines),
                self.max_lines,
            )

        return MemoryNote(
            agent=agent,
            scope=scope,
            path=path,
            content="\n".join(lines[: self.max_lines]),
            topics=topics,
            total_lines=len(lines),
            truncated=truncated,
        )

    def init(self, agent: str, scope: MemoryScope = MemoryScope.USER) -> Path:
        """Create MEMORY.md with a heading if it does not exist.

        Existing notes are left untouched.

        Returns:
            Path to MEMORY.md.
        """
        path = self.index_path(agent, scope)
        if path.exists():
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# {agent} memory\n", encoding="utf-8")
        return path

    def write(
        self, agent: str, content: str, scope: MemoryScope = MemoryScope.USER
    ) -> Path:
        """Replace the agent's MEMORY.md with new content."""
        path = self.index_path(agent, scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        if content and not content.endswith("\n"):
            content += "\n"
        path.write_text(content, encoding="utf-8")
        return path

    def append(
        self, agent: str, text: str, scope: MemoryScope = MemoryScope.USER
    ) -> Path:
        """Append text to MEMORY.md, creating it if needed."""
        path = self.init(agent, scope)
        existing = _read_text(path)
        prefix = "" if not existing or existing.endswith("\n") else "\n"
        with open(path, "a", encoding="utf-8") as f:
            f.write(prefix + text.rstrip("\n") + "\n")
        return path

    def _topic_path(self, agent: str, topic: str, scope: MemoryScope) -> Path:
        if topic.endswith(".md"):
            topic = topic[:-3]
        _validate_name(topic, "topic")
        if topic.upper() == INDEX_FILENAME[:-3]:
            raise MemoryNoteError("Topic name cannot be MEMORY")
        return self.memory_dir(agent, scope) / f"{topic}.md"

    def list_topics(self, agent: str, scope: MemoryScope = MemoryScope.USER) -> list[str]:
        """Names of topic files beside MEMORY.md, sorted."""
        directory = self.memory_dir(agent, scope)
        if not directory.is_dir():
            return []
        return sorted(
            p.stem
            for p in directory.glob("*.md")
            if p.is_file() and p.name != INDEX_FILENAME
        )

    def read_topic(
        self, agent: str, topic: str, scope: MemoryScope = MemoryScope.USER
    ) -> str | None:
        """Read a topic file, None if it does not exist."""
        path = self._topic_path(agent, topic, scope)
        if not path.is_file():
            return None
        return _read_text(path)

    def write_topic(
        self,
        agent: str,
        topic: str,
        content: str,
        scope: MemoryScope = MemoryScope.USER,
    ) -> Path:
        """Create or replace a topic file."""
        path = self._topic_path(agent, topic, scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def format_for_prompt(self, note: MemoryNote) -> str:
        """Format a note as a block for injection into the system prompt.

        Returns:
            Tagged memory block, or empty string if the note is empty.
        """
        if note.is_empty:
            return ""

        lines = [f'<agent_memory agent="{note.agent}" path="{note.path}">']
        lines.append(note.content)
        if note.truncated:
            lines.append(
                f"(MEMORY.md truncated: showing {self.max_lines} of "
                f"{note.total_lines} lines)"
            )
        if note.topics:
            lines.append(f"Topic files: {', '.join(note.topics)}")
        lines.append("</agent_memory>")
        return "\n".join(lines)
