"""Base types for agent definition documents.

This module defines the core data model:
- AgentSource: Where a definition comes from (bundled, user, project)
- MemoryScope: Where an agent's memory notes are persisted
- AgentDefinition: A parsed agent document (metadata plus instructions)
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class AgentSource(Enum):
    """Origin of an agent definition, determines precedence.

    Precedence (highest to lowest):
    1. PROJECT - Definitions checked into a project's .claude/agents
    2. USER - User's personal definitions (~/.claude/agents)
    3. BUNDLED - Shipped with agentdocs
    """

    BUNDLED = "bundled"
    USER = "user"
    PROJECT = "project"

    @property
    def priority(self) -> int:
        """Higher number = higher priority (overrides lower)."""
        priorities = {
            AgentSource.BUNDLED: 1,
            AgentSource.USER: 2,
            AgentSource.PROJECT: 3,
        }
        if self not in priorities:
            raise ValueError(f"No priority defined for {self}")
        return priorities[self]


class MemoryScope(Enum):
    """Storage location of an agent's persistent memory notes."""

    USER = "user"
    PROJECT = "project"
    LOCAL = "local"


@dataclass(frozen=True)
class AgentDefinition:
    """An agent persona loaded from a Markdown document.

    Attributes:
        name: Identifier, unique within the hosting system.
        description: Human-readable text the host uses to pick this agent.
        body: Free-text instructions loaded as the system prompt.
        model: Model alias requested by the document, if any.
        memory: Scope of persistent memory notes, None if the agent keeps none.
        tools: Tool names the document restricts the agent to.
        source: Where the document was found.
        path: File the definition was parsed from.
    """

    name: str
    description: str
    body: str = ""
    model: str | None = None
    memory: MemoryScope | None = None
    tools: list[str] = field(default_factory=list)
    source: AgentSource = AgentSource.BUNDLED
    path: Path | None = None

    @property
    def has_memory(self) -> bool:
        """Whether the agent maintains persistent memory notes."""
        return self.memory is not None

    @property
    def line_count(self) -> int:
        """Number of lines in the instruction body."""
        if not self.body:
            return 0
        return len(self.body.splitlines())
