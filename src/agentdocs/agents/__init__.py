"""Agent definition documents: data model, parser and catalog.

An agent document is Markdown with a YAML metadata block (name, description,
model, optional memory and tools) followed by free-text instructions that a
host runtime loads as a system prompt.
"""

from .base import AgentDefinition, AgentSource, MemoryScope
from .parser import (
    AgentParseError,
    AgentValidationError,
    parse_agent_content,
    parse_agent_file,
    parse_memory_value,
)
from .catalog import AgentCatalog, is_excluded, iter_agent_files

__all__ = [
    "AgentCatalog",
    "AgentDefinition",
    "AgentParseError",
    "AgentSource",
    "AgentValidationError",
    "MemoryScope",
    "is_excluded",
    "iter_agent_files",
    "parse_agent_content",
    "parse_agent_file",
    "parse_memory_value",
]
