"""agentdocs: tooling for agent persona documents and their memory notes."""

__version__ = "0.1.0"
