"""Tests for the agent documents shipped with the package."""

from pathlib import Path

import pytest

from agentdocs.agents import AgentCatalog, AgentSource, MemoryScope, parse_agent_file
from agentdocs.config import AgentDocsConfig
from agentdocs.lint import Linter

BUNDLED_DIR = Path(__file__).parent.parent.parent / "src" / "agentdocs" / "bundled"

EXPECTED = {
    "php-architect": MemoryScope.USER,
    "functional-tester": MemoryScope.PROJECT,
    "code-reviewer": None,
}


@pytest.fixture
def catalog(tmp_path: Path) -> AgentCatalog:
    config = AgentDocsConfig(bundled_dir=BUNDLED_DIR, user_dir=tmp_path / "none")
    catalog = AgentCatalog(config)
    catalog.discover()
    return catalog


def test_all_bundled_agents_discovered(catalog: AgentCatalog):
    assert {a.name for a in catalog.list_agents()} == set(EXPECTED)
    assert catalog.failures == {}
    assert all(a.source is AgentSource.BUNDLED for a in catalog.list_agents())


@pytest.mark.parametrize("name, scope", EXPECTED.items())
def test_memory_scopes(name: str, scope):
    agent = parse_agent_file(BUNDLED_DIR / f"{name}.md")

    assert agent.memory == scope


def test_bundled_agents_lint_clean():
    report = Linter(AgentDocsConfig()).lint_paths([BUNDLED_DIR])

    assert report.files_checked == len(EXPECTED)
    assert report.issues == []
