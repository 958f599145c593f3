"""Tests for the Linter over files and directories."""

from pathlib import Path

import pytest

from agentdocs.config import AgentDocsConfig
from agentdocs.lint import Linter
from agentdocs.logging import JSONLLogger
from agentdocs.memory import MemoryNotesStore


def write_doc(base: Path, filename: str, content: str) -> Path:
    base.mkdir(parents=True, exist_ok=True)
    path = base / filename
    path.write_text(content)
    return path


def agent_doc(name: str, body: str = "Do the work.", extra: str = "") -> str:
    return f"---\nname: {name}\ndescription: Agent {name}\nmodel: sonnet\n{extra}---\n\n{body}\n"


@pytest.fixture
def linter(tmp_path: Path) -> Linter:
    return Linter(AgentDocsConfig(memory_root=tmp_path / "memory"))


def rules(report) -> list[str]:
    return sorted(i.rule for i in report.issues)


class TestLintPaths:
    def test_clean_directory(self, linter: Linter, tmp_path: Path):
        agents = tmp_path / "agents"
        write_doc(agents, "reviewer.md", agent_doc("reviewer"))
        write_doc(agents, "tester.md", agent_doc("tester"))

        report = linter.lint_paths([agents])

        assert report.files_checked == 2
        assert report.issues == []
        assert report.ok(strict=True)

    def test_invalid_document(self, linter: Linter, tmp_path: Path):
        agents = tmp_path / "agents"
        write_doc(agents, "notes.md", "# Not an agent\n")

        report = linter.lint_paths([agents])

        assert rules(report) == ["AD001"]
        assert not report.ok()

    def test_duplicate_names_across_directories(self, linter: Linter, tmp_path: Path):
        write_doc(tmp_path / "one", "reviewer.md", agent_doc("reviewer"))
        write_doc(tmp_path / "two", "reviewer.md", agent_doc("reviewer"))

        report = linter.lint_paths([tmp_path / "one", tmp_path / "two"])

        assert rules(report) == ["AD002", "AD002"]

    def test_same_file_given_twice_is_checked_once(
        self, linter: Linter, tmp_path: Path
    ):
        path = write_doc(tmp_path, "reviewer.md", agent_doc("reviewer"))

        report = linter.lint_paths([path, tmp_path])

        assert report.files_checked == 1
        assert report.issues == []

    def test_missing_path(self, linter: Linter, tmp_path: Path):
        report = linter.lint_paths([tmp_path / "nowhere"])

        assert rules(report) == ["AD001"]
        assert "does not exist" in report.issues[0].message

    def test_readme_excluded_from_directories(self, linter: Linter, tmp_path: Path):
        write_doc(tmp_path, "README.md", "# These are our agents\n")
        write_doc(tmp_path, "reviewer.md", agent_doc("reviewer"))

        report = linter.lint_paths([tmp_path])

        assert report.files_checked == 1

    def test_explicit_readme_is_linted(self, linter: Linter, tmp_path: Path):
        readme = write_doc(tmp_path, "README.md", "# These are our agents\n")

        report = linter.lint_paths([readme])

        assert rules(report) == ["AD001"]

    def test_multiple_warnings(self, linter: Linter, tmp_path: Path):
        write_doc(
            tmp_path,
            "other-name.md",
            "---\nname: Bad_Name\ndescription: d\nmodel: gpt-9\n---\n",
        )

        report = linter.lint_paths([tmp_path])

        assert rules(report) == ["AD003", "AD004", "AD005", "AD009"]
        assert report.ok() is True
        assert report.ok(strict=True) is False

    def test_foreign_memory_path(self, linter: Linter, tmp_path: Path):
        body = "Store notes in ~/.claude/agent-memory/someone-else/MEMORY.md"
        write_doc(tmp_path, "tester.md", agent_doc("tester", body, "memory: user\n"))

        report = linter.lint_paths([tmp_path])

        assert rules(report) == ["AD006"]

    def test_disabled_rules(self, tmp_path: Path):
        linter = Linter(AgentDocsConfig(disabled_rules=["ad004", "AD009"]))
        write_doc(tmp_path, "other.md", "---\nname: reviewer\ndescription: d\n---\n")

        report = linter.lint_paths([tmp_path])

        assert report.issues == []

    def test_disabling_undeclared_memory_keeps_foreign_path_error(self, tmp_path: Path):
        linter = Linter(AgentDocsConfig(disabled_rules=["AD007"]))
        body = "Store notes in ~/.claude/agent-memory/someone-else/MEMORY.md"
        write_doc(tmp_path, "tester.md", agent_doc("tester", body))

        report = linter.lint_paths([tmp_path])

        assert rules(report) == ["AD006"]
        assert report.ok() is False

    def test_disabling_foreign_path_keeps_undeclared_memory(self, tmp_path: Path):
        linter = Linter(AgentDocsConfig(disabled_rules=["AD006"]))
        body = "Store notes in ~/.claude/agent-memory/someone-else/MEMORY.md"
        write_doc(tmp_path, "tester.md", agent_doc("tester", body))

        report = linter.lint_paths([tmp_path])

        assert rules(report) == ["AD007"]

    def test_logs_lint_run(self, tmp_path: Path):
        event_logger = JSONLLogger(log_dir=tmp_path / "logs")
        linter = Linter(AgentDocsConfig(), event_logger=event_logger)
        write_doc(tmp_path / "agents", "reviewer.md", agent_doc("reviewer"))

        linter.lint_paths([tmp_path / "agents"])

        assert '"event": "lint_run"' in event_logger.log_path.read_text()


class TestLintMemory:
    def test_long_memory_flagged(self, linter: Linter, tmp_path: Path):
        store = MemoryNotesStore(memory_root=tmp_path / "memory", max_lines=3)
        store.write("tester", "1\n2\n3\n4")
        write_doc(tmp_path / "agents", "tester.md", agent_doc("tester", extra="memory: user\n"))

        report = linter.lint_paths([tmp_path / "agents"], memory_store=store)

        assert rules(report) == ["AD010"]

    def test_agents_without_memory_skipped(self, linter: Linter, tmp_path: Path):
        store = MemoryNotesStore(memory_root=tmp_path / "memory", max_lines=1)
        store.write("tester", "1\n2\n3")
        write_doc(tmp_path / "agents", "tester.md", agent_doc("tester"))

        report = linter.lint_paths([tmp_path / "agents"], memory_store=store)

        assert report.issues == []

    def test_unresolvable_scope_skipped(self, linter: Linter, tmp_path: Path):
        store = MemoryNotesStore(memory_root=tmp_path / "memory")
        write_doc(
            tmp_path / "agents", "tester.md", agent_doc("tester", extra="memory: project\n")
        )

        report = linter.lint_paths([tmp_path / "agents"], memory_store=store)

        assert report.issues == []
