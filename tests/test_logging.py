"""Tests for JSONL logging."""

import json
import tempfile
from pathlib import Path

import pytest

from agentdocs.logging import JSONLLogger, LogEntry, configure_logger, get_logger


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def logger(temp_log_dir: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=temp_log_dir)


def read_entries(logger: JSONLLogger) -> list[dict]:
    with open(logger.log_path) as f:
        return [json.loads(line) for line in f]


def test_log_entry_to_dict():
    """Test LogEntry excludes None values."""
    entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="test")
    data = entry.to_dict()

    assert "timestamp" in data
    assert "event" in data
    assert "agent" not in data  # None excluded
    assert "extra" not in data  # Empty dict excluded


def test_log_creates_file(logger: JSONLLogger):
    """Test that logging creates the log file."""
    logger.log("test_event")

    assert logger.log_path.exists()


def test_log_writes_jsonl(logger: JSONLLogger):
    """Test that logs are written in JSONL format."""
    logger.log("event1", agent="reviewer")
    logger.log("event2", path=Path("/tmp/x.md"))

    entries = read_entries(logger)

    assert len(entries) == 2
    assert entries[0]["event"] == "event1"
    assert entries[0]["agent"] == "reviewer"
    assert entries[1]["path"] == "/tmp/x.md"


def test_log_agent_load(logger: JSONLLogger):
    logger.log_agent_load(loaded=3, failed=1, duration_ms=2.5)

    entry = read_entries(logger)[0]

    assert entry["event"] == "agent_load"
    assert entry["duration_ms"] == 2.5
    assert entry["extra"] == {"loaded": 3, "failed": 1}


def test_log_lint_run(logger: JSONLLogger):
    logger.log_lint_run(4, 1, 2)

    entry = read_entries(logger)[0]

    assert entry["event"] == "lint_run"
    assert entry["extra"] == {"files_checked": 4, "errors": 1, "warnings": 2}


def test_log_memory_write(logger: JSONLLogger):
    logger.log_memory_write("tester", "project", "/p/MEMORY.md", operation="append", size=12)

    entry = read_entries(logger)[0]

    assert entry["event"] == "memory_write"
    assert entry["agent"] == "tester"
    assert entry["path"] == "/p/MEMORY.md"
    assert entry["extra"]["scope"] == "project"
    assert entry["extra"]["operation"] == "append"
    assert entry["extra"]["size"] == 12


def test_log_rotation(temp_log_dir: Path):
    """Test log rotation when file exceeds max size."""
    logger = JSONLLogger(log_dir=temp_log_dir, max_size_mb=0.0001)  # ~100 bytes

    for i in range(10):
        logger.log(f"event_{i}", agent="reviewer", padding="x" * 50)

    log_files = list(temp_log_dir.glob("*.jsonl"))
    assert len(log_files) >= 2


def test_configure_logger_replaces_global(temp_log_dir: Path):
    configured = configure_logger(log_dir=temp_log_dir)

    assert get_logger() is configured
    assert configured.log_dir == temp_log_dir
