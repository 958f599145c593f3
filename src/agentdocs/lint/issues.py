"""Lint issue and report types."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LintIssue:
    """A single problem found in an agent document or memory note.

    Attributes:
        rule: Rule code, e.g. "AD002".
        severity: ERROR fails a lint run, WARNING only with --strict.
        path: File the issue refers to.
        message: Human-readable description.
        line: 1-based line number, when the rule can point at one.
    """

    rule: str
    severity: Severity
    path: Path
    message: str
    line: int | None = None

    def format(self) -> str:
        location = f"{self.path}:{self.line}" if self.line else str(self.path)
        return f"{location}: {self.rule} [{self.severity.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "rule": self.rule,
            "severity": self.severity.value,
            "path": str(self.path),
            "message": self.message,
        }
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass
class LintReport:
    """Issues collected over one lint run."""

    issues: list[LintIssue] = field(default_factory=list)
    files_checked: int = 0

    def add(self, issue: LintIssue) -> None:
        self.issues.append(issue)

    def extend(self, issues: list[LintIssue]) -> None:
        self.issues.extend(issues)

    @property
    def errors(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[LintIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    def ok(self, strict: bool = False) -> bool:
        """Whether the run passed.

        Args:
            strict: Treat warnings as failures too.
        """
        if strict:
            return not self.issues
        return not self.errors

    def sorted_issues(self) -> list[LintIssue]:
        return sorted(self.issues, key=lambda i: (str(i.path), i.line or 0, i.rule))

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_checked": self.files_checked,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [i.to_dict() for i in self.sorted_issues()],
        }
