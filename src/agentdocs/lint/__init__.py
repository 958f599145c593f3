"""Structural lint checks for agent documents and memory notes."""

from .issues import LintIssue, LintReport, Severity
from .linter import Linter
from .rules import RULE_NAMES

__all__ = [
    "LintIssue",
    "LintReport",
    "Linter",
    "RULE_NAMES",
    "Severity",
]
