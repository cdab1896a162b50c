# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for resolver/checker/driver output.

Compatibility findings are advisory and surface as warnings; malformed inputs
(unparseable directives, invalid declaration graphs, bad defines) surface as
errors. Both render through `Diagnostic`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning)."""

	message: str
	code: str | None = None
	# Which stage produced it: "directive", "decls", "define", "compat".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == "error"

	def render(self) -> str:
		"""Render as a single `file:line:col: severity: message` block."""
		head = f"{self.span.describe()}: {self.severity}: {self.message}"
		if self.code:
			head += f" [{self.code}]"
		lines = [head]
		lines.extend(f"  note: {n}" for n in self.notes)
		return "\n".join(lines)

	def to_json(self, default_file: str | None = None) -> dict[str, Any]:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or default_file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
