# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

Directives and declaration graphs come from an external front-end; a Span
records whatever location that front-end could provide (file/line/column) so
findings and input errors can point back at it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a location-like object.

		Accepts an existing Span, a lark `Token`/`Meta` (both expose `line`,
		`column`, `end_line`, `end_column`) or None.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		return cls(
			file=file or getattr(loc, "file", None),
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
		)

	def is_known(self) -> bool:
		return self.line is not None

	def describe(self) -> str:
		"""Render as `file:line:col`, using `?` for unknown parts."""
		file = self.file or "<input>"
		line = "?" if self.line is None else str(self.line)
		col = "?" if self.column is None else str(self.column)
		return f"{file}:{line}:{col}"


__all__ = ["Span"]
