# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compatibility findings and reports.

A `Finding` names the offending member path, a `ReasonCode` from the fixed
taxonomy and a human-readable detail. Findings nest: a `ClassMismatch` keeps
the clause that failed (say a `GetterMismatch` on `value`) as a cause, which in
turn keeps the `TypeIncompatible` that explains it.

Reports are plain data: ordered, immutable, and renderable either as warning
`Diagnostic`s or as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from confimport.core.diagnostics import Diagnostic
from confimport.core.span import Span


class Phase(Enum):
	"""Strictness tier of a compatibility check."""

	FUNCTIONS_ONLY = "functions"
	FULL = "full"


class ReasonCode(Enum):
	TYPE_DECLARATION_NOT_ALLOWED = "TypeDeclarationNotAllowed"
	MISSING_MEMBER = "MissingMember"
	KIND_MISMATCH = "KindMismatch"
	TYPEDEF_MISMATCH = "TypedefMismatch"
	ENUM_MISMATCH = "EnumMismatch"
	CONSTRUCTOR_MISMATCH = "ConstructorMismatch"
	METHOD_MISMATCH = "MethodMismatch"
	GETTER_MISMATCH = "GetterMismatch"
	SETTER_MISMATCH = "SetterMismatch"
	CLASS_MISMATCH = "ClassMismatch"
	TYPE_INCOMPATIBLE = "TypeIncompatible"
	PARAMETER_LIST_INCOMPATIBLE = "ParameterListIncompatible"
	TYPE_PARAMETER_LIST_INCOMPATIBLE = "TypeParameterListIncompatible"

	def __str__(self) -> str:
		return self.value


_REASON_TEXT: Dict[ReasonCode, str] = {
	ReasonCode.TYPE_DECLARATION_NOT_ALLOWED: "type declarations are not allowed in this phase",
	ReasonCode.MISSING_MEMBER: "member is missing",
	ReasonCode.KIND_MISMATCH: "members are different kinds of declaration",
	ReasonCode.TYPEDEF_MISMATCH: "typedefs differ",
	ReasonCode.ENUM_MISMATCH: "enum values differ",
	ReasonCode.CONSTRUCTOR_MISMATCH: "constructors differ",
	ReasonCode.METHOD_MISMATCH: "methods differ",
	ReasonCode.GETTER_MISMATCH: "getters differ",
	ReasonCode.SETTER_MISMATCH: "setters differ",
	ReasonCode.CLASS_MISMATCH: "classes differ",
	ReasonCode.TYPE_INCOMPATIBLE: "types are not compatible",
	ReasonCode.PARAMETER_LIST_INCOMPATIBLE: "parameter lists are not compatible",
	ReasonCode.TYPE_PARAMETER_LIST_INCOMPATIBLE: "type parameter lists are not compatible",
}


def reason_text(reason: ReasonCode) -> str:
	return _REASON_TEXT[reason]


@dataclass(frozen=True)
class Finding:
	"""
	One incompatibility.

	`member_path` is absolute for top-level findings and relative to the parent
	for causes (a class member name, `return`, `positional[0]`, ...).
	"""

	member_path: Tuple[str, ...]
	reason: ReasonCode
	detail: str = ""
	causes: Tuple["Finding", ...] = ()

	@property
	def cause(self) -> Optional["Finding"]:
		return self.causes[0] if self.causes else None

	@property
	def path(self) -> str:
		return ".".join(p for p in self.member_path if p) or "<library>"

	def at(self, *prefix: str) -> "Finding":
		"""Return a copy with `prefix` prepended to the member path."""
		return Finding(member_path=tuple(prefix) + self.member_path, reason=self.reason, detail=self.detail, causes=self.causes)

	def walk(self) -> Iterator["Finding"]:
		"""This finding and all nested causes, depth first."""
		yield self
		for c in self.causes:
			yield from c.walk()

	def message(self) -> str:
		text = f"{self.path}: {self.reason}"
		return f"{text}: {self.detail or reason_text(self.reason)}"

	def notes(self, depth: int = 0) -> List[str]:
		out: List[str] = []
		for c in self.causes:
			out.append("  " * depth + c.message())
			out.extend(c.notes(depth + 1))
		return out

	def to_json(self) -> Dict[str, Any]:
		return {
			"member_path": list(self.member_path),
			"reason_code": self.reason.value,
			"detail": self.detail,
			"causes": [c.to_json() for c in self.causes],
		}


@dataclass(frozen=True)
class CompatibilityReport:
	"""All findings of one (interface, candidate) check, in discovery order."""

	interface_uri: str
	candidate_uri: str
	phase: Phase
	findings: Tuple[Finding, ...] = ()
	span: Span = field(default_factory=Span, compare=False, repr=False)

	@property
	def ok(self) -> bool:
		return not self.findings

	def __iter__(self) -> Iterator[Finding]:
		return iter(self.findings)

	def __len__(self) -> int:
		return len(self.findings)

	def reasons(self) -> List[ReasonCode]:
		"""Top-level reason codes, in order."""
		return [f.reason for f in self.findings]

	def all_reasons(self) -> List[ReasonCode]:
		"""Reason codes of every finding and nested cause, depth first."""
		return [x.reason for f in self.findings for x in f.walk()]

	def to_diagnostics(self) -> List[Diagnostic]:
		"""One warning per finding; nested causes become notes."""
		out: List[Diagnostic] = []
		for f in self.findings:
			out.append(
				Diagnostic(
					message=f"'{self.candidate_uri}' is not compatible with '{self.interface_uri}': {f.message()}",
					code=f.reason.value,
					phase="compat",
					severity="warning",
					span=self.span,
					notes=f.notes(),
				)
			)
		return out

	def to_json(self) -> Dict[str, Any]:
		return {
			"interface": self.interface_uri,
			"candidate": self.candidate_uri,
			"phase": self.phase.value,
			"findings": [f.to_json() for f in self.findings],
		}


__all__ = ["CompatibilityReport", "Finding", "Phase", "ReasonCode", "reason_text"]
