# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Namespace-level compatibility checker.

`check_compatible(interface, candidate, phase)` compares two visible
namespaces name by name and returns a `CompatibilityReport`:

1. Under `Phase.FUNCTIONS_ONLY` every name bound to a typedef, class or enum
   (on either side) is reported as `TypeDeclarationNotAllowed` and skipped.
2. Names present on one side only are reported as `MissingMember`.
3. Shared names are compared with `compare_members`; every incompatibility is
   collected and one failing pair never stops the others.

Classes compare clause by clause (abstractness, type parameters, superclass,
mixins, interfaces, constructors, instance members including inherited ones,
static members); every failing clause is kept as a cause of the class's single
`ClassMismatch`.

A checker instance is single-use: its `TypeComparator` carries the
visited-pair tables for exactly one check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from confimport.decls.model import (
	ClassDecl,
	Constructor,
	EnumDecl,
	Getter,
	Member,
	Method,
	NamedType,
	Namespace,
	Setter,
	Typedef,
)

from .comparator import COMPATIBLE, CompatResult, TypeComparator, incompatible
from .report import CompatibilityReport, Finding, Phase, ReasonCode


@dataclass(frozen=True)
class CheckOptions:
	"""
	Checker policy knobs.

	`ignore_private_supertypes`: leave private (`_`-prefixed) superclass,
	mixin and interface references out of class comparisons. Off by default,
	in which case a private supertype only matches the very same declaration.
	"""

	ignore_private_supertypes: bool = False


_KIND_REASON = {
	Typedef: ReasonCode.TYPEDEF_MISMATCH,
	EnumDecl: ReasonCode.ENUM_MISMATCH,
	Constructor: ReasonCode.CONSTRUCTOR_MISMATCH,
	Method: ReasonCode.METHOD_MISMATCH,
	Getter: ReasonCode.GETTER_MISMATCH,
	Setter: ReasonCode.SETTER_MISMATCH,
	ClassDecl: ReasonCode.CLASS_MISMATCH,
}


def _flag(value: bool, yes: str, no: str) -> str:
	return yes if value else no


class CompatibilityChecker:
	"""Compares one candidate namespace against one interface namespace."""

	def __init__(
		self,
		interface: Namespace,
		candidate: Namespace,
		phase: Phase = Phase.FULL,
		options: Optional[CheckOptions] = None,
	) -> None:
		self.interface = interface
		self.candidate = candidate
		self.phase = phase
		self.options = options or CheckOptions()
		self.comparator = TypeComparator(interface, candidate, phase, self.compare_members)
		self._done = False

	def run(self) -> CompatibilityReport:
		if self._done:
			raise RuntimeError("CompatibilityChecker.run() may only be called once")
		self._done = True
		findings: List[Finding] = []
		names = list(self.interface) + [n for n in self.candidate if n not in self.interface]
		for name in names:
			a = self.interface.get(name)
			b = self.candidate.get(name)
			if self.phase is Phase.FUNCTIONS_ONLY:
				decl = next((m for m in (a, b) if m is not None and m.kind.is_type_declaration), None)
				if decl is not None:
					findings.append(
						Finding(
							member_path=(name,),
							reason=ReasonCode.TYPE_DECLARATION_NOT_ALLOWED,
							detail=f"{decl.kind.value} '{name}' is not allowed when only functions are checked",
						)
					)
					continue
			if a is None:
				findings.append(Finding((name,), ReasonCode.MISSING_MEMBER, f"'{name}' is not declared by '{self.interface.uri}'"))
				continue
			if b is None:
				findings.append(Finding((name,), ReasonCode.MISSING_MEMBER, f"'{name}' is missing from '{self.candidate.uri}'"))
				continue
			if a.kind is b.kind and a.kind.is_type_declaration:
				res = self.comparator.declarations_compatible(a, b)
			else:
				res = self.compare_members(a, b)
			if not res:
				assert res.failure is not None
				findings.append(res.failure.at(name))
		return CompatibilityReport(
			interface_uri=self.interface.uri,
			candidate_uri=self.candidate.uri,
			phase=self.phase,
			findings=tuple(findings),
		)

	# -- members --------------------------------------------------------------

	def compare_members(self, a: Member, b: Member) -> CompatResult:
		"""Compare two members of the same name; dispatches on kind."""
		if a.kind is not b.kind:
			return incompatible(ReasonCode.KIND_MISMATCH, f"{a.kind.value} vs {b.kind.value}")
		reason = _KIND_REASON[type(a)]
		if isinstance(a, ClassDecl):
			assert isinstance(b, ClassDecl)
			if self.phase is not Phase.FULL:
				return incompatible(ReasonCode.TYPE_DECLARATION_NOT_ALLOWED, f"class '{a.name}'")
			return self.compare_classes(a, b)
		if isinstance(a, EnumDecl):
			assert isinstance(b, EnumDecl)
			if a.values != b.values:
				return incompatible(reason, f"values ({', '.join(a.values)}) vs ({', '.join(b.values)})")
			return COMPATIBLE
		cmp = self.comparator
		if isinstance(a, Typedef):
			assert isinstance(b, Typedef)
			return self._first_failure(
				reason,
				[
					lambda: cmp.type_param_lists_compatible(a.type_params, b.type_params),
					lambda: self._labelled(cmp.types_compatible(a.return_type, b.return_type), "return type"),
					lambda: cmp.param_lists_compatible(a.params, b.params),
				],
			)
		if isinstance(a, Constructor):
			assert isinstance(b, Constructor)
			if a.is_factory != b.is_factory:
				return incompatible(reason, f"{_flag(a.is_factory, 'factory', 'generative')} vs {_flag(b.is_factory, 'factory', 'generative')}")
			if a.is_const != b.is_const:
				return incompatible(reason, f"{_flag(a.is_const, 'const', 'non-const')} vs {_flag(b.is_const, 'const', 'non-const')}")
			return self._first_failure(reason, [lambda: cmp.param_lists_compatible(a.params, b.params)])
		abstract_res = self._abstract_compatible(a, b, reason)
		if not abstract_res:
			return abstract_res
		if isinstance(a, Method):
			assert isinstance(b, Method)
			return self._first_failure(
				reason,
				[
					lambda: cmp.type_param_lists_compatible(a.type_params, b.type_params),
					lambda: self._labelled(cmp.types_compatible(a.return_type, b.return_type), "return type"),
					lambda: cmp.param_lists_compatible(a.params, b.params),
				],
			)
		if isinstance(a, Getter):
			assert isinstance(b, Getter)
			return self._first_failure(reason, [lambda: self._labelled(cmp.types_compatible(a.return_type, b.return_type), "return type")])
		if isinstance(a, Setter):
			assert isinstance(b, Setter)
			return self._first_failure(reason, [lambda: self._labelled(cmp.types_compatible(a.value_type, b.value_type), "value type")])
		raise TypeError(f"unsupported member kind {a.kind}")

	def _abstract_compatible(self, a: Member, b: Member, reason: ReasonCode) -> CompatResult:
		if self.phase is not Phase.FULL:
			return COMPATIBLE
		a_abs = getattr(a, "is_abstract", False)
		b_abs = getattr(b, "is_abstract", False)
		if a_abs != b_abs:
			return incompatible(reason, f"{_flag(a_abs, 'abstract', 'concrete')} vs {_flag(b_abs, 'abstract', 'concrete')}")
		return COMPATIBLE

	@staticmethod
	def _labelled(res: CompatResult, label: str) -> CompatResult:
		if res or res.failure is None:
			return res
		return CompatResult(res.failure.at(label))

	@staticmethod
	def _first_failure(reason: ReasonCode, clauses: Sequence[Callable[[], CompatResult]]) -> CompatResult:
		for clause in clauses:
			res = clause()
			if not res:
				assert res.failure is not None
				return incompatible(reason, res.failure.detail, causes=[res])
		return COMPATIBLE

	# -- classes --------------------------------------------------------------

	def _supertypes(self, types: Sequence[Optional[NamedType]]) -> List[NamedType]:
		out = [t for t in types if t is not None]
		if self.options.ignore_private_supertypes:
			out = [t for t in out if not t.ref.is_private]
		return out

	def _pair_interfaces(self, a: Sequence[NamedType], b: Sequence[NamedType]) -> Optional[List[Tuple[NamedType, NamedType]]]:
		"""
		Pair interface lists irrespective of order.

		An interface pairs with the same declaration, or with the declaration of
		the same visible name on the other side. Returns None when some
		interface has no counterpart.
		"""
		def ident(t: NamedType, ns: Namespace) -> object:
			name = ns.visible_name(t.ref)
			return ("name", name) if name is not None else ("ref", t.ref)

		if len(a) != len(b):
			return None
		remaining = list(b)
		pairs = []
		for ta in a:
			ka = ident(ta, self.interface)
			match = next((tb for tb in remaining if tb.ref == ta.ref or ident(tb, self.candidate) == ka), None)
			if match is None:
				return None
			remaining.remove(match)
			pairs.append((ta, match))
		return pairs

	def _compare_member_maps(
		self,
		label: str,
		a: Dict[str, Member],
		b: Dict[str, Member],
	) -> List[CompatResult]:
		out: List[CompatResult] = []
		for key in list(a) + [k for k in b if k not in a]:
			ma = a.get(key)
			mb = b.get(key)
			if ma is None:
				out.append(incompatible(ReasonCode.MISSING_MEMBER, f"{label} '{key}' only exists in the candidate", path=(key,)))
				continue
			if mb is None:
				out.append(incompatible(ReasonCode.MISSING_MEMBER, f"{label} '{key}' is missing from the candidate", path=(key,)))
				continue
			res = self.compare_members(ma, mb)
			if not res:
				assert res.failure is not None
				out.append(CompatResult(res.failure.at(key)))
		return out

	def compare_classes(self, a: ClassDecl, b: ClassDecl) -> CompatResult:
		cmp = self.comparator
		failures: List[CompatResult] = []
		if a.is_abstract != b.is_abstract:
			failures.append(
				incompatible(
					ReasonCode.CLASS_MISMATCH,
					f"{_flag(a.is_abstract, 'abstract', 'concrete')} vs {_flag(b.is_abstract, 'abstract', 'concrete')}",
				)
			)
		res = cmp.type_param_lists_compatible(a.type_params, b.type_params)
		if not res:
			failures.append(res)

		sup_a = self._supertypes([a.superclass])
		sup_b = self._supertypes([b.superclass])
		if len(sup_a) != len(sup_b):
			failures.append(
				incompatible(
					ReasonCode.TYPE_INCOMPATIBLE,
					f"superclass {sup_a[0] if sup_a else 'none'} vs {sup_b[0] if sup_b else 'none'}",
					path=("extends",),
				)
			)
		elif sup_a:
			res = cmp.types_compatible(sup_a[0], sup_b[0])
			if not res:
				failures.append(self._labelled(res, "extends"))

		mix_a = self._supertypes(a.mixins)
		mix_b = self._supertypes(b.mixins)
		if len(mix_a) != len(mix_b):
			failures.append(incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{len(mix_a)} vs {len(mix_b)} mixins", path=("with",)))
		else:
			for i, (ma, mb) in enumerate(zip(mix_a, mix_b)):
				res = cmp.types_compatible(ma, mb)
				if not res:
					failures.append(self._labelled(res, f"with[{i}]"))

		ifc_a = self._supertypes(a.interfaces)
		ifc_b = self._supertypes(b.interfaces)
		pairs = self._pair_interfaces(ifc_a, ifc_b)
		if pairs is None:
			failures.append(
				incompatible(
					ReasonCode.TYPE_INCOMPATIBLE,
					f"interfaces ({', '.join(map(str, ifc_a))}) vs ({', '.join(map(str, ifc_b))})",
					path=("implements",),
				)
			)
		else:
			for ia, ib in pairs:
				res = cmp.types_compatible(ia, ib)
				if not res:
					failures.append(self._labelled(res, "implements"))

		failures.extend(self._compare_member_maps("constructor", a.public_constructors(), b.public_constructors()))
		failures.extend(
			self._compare_member_maps(
				"instance member",
				a.public_instance_members(self.interface.lookup),
				b.public_instance_members(self.candidate.lookup),
			)
		)
		failures.extend(self._compare_member_maps("static member", a.public_statics(), b.public_statics()))

		if not failures:
			return COMPATIBLE
		first = failures[0].failure
		assert first is not None
		detail = first.message() if len(failures) == 1 else f"{len(failures)} differences"
		return incompatible(ReasonCode.CLASS_MISMATCH, detail, causes=failures)


def check_compatible(
	interface: Namespace,
	candidate: Namespace,
	phase: Phase = Phase.FULL,
	options: Optional[CheckOptions] = None,
) -> CompatibilityReport:
	"""Check that `candidate` can stand in for `interface`."""
	return CompatibilityChecker(interface, candidate, phase, options).run()


__all__ = ["CheckOptions", "CompatibilityChecker", "check_compatible"]
