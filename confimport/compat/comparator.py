# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural equivalence over types, parameter lists and type-parameter lists.

This is strict equivalence, not subtyping: `int` is not compatible with `num`,
and named parameters must agree on their default values.

Named types are where the recursion happens. Two named types referring to the
*same* declaration are compatible (given compatible type arguments). Otherwise
the interface-side declaration must be visible in the interface namespace and
the candidate-side declaration must be the candidate's member of the same
name; the two declarations are then compared as declarations, which may lead
straight back here (a class whose getter returns its sibling, which returns
the first class...).

Cycle handling
--------------
One `TypeComparator` lives for exactly one top-level namespace check and owns
the tables keyed by `(interface_ref, candidate_ref)`:

- `_in_progress`: pairs currently being compared, mapped to their depth on the
  comparison stack. Meeting one again means we are inside its own comparison;
  it is assumed compatible and not re-entered. The outer comparison still
  decides the pair's real verdict.
- `_results`: final verdicts. Failures are always final. A success is final
  only once no still-open pair it assumed compatible can fail any more.
- `_provisional`: successes that rest on an open pair's assumption, filed
  under the depth of the shallowest such pair. When that pair completes they
  are promoted (it succeeded) or discarded (it failed), so a later lookup
  recomputes them against the real verdict.

A pair is descended into again only after an assumption it relied on failed.
None of the tables is shared across checks.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple

from confimport.decls.model import (
	DeclRef,
	FunctionType,
	Member,
	NamedType,
	Namespace,
	ParamList,
	Param,
	Type,
	TypeParam,
	TypeParamType,
	VoidType,
)

from .report import Finding, Phase, ReasonCode


class CompatResult:
	"""
	Outcome of a comparison: truthy when compatible.

	An incompatible result carries the `Finding` that explains it.
	"""

	__slots__ = ("failure",)

	def __init__(self, failure: Optional[Finding] = None) -> None:
		self.failure = failure

	def __bool__(self) -> bool:
		return self.failure is None

	def __repr__(self) -> str:
		return "CompatResult(ok)" if self.failure is None else f"CompatResult({self.failure.message()})"


COMPATIBLE = CompatResult()


def incompatible(
	reason: ReasonCode,
	detail: str = "",
	*,
	path: Tuple[str, ...] = (),
	causes: Sequence[Optional[CompatResult]] = (),
) -> CompatResult:
	found = tuple(c.failure for c in causes if c is not None and c.failure is not None)
	return CompatResult(Finding(member_path=path, reason=reason, detail=detail, causes=found))


PairKey = Tuple[object, object]
DeclCompare = Callable[[Member, Member], CompatResult]


def _pair_key(a: Member, b: Member) -> PairKey:
	return (a.ref if a.ref is not None else id(a), b.ref if b.ref is not None else id(b))


class TypeComparator:
	"""
	Type/signature comparison between an interface and a candidate namespace.

	`compare_declarations` is the checker's member comparison; it is invoked
	(through `declarations_compatible`) whenever two distinct named types must
	be checked declaration against declaration.
	"""

	def __init__(
		self,
		interface: Namespace,
		candidate: Namespace,
		phase: Phase,
		compare_declarations: DeclCompare,
	) -> None:
		self.interface = interface
		self.candidate = candidate
		self.phase = phase
		self._compare_declarations = compare_declarations
		self._in_progress: Dict[PairKey, int] = {}
		self._results: Dict[PairKey, CompatResult] = {}
		self._provisional: Dict[PairKey, Tuple[CompatResult, int]] = {}
		self._pending: Dict[int, List[PairKey]] = {}
		# Per open frame: shallowest in-progress depth its verdict assumed.
		self._frames: List[int] = []
		# Number of declaration pairs actually descended into.
		self.pairs_compared = 0

	# -- declarations ---------------------------------------------------------

	def _assume(self, depth: int) -> None:
		if self._frames and depth < self._frames[-1]:
			self._frames[-1] = depth

	def _settle(self, depth: int, res: CompatResult, low: int) -> None:
		"""Resolve successes that assumed the pair at `depth` was compatible."""
		for key in self._pending.pop(depth, []):
			entry = self._provisional.pop(key, None)
			if entry is None or not res:
				continue
			if low >= depth:
				self._results[key] = entry[0]
			else:
				self._provisional[key] = (entry[0], low)
				self._pending.setdefault(low, []).append(key)

	def declarations_compatible(self, a: Member, b: Member) -> CompatResult:
		"""Cycle-safe, memoized declaration comparison."""
		key = _pair_key(a, b)
		cached = self._results.get(key)
		if cached is not None:
			return cached
		open_depth = self._in_progress.get(key)
		if open_depth is not None:
			self._assume(open_depth)
			return COMPATIBLE
		provisional = self._provisional.get(key)
		if provisional is not None:
			self._assume(provisional[1])
			return provisional[0]
		depth = len(self._frames)
		self._in_progress[key] = depth
		self._frames.append(depth)
		try:
			self.pairs_compared += 1
			res = self._compare_declarations(a, b)
		finally:
			del self._in_progress[key]
			low = self._frames.pop()
		if not res or low >= depth:
			self._results[key] = res
		else:
			self._provisional[key] = (res, low)
			self._pending.setdefault(low, []).append(key)
			self._assume(low)
		self._settle(depth, res, low)
		return res

	def _named_decls_compatible(self, a: DeclRef, b: DeclRef) -> CompatResult:
		if a == b:
			return COMPATIBLE
		if self.phase is Phase.FUNCTIONS_ONLY:
			# Without type declarations both sides must name the same external type.
			return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"'{a}' and '{b}' are different declarations")
		name = self.interface.visible_name(a)
		if name is None:
			return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"'{a}' is not visible in '{self.interface.uri}'")
		mb = self.candidate.get(name)
		if mb is None or mb.ref != b:
			return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"'{a}' and '{b}' do not name the same member")
		ma = self.interface[name]
		res = self.declarations_compatible(ma, mb)
		if res:
			return COMPATIBLE
		return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"'{name}' differs between the libraries", causes=[res])

	# -- types ----------------------------------------------------------------

	def types_compatible(self, a: Type, b: Type) -> CompatResult:
		if isinstance(a, VoidType) and isinstance(b, VoidType):
			return COMPATIBLE
		if isinstance(a, NamedType) and isinstance(b, NamedType):
			if len(a.args) != len(b.args):
				return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}: different number of type arguments")
			for i, (x, y) in enumerate(zip(a.args, b.args)):
				res = self.types_compatible(x, y)
				if not res:
					return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}: type argument {i} differs", causes=[res])
			res = self._named_decls_compatible(a.ref, b.ref)
			if res:
				return COMPATIBLE
			assert res.failure is not None
			if res.failure.causes:
				return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}", causes=[res])
			return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}: {res.failure.detail}")
		if isinstance(a, FunctionType) and isinstance(b, FunctionType):
			res = self.types_compatible(a.return_type, b.return_type)
			if not res:
				return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}: return types differ", causes=[res])
			res = self.param_lists_compatible(a.params, b.params)
			if not res:
				return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}: parameters differ", causes=[res])
			return COMPATIBLE
		if isinstance(a, TypeParamType) and isinstance(b, TypeParamType):
			if a.index == b.index:
				return COMPATIBLE
			return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}: different type parameters")
		return incompatible(ReasonCode.TYPE_INCOMPATIBLE, f"{a} vs {b}")

	# -- parameter lists ------------------------------------------------------

	def _positional_compatible(self, label: str, a: Sequence[Param], b: Sequence[Param]) -> CompatResult:
		if len(a) != len(b):
			return incompatible(
				ReasonCode.PARAMETER_LIST_INCOMPATIBLE,
				f"{len(a)} vs {len(b)} {label} parameters",
			)
		for i, (pa, pb) in enumerate(zip(a, b)):
			res = self.types_compatible(pa.type, pb.type)
			if not res:
				return incompatible(
					ReasonCode.PARAMETER_LIST_INCOMPATIBLE,
					f"{label} parameter {i} ('{pa.name}') differs",
					causes=[res],
				)
		return COMPATIBLE

	def param_lists_compatible(self, a: ParamList, b: ParamList) -> CompatResult:
		res = self._positional_compatible("required positional", a.positional, b.positional)
		if not res:
			return res
		res = self._positional_compatible("optional positional", a.optional, b.optional)
		if not res:
			return res
		named_a = a.named_map()
		named_b = b.named_map()
		if named_a.keys() != named_b.keys():
			only_a = sorted(named_a.keys() - named_b.keys())
			only_b = sorted(named_b.keys() - named_a.keys())
			parts = []
			if only_a:
				parts.append(f"only in interface: {', '.join(only_a)}")
			if only_b:
				parts.append(f"only in candidate: {', '.join(only_b)}")
			return incompatible(ReasonCode.PARAMETER_LIST_INCOMPATIBLE, "named parameters differ (" + "; ".join(parts) + ")")
		for name in sorted(named_a):
			pa = named_a[name]
			pb = named_b[name]
			res = self.types_compatible(pa.type, pb.type)
			if not res:
				return incompatible(ReasonCode.PARAMETER_LIST_INCOMPATIBLE, f"named parameter '{name}' differs", causes=[res])
			if pa.default != pb.default:
				return incompatible(
					ReasonCode.PARAMETER_LIST_INCOMPATIBLE,
					f"default value of '{name}' differs: {pa.default} vs {pb.default}",
				)
		return COMPATIBLE

	# -- type parameters ------------------------------------------------------

	def type_param_lists_compatible(self, a: Sequence[TypeParam], b: Sequence[TypeParam]) -> CompatResult:
		if len(a) != len(b):
			return incompatible(ReasonCode.TYPE_PARAMETER_LIST_INCOMPATIBLE, f"{len(a)} vs {len(b)} type parameters")
		for i, (ta, tb) in enumerate(zip(a, b)):
			if ta.bound is None and tb.bound is None:
				continue
			if ta.bound is None or tb.bound is None:
				return incompatible(
					ReasonCode.TYPE_PARAMETER_LIST_INCOMPATIBLE,
					f"type parameter {i}: '{ta}' vs '{tb}'",
				)
			res = self.types_compatible(ta.bound, tb.bound)
			if not res:
				return incompatible(
					ReasonCode.TYPE_PARAMETER_LIST_INCOMPATIBLE,
					f"type parameter {i}: bounds differ",
					causes=[res],
				)
		return COMPATIBLE


__all__ = ["COMPATIBLE", "CompatResult", "TypeComparator", "incompatible"]
