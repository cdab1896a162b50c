# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import List

from confimport.compat.comparator import COMPATIBLE, CompatResult, TypeComparator
from confimport.compat.report import Phase, ReasonCode
from confimport.decls.model import (
	VOID,
	FunctionType,
	Member,
	Param,
	ParamList,
	TypeParam,
	TypeParamType,
)
from confimport.test_support import BOOL, DOUBLE, INT, STRING, cls, core, getter, ns, params, self_ref


def _comparator(*, phase: Phase = Phase.FULL, calls: List[tuple] | None = None, iface=None, cand=None) -> TypeComparator:
	def compare(a: Member, b: Member) -> CompatResult:
		if calls is not None:
			calls.append((a.name, b.name))
		return COMPATIBLE

	return TypeComparator(iface if iface is not None else ns("iface"), cand if cand is not None else ns("cand"), phase, compare)


def test_void_and_identical_named_types() -> None:
	cmp = _comparator()
	assert cmp.types_compatible(VOID, VOID)
	assert cmp.types_compatible(INT, INT)
	assert cmp.types_compatible(core("List", INT), core("List", INT))


def test_compatibility_is_strict_equivalence() -> None:
	cmp = _comparator()
	res = cmp.types_compatible(INT, core("num"))
	assert not res
	assert res.failure is not None
	assert res.failure.reason is ReasonCode.TYPE_INCOMPATIBLE
	assert not cmp.types_compatible(VOID, INT)
	assert not cmp.types_compatible(INT, FunctionType(INT))


def test_type_argument_mismatch_keeps_cause() -> None:
	res = _comparator().types_compatible(core("List", INT), core("List", STRING))
	assert not res
	assert res.failure is not None
	assert "type argument 0" in res.failure.detail
	assert res.failure.cause is not None
	assert res.failure.cause.reason is ReasonCode.TYPE_INCOMPATIBLE
	assert not _comparator().types_compatible(core("Map", INT), core("Map", INT, INT))


def test_function_types() -> None:
	cmp = _comparator()
	assert cmp.types_compatible(FunctionType(INT, params(STRING)), FunctionType(INT, params(STRING)))
	assert not cmp.types_compatible(FunctionType(INT, params(STRING)), FunctionType(VOID, params(STRING)))
	assert not cmp.types_compatible(FunctionType(INT, params(STRING)), FunctionType(INT, params(INT)))


def test_type_parameters_compare_by_position() -> None:
	cmp = _comparator()
	assert cmp.types_compatible(TypeParamType(0, "T"), TypeParamType(0, "U"))
	assert not cmp.types_compatible(TypeParamType(0, "T"), TypeParamType(1, "T"))


def test_positional_parameter_lists() -> None:
	cmp = _comparator()
	assert cmp.param_lists_compatible(params(INT, STRING), params(INT, STRING))
	res = cmp.param_lists_compatible(params(INT), params(INT, STRING))
	assert not res
	assert res.failure is not None
	assert res.failure.reason is ReasonCode.PARAMETER_LIST_INCOMPATIBLE
	assert not cmp.param_lists_compatible(params(INT), params(STRING))
	assert not cmp.param_lists_compatible(params(INT, optional=[BOOL]), params(INT))
	# Parameter names do not matter for positional parameters.
	renamed = ParamList(positional=(Param("other", INT),))
	assert cmp.param_lists_compatible(params(INT), renamed)


def test_named_parameter_lists() -> None:
	cmp = _comparator()
	a = params(named_params={"x": (INT, "0"), "y": (STRING, None)})
	reordered = ParamList(named=(Param("y", STRING), Param("x", INT, "0")))
	assert cmp.param_lists_compatible(a, reordered)

	missing = cmp.param_lists_compatible(a, params(named_params={"x": (INT, "0")}))
	assert not missing
	assert missing.failure is not None
	assert "only in interface: y" in missing.failure.detail

	assert not cmp.param_lists_compatible(a, params(named_params={"x": (DOUBLE, "0"), "y": (STRING, None)}))
	default = cmp.param_lists_compatible(a, params(named_params={"x": (INT, "1"), "y": (STRING, None)}))
	assert not default
	assert default.failure is not None
	assert "default value of 'x'" in default.failure.detail


def test_type_parameter_lists() -> None:
	cmp = _comparator()
	assert cmp.type_param_lists_compatible([TypeParam("T")], [TypeParam("U")])
	assert cmp.type_param_lists_compatible([TypeParam("T", INT)], [TypeParam("T", INT)])
	for a, b in [
		([TypeParam("T")], []),
		([TypeParam("T", INT)], [TypeParam("T")]),
		([TypeParam("T", INT)], [TypeParam("T", STRING)]),
	]:
		res = cmp.type_param_lists_compatible(a, b)
		assert not res
		assert res.failure is not None
		assert res.failure.reason is ReasonCode.TYPE_PARAMETER_LIST_INCOMPATIBLE


def test_distinct_named_types_compare_their_declarations() -> None:
	calls: List[tuple] = []
	iface = ns("iface", cls("Box", getter("v", INT)))
	cand = ns("cand", cls("Box", getter("v", INT)))
	cmp = _comparator(calls=calls, iface=iface, cand=cand)
	assert cmp.types_compatible(self_ref("iface", "Box"), self_ref("cand", "Box"))
	assert cmp.types_compatible(self_ref("iface", "Box"), self_ref("cand", "Box"))
	assert calls == [("Box", "Box")]
	assert cmp.pairs_compared == 1


def test_named_types_must_name_the_same_member() -> None:
	iface = ns("iface", cls("A"), cls("B"))
	cand = ns("cand", cls("A"), cls("B"))
	cmp = _comparator(iface=iface, cand=cand)
	assert not cmp.types_compatible(self_ref("iface", "A"), self_ref("cand", "B"))
	# Not visible in the interface namespace.
	assert not cmp.types_compatible(self_ref("other", "A"), self_ref("cand", "A"))


def test_functions_only_requires_identical_references() -> None:
	iface = ns("iface", cls("A"))
	cand = ns("cand", cls("A"))
	cmp = _comparator(phase=Phase.FUNCTIONS_ONLY, iface=iface, cand=cand)
	assert cmp.types_compatible(STRING, STRING)
	assert not cmp.types_compatible(self_ref("iface", "A"), self_ref("cand", "A"))
	assert cmp.pairs_compared == 0


def test_reentrant_pair_is_assumed_compatible() -> None:
	iface = ns("iface", cls("A"))
	cand = ns("cand", cls("A"))
	seen: List[bool] = []
	holder: List[TypeComparator] = []

	def compare(a: Member, b: Member) -> CompatResult:
		seen.append(bool(holder[0].declarations_compatible(a, b)))
		return COMPATIBLE

	cmp = TypeComparator(iface, cand, Phase.FULL, compare)
	holder.append(cmp)
	assert cmp.declarations_compatible(iface["A"], cand["A"])
	assert seen == [True]
	assert cmp.pairs_compared == 1
