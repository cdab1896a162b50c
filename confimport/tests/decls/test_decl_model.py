# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from confimport.decls.model import (
	ClassDecl,
	Combinator,
	DeclGraphError,
	DeclRef,
	Getter,
	Library,
	MemberKind,
	Method,
	Param,
	ParamList,
	Setter,
	variable_members,
)
from confimport.test_support import INT, STRING, cls, fn, getter, self_ref


def test_variable_normalizes_to_getter_and_setter() -> None:
	members = variable_members("x", INT)
	assert [type(m) for m in members] == [Getter, Setter]
	assert [m.key for m in members] == ["x", "x="]


@pytest.mark.parametrize("flag", ["is_final", "is_const"])
def test_final_or_const_variable_has_no_setter(flag: str) -> None:
	members = variable_members("x", INT, **{flag: True})
	assert [m.kind for m in members] == [MemberKind.GETTER]


def test_library_binds_refs_to_its_uri() -> None:
	lib = Library("lib:a", [fn("f"), cls("C")])
	assert lib.declarations["f"].ref == DeclRef("lib:a", "f")
	assert lib.lookup(DeclRef("lib:a", "C")) is lib.declarations["C"]
	# Only type declarations are indexed for lookup.
	assert lib.lookup(DeclRef("lib:a", "f")) is None


def test_default_exports_skip_private_declarations() -> None:
	lib = Library("lib:a", [fn("f"), fn("_g")])
	assert list(lib.namespace()) == ["f"]


def test_duplicate_declaration_is_rejected() -> None:
	with pytest.raises(DeclGraphError):
		Library("lib:a", [fn("f"), getter("f", INT)])


def test_getter_and_setter_share_a_name() -> None:
	lib = Library("lib:a", variable_members("x", INT))
	assert sorted(lib.namespace()) == ["x", "x="]


def test_explicit_exports_include_both_accessors() -> None:
	lib = Library("lib:a", [*variable_members("x", INT), fn("f")], exports=["x"])
	assert sorted(lib.namespace()) == ["x", "x="]


def test_export_of_unknown_or_private_name_fails() -> None:
	with pytest.raises(DeclGraphError):
		Library("lib:a", [fn("f")], exports=["g"])
	with pytest.raises(DeclGraphError):
		Library("lib:a", [fn("_f")], exports=["_f"])


def test_reexport_of_imported_declaration() -> None:
	dep = Library("lib:dep", [cls("Base")])
	lib = Library("lib:a", [fn("f")], imported=dep.declarations.values(), exports=["f", "lib:dep::Base"])
	ns = lib.namespace()
	assert sorted(ns) == ["Base", "f"]
	assert ns["Base"].ref == DeclRef("lib:dep", "Base")
	assert ns.visible_name(DeclRef("lib:dep", "Base")) == "Base"


def test_show_and_hide_apply_in_order() -> None:
	lib = Library("lib:a", [fn("f"), fn("g"), *variable_members("x", INT)])
	shown = lib.namespace([Combinator("show", ("f", "x"))])
	assert sorted(shown) == ["f", "x", "x="]
	hidden = lib.namespace([Combinator("show", ("f", "g")), Combinator("hide", ("g",))])
	assert list(hidden) == ["f"]


def test_namespace_keeps_hidden_supertypes_resolvable() -> None:
	lib = Library("lib:a", [cls("_Base"), cls("C", superclass=self_ref("lib:a", "_Base"))])
	ns = lib.namespace()
	assert list(ns) == ["C"]
	assert isinstance(ns.lookup(DeclRef("lib:a", "_Base")), ClassDecl)
	assert ns.visible_name(DeclRef("lib:a", "_Base")) is None


def test_inherited_members_are_flattened() -> None:
	lib = Library(
		"lib:a",
		[
			cls("Base", getter("id", INT), fn("_hidden"), fn("describe", STRING)),
			cls("Mixin", fn("describe", INT)),
			cls(
				"C",
				getter("name", STRING),
				superclass=self_ref("lib:a", "Base"),
				mixins=(self_ref("lib:a", "Mixin"),),
			),
		],
	)
	c = lib.declarations["C"]
	assert isinstance(c, ClassDecl)
	flat = c.public_instance_members(lib.lookup)
	assert sorted(flat) == ["describe", "id", "name"]
	# Mixins override the superclass.
	assert flat["describe"].return_type == INT  # type: ignore[attr-defined]


def test_cyclic_hierarchy_flattening_terminates() -> None:
	lib = Library(
		"lib:a",
		[
			cls("A", getter("a", INT), superclass=self_ref("lib:a", "B")),
			cls("B", getter("b", INT), superclass=self_ref("lib:a", "A")),
		],
	)
	a = lib.declarations["A"]
	assert isinstance(a, ClassDecl)
	assert sorted(a.public_instance_members(lib.lookup)) == ["a", "b"]


def test_class_rejects_duplicate_members() -> None:
	with pytest.raises(DeclGraphError):
		cls("C", fn("m"), getter("m", INT))


def test_param_list_invariants() -> None:
	with pytest.raises(DeclGraphError):
		ParamList(optional=(Param("a", INT),), named=(Param("b", INT),))
	with pytest.raises(DeclGraphError):
		ParamList(named=(Param("a", INT), Param("a", STRING)))


def test_type_rendering() -> None:
	m = Method(name="f", return_type=INT, params=ParamList(positional=(Param("s", STRING),), named=(Param("n", INT, "0"),)))
	assert str(m.params) == "(String s, {int n = 0})"
	assert str(self_ref("lib:a", "List", INT)) == "List<int>"
	assert str(DeclRef("lib:a", "C")) == "lib:a::C"


def test_declref_parse() -> None:
	assert DeclRef.parse("package:x/y.dart::Name") == DeclRef("package:x/y.dart", "Name")
	with pytest.raises(DeclGraphError):
		DeclRef.parse("NoSeparator")
