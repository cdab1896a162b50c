# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from confimport.decls.json_v0 import (
	FORMAT_NAME,
	FORMAT_VERSION,
	decode_declaration,
	decode_library,
	decode_type,
	dumps_library,
	load_library,
)
from confimport.decls.model import (
	VOID,
	ClassDecl,
	DeclGraphError,
	DeclRef,
	FunctionType,
	Getter,
	MemberKind,
	NamedType,
	Setter,
	TypeParamType,
)


def _doc(**extra) -> dict:
	doc = {
		"format": FORMAT_NAME,
		"version": FORMAT_VERSION,
		"uri": "package:app/iface.dart",
		"declarations": [],
	}
	doc.update(extra)
	return doc


def test_decode_type_shorthands() -> None:
	assert decode_type("void") == VOID
	assert decode_type("dart:core::int") == NamedType(DeclRef("dart:core", "int"))


def test_decode_nested_types() -> None:
	ty = decode_type(
		{
			"kind": "function",
			"return": {"kind": "named", "ref": "dart:core::List", "args": [{"kind": "type_param", "index": 0, "name": "T"}]},
			"params": {"positional": [{"name": "x", "type": "dart:core::int"}]},
		}
	)
	assert isinstance(ty, FunctionType)
	assert isinstance(ty.return_type, NamedType)
	assert ty.return_type.args == (TypeParamType(0),)
	assert ty.params.positional[0].name == "x"


@pytest.mark.parametrize(
	"obj",
	[
		42,
		"NoSeparator",
		{"kind": "bogus"},
		{"kind": "type_param", "index": -1},
		{"kind": "type_param", "index": True},
		{"kind": "function"},
	],
)
def test_decode_type_rejects_malformed(obj) -> None:
	with pytest.raises(DeclGraphError):
		decode_type(obj)


def test_variable_declaration_expands() -> None:
	members = decode_declaration({"kind": "variable", "name": "x", "type": "dart:core::int"})
	assert [type(m) for m in members] == [Getter, Setter]
	final = decode_declaration({"kind": "variable", "name": "x", "type": "dart:core::int", "final": True})
	assert [m.kind for m in final] == [MemberKind.GETTER]


def test_decode_class() -> None:
	(decl,) = decode_declaration(
		{
			"kind": "class",
			"name": "C",
			"abstract": True,
			"superclass": "dart:core::Object",
			"interfaces": ["package:app/a.dart::I"],
			"constructors": [{"kind": "constructor", "factory": True}],
			"members": [{"kind": "variable", "name": "v", "type": "dart:core::int"}],
			"static_members": [{"kind": "method", "name": "create", "return": "void"}],
		}
	)
	assert isinstance(decl, ClassDecl)
	assert decl.is_abstract
	assert decl.superclass == NamedType(DeclRef("dart:core", "Object"))
	assert decl.constructors[0].name == ""
	assert decl.constructors[0].is_factory
	assert sorted(decl.declared_instance_members()) == ["v", "v="]
	assert [m.name for m in decl.static_members] == ["create"]


def test_class_constructors_must_be_constructors() -> None:
	with pytest.raises(DeclGraphError) as excinfo:
		decode_declaration({"kind": "class", "name": "C", "constructors": [{"kind": "method", "name": "m"}]})
	assert "C" in str(excinfo.value)


def test_errors_name_the_json_path() -> None:
	doc = _doc(declarations=[{"kind": "method", "name": "f", "params": {"positional": [{"name": "a", "type": 3}]}}])
	with pytest.raises(DeclGraphError) as excinfo:
		decode_library(doc)
	assert excinfo.value.path == "$.declarations[0](f).params.positional[0].type"


@pytest.mark.parametrize(
	"doc",
	[
		[],
		_doc(format="other"),
		_doc(version=1),
		_doc(uri=5),
		_doc(declarations=[{"kind": "widget", "name": "w"}]),
		_doc(declarations=[{"kind": "method", "name": "f"}, {"kind": "getter", "name": "f", "type": "void"}]),
		_doc(exports="f"),
	],
)
def test_decode_library_rejects_malformed(doc) -> None:
	with pytest.raises(DeclGraphError):
		decode_library(doc)


def test_decode_library_with_imports_and_reexports() -> None:
	lib = decode_library(
		_doc(
			declarations=[{"kind": "method", "name": "f"}],
			imported=[{"uri": "package:app/base.dart", "declarations": [{"kind": "class", "name": "Base"}]}],
			exports=["f", "package:app/base.dart::Base"],
		)
	)
	ns = lib.namespace()
	assert sorted(ns) == ["Base", "f"]
	assert ns["Base"].ref == DeclRef("package:app/base.dart", "Base")
	assert lib.lookup(DeclRef("package:app/base.dart", "Base")) is not None


def test_encoding_is_deterministic_and_decodable() -> None:
	doc = _doc(
		declarations=[
			{"kind": "variable", "name": "x", "type": "dart:core::int"},
			{"kind": "enum", "name": "Color", "values": ["red", "green"]},
			{"kind": "typedef", "name": "Cb", "return": "void", "params": {"named": [{"name": "n", "type": "dart:core::int", "default": "0"}]}},
		],
		imported=[{"uri": "package:app/base.dart", "declarations": [{"kind": "class", "name": "Base"}]}],
		exports=["Color", "Cb", "x", "package:app/base.dart::Base"],
	)
	text = dumps_library(decode_library(doc))
	assert dumps_library(decode_library(json.loads(text))) == text
	assert json.loads(text)["exports"] == ["Cb", "Color", "package:app/base.dart::Base", "x"]


def test_load_library_reports_file(tmp_path: Path) -> None:
	good = tmp_path / "lib.json"
	good.write_text(json.dumps(_doc(declarations=[{"kind": "method", "name": "f"}])), encoding="utf-8")
	assert list(load_library(good).namespace()) == ["f"]

	bad = tmp_path / "bad.json"
	bad.write_text("{not json", encoding="utf-8")
	with pytest.raises(DeclGraphError) as excinfo:
		load_library(bad)
	assert excinfo.value.path == str(bad)
