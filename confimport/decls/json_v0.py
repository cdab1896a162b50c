# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration-graph interchange format (v0).

The front-end that parses module source hands each library's declarations to
the checker as a JSON document:

    {
      "format": "confimport-decls",
      "version": 0,
      "uri": "package:app/iface.dart",
      "declarations": [ <decl>, ... ],
      "exports": ["f", "C", "dart:core::Object"],   (optional)
      "imported": [ {"uri": "...", "declarations": [ <decl>, ... ]} ]  (optional)
    }

Types are either the string `"void"`, a string `"lib::Name"` (named type with
no arguments), or an object tagged by `kind` (`void`, `named`, `function`,
`type_param`). Declarations are objects tagged by `kind` (`typedef`, `class`,
`enum`, `constructor`, `method`, `getter`, `setter`, `variable`); variables are
expanded into getter/setter members on decode.

Every field is validated; violations raise `DeclGraphError` naming the JSON
path of the offending value. Encoding is deterministic (`sort_keys`).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .model import (
	VOID,
	ClassDecl,
	Constructor,
	DeclGraphError,
	DeclRef,
	EnumDecl,
	FunctionType,
	Getter,
	Library,
	Member,
	Method,
	NamedType,
	Param,
	ParamList,
	Setter,
	Type,
	TypeParam,
	TypeParamType,
	Typedef,
	VoidType,
	variable_members,
)

FORMAT_NAME = "confimport-decls"
FORMAT_VERSION = 0


def _expect(cond: bool, msg: str, path: str) -> None:
	if not cond:
		raise DeclGraphError(msg, path=path)


def _str_field(obj: Mapping[str, Any], key: str, path: str, *, required: bool = True) -> Optional[str]:
	val = obj.get(key)
	if val is None:
		_expect(not required, f"missing '{key}'", path)
		return None
	_expect(isinstance(val, str), f"'{key}' must be a string", path)
	return val


def _bool_field(obj: Mapping[str, Any], key: str, path: str) -> bool:
	val = obj.get(key, False)
	_expect(isinstance(val, bool), f"'{key}' must be a boolean", path)
	return val


def _list_field(obj: Mapping[str, Any], key: str, path: str) -> List[Any]:
	val = obj.get(key, [])
	_expect(isinstance(val, list), f"'{key}' must be a list", path)
	return val


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_type(obj: Any, path: str = "type") -> Type:
	if isinstance(obj, str):
		if obj == "void":
			return VOID
		try:
			return NamedType(ref=DeclRef.parse(obj))
		except DeclGraphError as err:
			raise DeclGraphError(str(err), path=path) from err
	_expect(isinstance(obj, dict), "type must be a string or an object", path)
	kind = _str_field(obj, "kind", path)
	if kind == "void":
		return VOID
	if kind == "named":
		ref_s = _str_field(obj, "ref", path)
		assert ref_s is not None
		try:
			ref = DeclRef.parse(ref_s)
		except DeclGraphError as err:
			raise DeclGraphError(str(err), path=path) from err
		args = tuple(decode_type(a, f"{path}.args[{i}]") for i, a in enumerate(_list_field(obj, "args", path)))
		return NamedType(ref=ref, args=args)
	if kind == "function":
		_expect("return" in obj, "missing 'return'", path)
		return FunctionType(
			return_type=decode_type(obj["return"], f"{path}.return"),
			params=decode_params(obj.get("params", {}), f"{path}.params"),
		)
	if kind == "type_param":
		index = obj.get("index")
		_expect(isinstance(index, int) and not isinstance(index, bool) and index >= 0, "'index' must be a non-negative integer", path)
		return TypeParamType(index=index, name=_str_field(obj, "name", path, required=False) or "")
	raise DeclGraphError(f"unknown type kind '{kind}'", path=path)


def _decode_param(obj: Any, path: str) -> Param:
	_expect(isinstance(obj, dict), "parameter must be an object", path)
	name = _str_field(obj, "name", path)
	_expect("type" in obj, "missing 'type'", path)
	assert name is not None
	return Param(
		name=name,
		type=decode_type(obj["type"], f"{path}.type"),
		default=_str_field(obj, "default", path, required=False),
	)


def decode_params(obj: Any, path: str = "params") -> ParamList:
	_expect(isinstance(obj, dict), "parameter list must be an object", path)
	groups: Dict[str, Tuple[Param, ...]] = {}
	for group in ("positional", "optional", "named"):
		groups[group] = tuple(_decode_param(p, f"{path}.{group}[{i}]") for i, p in enumerate(_list_field(obj, group, path)))
	try:
		return ParamList(**groups)
	except DeclGraphError as err:
		raise DeclGraphError(str(err), path=path) from err


def _decode_type_params(obj: Mapping[str, Any], path: str) -> Tuple[TypeParam, ...]:
	out = []
	for i, tp in enumerate(_list_field(obj, "type_params", path)):
		tp_path = f"{path}.type_params[{i}]"
		_expect(isinstance(tp, dict), "type parameter must be an object", tp_path)
		name = _str_field(tp, "name", tp_path)
		assert name is not None
		bound = decode_type(tp["bound"], f"{tp_path}.bound") if tp.get("bound") is not None else None
		out.append(TypeParam(name=name, bound=bound))
	return tuple(out)


def _decode_named_type(obj: Any, path: str) -> NamedType:
	ty = decode_type(obj, path)
	_expect(isinstance(ty, NamedType), "expected a named type", path)
	assert isinstance(ty, NamedType)
	return ty


def _decode_members(obj: Mapping[str, Any], key: str, path: str) -> Tuple[Member, ...]:
	out: List[Member] = []
	for i, m in enumerate(_list_field(obj, key, path)):
		out.extend(decode_declaration(m, f"{path}.{key}[{i}]"))
	return tuple(out)


def decode_declaration(obj: Any, path: str = "decl") -> Tuple[Member, ...]:
	"""Decode one declaration; variables yield a getter and maybe a setter."""
	_expect(isinstance(obj, dict), "declaration must be an object", path)
	kind = _str_field(obj, "kind", path)
	name = _str_field(obj, "name", path, required=kind != "constructor") or ""
	path = f"{path}({name})" if name else path
	if kind == "typedef":
		return (
			Typedef(
				name=name,
				type_params=_decode_type_params(obj, path),
				return_type=decode_type(obj.get("return", "void"), f"{path}.return"),
				params=decode_params(obj.get("params", {}), f"{path}.params"),
			),
		)
	if kind == "enum":
		values = _list_field(obj, "values", path)
		_expect(all(isinstance(v, str) for v in values), "enum values must be strings", path)
		_expect(len(set(values)) == len(values), "duplicate enum value", path)
		return (EnumDecl(name=name, values=tuple(values)),)
	if kind == "constructor":
		return (
			Constructor(
				name=name,
				is_factory=_bool_field(obj, "factory", path),
				is_const=_bool_field(obj, "const", path),
				params=decode_params(obj.get("params", {}), f"{path}.params"),
			),
		)
	if kind == "method":
		return (
			Method(
				name=name,
				is_abstract=_bool_field(obj, "abstract", path),
				type_params=_decode_type_params(obj, path),
				return_type=decode_type(obj.get("return", "void"), f"{path}.return"),
				params=decode_params(obj.get("params", {}), f"{path}.params"),
			),
		)
	if kind == "getter":
		return (
			Getter(
				name=name,
				is_abstract=_bool_field(obj, "abstract", path),
				return_type=decode_type(obj.get("type", "void"), f"{path}.type"),
			),
		)
	if kind == "setter":
		return (
			Setter(
				name=name,
				is_abstract=_bool_field(obj, "abstract", path),
				value_type=decode_type(obj.get("type", "void"), f"{path}.type"),
			),
		)
	if kind == "variable":
		_expect("type" in obj, "missing 'type'", path)
		return variable_members(
			name,
			decode_type(obj["type"], f"{path}.type"),
			is_final=_bool_field(obj, "final", path),
			is_const=_bool_field(obj, "const", path),
			is_abstract=_bool_field(obj, "abstract", path),
		)
	if kind == "class":
		superclass = obj.get("superclass")
		try:
			return (
				ClassDecl(
					name=name,
					is_abstract=_bool_field(obj, "abstract", path),
					type_params=_decode_type_params(obj, path),
					superclass=_decode_named_type(superclass, f"{path}.superclass") if superclass is not None else None,
					mixins=tuple(_decode_named_type(t, f"{path}.mixins[{i}]") for i, t in enumerate(_list_field(obj, "mixins", path))),
					interfaces=tuple(
						_decode_named_type(t, f"{path}.interfaces[{i}]") for i, t in enumerate(_list_field(obj, "interfaces", path))
					),
					constructors=tuple(_as_constructors(_decode_members(obj, "constructors", path), path)),
					instance_members=_decode_members(obj, "members", path),
					static_members=_decode_members(obj, "static_members", path),
				),
			)
		except DeclGraphError as err:
			if err.path is not None:
				raise
			raise DeclGraphError(str(err), path=path) from err
	raise DeclGraphError(f"unknown declaration kind '{kind}'", path=path)


def _as_constructors(members: Tuple[Member, ...], path: str) -> List[Constructor]:
	out: List[Constructor] = []
	for m in members:
		_expect(isinstance(m, Constructor), f"'{m.name}' in constructors is not a constructor", path)
		assert isinstance(m, Constructor)
		out.append(m)
	return out


def decode_library(obj: Any) -> Library:
	"""Decode a whole library document."""
	_expect(isinstance(obj, dict), "library document must be an object", "$")
	_expect(obj.get("format") == FORMAT_NAME, f"unsupported format (expected '{FORMAT_NAME}')", "$")
	_expect(obj.get("version") == FORMAT_VERSION, f"unsupported version (expected {FORMAT_VERSION})", "$")
	uri = _str_field(obj, "uri", "$")
	assert uri is not None
	declarations: List[Member] = []
	for i, d in enumerate(_list_field(obj, "declarations", "$")):
		declarations.extend(decode_declaration(d, f"$.declarations[{i}]"))
	imported: List[Member] = []
	for i, dep in enumerate(_list_field(obj, "imported", "$")):
		dep_path = f"$.imported[{i}]"
		_expect(isinstance(dep, dict), "imported entry must be an object", dep_path)
		dep_uri = _str_field(dep, "uri", dep_path)
		assert dep_uri is not None
		# Bind refs through a throwaway Library so imported decls get identities.
		dep_lib = Library(dep_uri, [m for j, d in enumerate(_list_field(dep, "declarations", dep_path)) for m in decode_declaration(d, f"{dep_path}.declarations[{j}]")])
		imported.extend(dep_lib.declarations.values())
	exports = obj.get("exports")
	if exports is not None:
		_expect(isinstance(exports, list) and all(isinstance(e, str) for e in exports), "'exports' must be a list of strings", "$")
	return Library(uri, declarations, imported=imported, exports=exports)


def load_library(path: Path) -> Library:
	"""Load and decode a library document from disk."""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except json.JSONDecodeError as err:
		raise DeclGraphError(f"invalid JSON: {err.msg} (line {err.lineno})", path=str(path)) from err
	try:
		return decode_library(obj)
	except DeclGraphError as err:
		raise DeclGraphError(str(err), path=str(path), span=err.span) from err


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_type(ty: Type) -> Any:
	if isinstance(ty, VoidType):
		return "void"
	if isinstance(ty, NamedType):
		if not ty.args:
			return str(ty.ref)
		return {"kind": "named", "ref": str(ty.ref), "args": [encode_type(a) for a in ty.args]}
	if isinstance(ty, FunctionType):
		return {"kind": "function", "return": encode_type(ty.return_type), "params": encode_params(ty.params)}
	if isinstance(ty, TypeParamType):
		return {"kind": "type_param", "index": ty.index, "name": ty.name}
	raise TypeError(f"cannot encode type {ty!r}")


def _encode_param(p: Param) -> Dict[str, Any]:
	out: Dict[str, Any] = {"name": p.name, "type": encode_type(p.type)}
	if p.default is not None:
		out["default"] = p.default
	return out


def encode_params(params: ParamList) -> Dict[str, Any]:
	return {
		"positional": [_encode_param(p) for p in params.positional],
		"optional": [_encode_param(p) for p in params.optional],
		"named": [_encode_param(p) for p in params.named],
	}


def _encode_type_params(tps: Tuple[TypeParam, ...]) -> List[Dict[str, Any]]:
	return [{"name": tp.name, "bound": encode_type(tp.bound) if tp.bound is not None else None} for tp in tps]


def encode_declaration(m: Member) -> Dict[str, Any]:
	if isinstance(m, Typedef):
		return {
			"kind": "typedef",
			"name": m.name,
			"type_params": _encode_type_params(m.type_params),
			"return": encode_type(m.return_type),
			"params": encode_params(m.params),
		}
	if isinstance(m, EnumDecl):
		return {"kind": "enum", "name": m.name, "values": list(m.values)}
	if isinstance(m, Constructor):
		return {"kind": "constructor", "name": m.name, "factory": m.is_factory, "const": m.is_const, "params": encode_params(m.params)}
	if isinstance(m, Method):
		return {
			"kind": "method",
			"name": m.name,
			"abstract": m.is_abstract,
			"type_params": _encode_type_params(m.type_params),
			"return": encode_type(m.return_type),
			"params": encode_params(m.params),
		}
	if isinstance(m, Getter):
		return {"kind": "getter", "name": m.name, "abstract": m.is_abstract, "type": encode_type(m.return_type)}
	if isinstance(m, Setter):
		return {"kind": "setter", "name": m.name, "abstract": m.is_abstract, "type": encode_type(m.value_type)}
	if isinstance(m, ClassDecl):
		return {
			"kind": "class",
			"name": m.name,
			"abstract": m.is_abstract,
			"type_params": _encode_type_params(m.type_params),
			"superclass": encode_type(m.superclass) if m.superclass is not None else None,
			"mixins": [encode_type(t) for t in m.mixins],
			"interfaces": [encode_type(t) for t in m.interfaces],
			"constructors": [encode_declaration(c) for c in m.constructors],
			"members": [encode_declaration(x) for x in m.instance_members],
			"static_members": [encode_declaration(x) for x in m.static_members],
		}
	raise TypeError(f"cannot encode declaration {m!r}")


def encode_library(lib: Library) -> Dict[str, Any]:
	"""Encode a library; imported declarations are grouped by defining URI."""
	imported: Dict[str, List[Dict[str, Any]]] = {}
	for m in lib.imported:
		assert m.ref is not None
		imported.setdefault(m.ref.library, []).append(encode_declaration(m))
	exports = []
	for key, m in lib.exports.items():
		if m.ref is not None and m.ref.library != lib.uri:
			exports.append(str(m.ref))
		else:
			exports.append(m.name)
	return {
		"format": FORMAT_NAME,
		"version": FORMAT_VERSION,
		"uri": lib.uri,
		"declarations": [encode_declaration(m) for m in lib.declarations.values()],
		"exports": sorted(set(exports)),
		"imported": [{"uri": uri, "declarations": decls} for uri, decls in sorted(imported.items())],
	}


def dumps_library(lib: Library) -> str:
	return json.dumps(encode_library(lib), sort_keys=True, indent=2)


__all__ = [
	"FORMAT_NAME",
	"FORMAT_VERSION",
	"decode_declaration",
	"decode_library",
	"decode_params",
	"decode_type",
	"dumps_library",
	"encode_declaration",
	"encode_library",
	"encode_params",
	"encode_type",
	"load_library",
]
