# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small constructors for declaration graphs used across the checker tests.
"""

from __future__ import annotations

from typing import Iterable, Optional

from confimport.decls.model import (
	VOID,
	ClassDecl,
	Getter,
	Library,
	Member,
	Method,
	NamedType,
	Namespace,
	Param,
	ParamList,
	Type,
	named,
)

CORE = "dart:core"


def core(name: str, *args: Type) -> NamedType:
	return named(CORE, name, *args)


STRING = core("String")
INT = core("int")
DOUBLE = core("double")
BOOL = core("bool")


def params(*types: Type, optional: Iterable[Type] = (), named_params: Optional[dict] = None) -> ParamList:
	"""Positional params named p0, p1, ...; `named_params` maps name -> (type, default)."""
	pos = tuple(Param(name=f"p{i}", type=t) for i, t in enumerate(types))
	opt = tuple(Param(name=f"o{i}", type=t) for i, t in enumerate(optional))
	nmd = tuple(Param(name=n, type=t, default=d) for n, (t, d) in (named_params or {}).items())
	return ParamList(positional=pos, optional=opt, named=nmd)


def fn(name: str, ret: Type = VOID, *args: Type, **kw) -> Method:
	return Method(name=name, return_type=ret, params=params(*args), **kw)


def getter(name: str, ty: Type, **kw) -> Getter:
	return Getter(name=name, return_type=ty, **kw)


def cls(name: str, *members: Member, **kw) -> ClassDecl:
	return ClassDecl(name=name, instance_members=tuple(members), **kw)


def ns(uri: str, *decls: Member, **kw) -> Namespace:
	return Library(uri, decls, **kw).namespace()


def self_ref(uri: str, name: str, *args: Type) -> NamedType:
	"""A reference to `name` declared in library `uri`."""
	return named(uri, name, *args)


__all__ = [
	"BOOL",
	"CORE",
	"DOUBLE",
	"INT",
	"STRING",
	"cls",
	"core",
	"fn",
	"getter",
	"ns",
	"params",
	"self_ref",
]
