# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration model (types, members, libraries, namespaces) and its JSON
interchange format.
"""

from .model import (
	VOID,
	ClassDecl,
	Combinator,
	Constructor,
	DeclGraphError,
	DeclRef,
	EnumDecl,
	FunctionType,
	Getter,
	Library,
	Member,
	MemberKind,
	Method,
	NamedType,
	Namespace,
	Param,
	ParamList,
	Setter,
	Type,
	TypeParam,
	TypeParamType,
	Typedef,
	VoidType,
	named,
	variable_members,
)

__all__ = [
	"VOID",
	"ClassDecl",
	"Combinator",
	"Constructor",
	"DeclGraphError",
	"DeclRef",
	"EnumDecl",
	"FunctionType",
	"Getter",
	"Library",
	"Member",
	"MemberKind",
	"Method",
	"NamedType",
	"Namespace",
	"Param",
	"ParamList",
	"Setter",
	"Type",
	"TypeParam",
	"TypeParamType",
	"Typedef",
	"VoidType",
	"named",
	"variable_members",
]
