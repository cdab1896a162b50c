# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration model shared by the resolver, the comparator and the checker.

Shape
-----
- `Type` is a small tagged variant: `VoidType`, `NamedType` (a weak reference
  to a declaration plus type arguments), `FunctionType` and `TypeParamType`
  (a reference to an enclosing type parameter by position).
- Top-level and class-level declarations are `Member` subclasses, one per
  kind. There is no "variable" kind: a variable is normalized into a getter
  `x` and, unless it is final/const, a setter keyed `x=` (see
  `variable_members`).
- A `Library` owns its top-level declarations. Applying `show`/`hide`
  combinators to it yields a `Namespace`: the public name -> Member mapping
  the checker compares.

References between declarations are `DeclRef` values (library URI + name),
resolved by lookup and never by ownership. Class graphs are routinely cyclic
(a superclass referring back to its subclass, siblings referring to each
other), so nothing here follows references eagerly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, ClassVar, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from confimport.core.span import Span


class DeclGraphError(ValueError):
	"""
	Raised when a declaration graph violates the model's invariants
	(duplicate names, unknown kinds, malformed JSON documents).
	"""

	def __init__(self, message: str, *, path: str | None = None, span: Span | None = None) -> None:
		super().__init__(f"{path}: {message}" if path else message)
		self.path = path
		self.span = span or Span()


def is_private_name(name: str) -> bool:
	"""Library-private names start with an underscore."""
	return name.rsplit(".", 1)[-1].startswith("_")


@dataclass(frozen=True, order=True)
class DeclRef:
	"""Identity of a top-level declaration: defining library URI + name."""

	library: str
	name: str

	@property
	def is_private(self) -> bool:
		return is_private_name(self.name)

	def __str__(self) -> str:
		return f"{self.library}::{self.name}"

	@classmethod
	def parse(cls, text: str) -> "DeclRef":
		"""Parse `library::name`."""
		library, sep, name = text.rpartition("::")
		if not sep or not library or not name:
			raise DeclGraphError(f"invalid declaration reference '{text}' (expected 'library::name')")
		return cls(library=library, name=name)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class Type:
	"""Base class for the type variants."""

	__slots__ = ()


@dataclass(frozen=True)
class VoidType(Type):
	def __str__(self) -> str:
		return "void"


@dataclass(frozen=True)
class NamedType(Type):
	"""`ref<args...>`: a nominal type referring to a declaration by `DeclRef`."""

	ref: DeclRef
	args: Tuple[Type, ...] = ()

	def __str__(self) -> str:
		if not self.args:
			return self.ref.name
		return f"{self.ref.name}<{', '.join(str(a) for a in self.args)}>"


@dataclass(frozen=True)
class TypeParamType(Type):
	"""
	Reference to an enclosing type parameter.

	`index` counts through the enclosing class's type parameters first and then
	the member's own; the name is only kept for rendering.
	"""

	index: int
	name: str = field(default="", compare=False)

	def __str__(self) -> str:
		return self.name or f"#{self.index}"


@dataclass(frozen=True)
class Param:
	"""A formal parameter. `default` is the canonical constant text, or None."""

	name: str
	type: Type
	default: Optional[str] = None

	def __str__(self) -> str:
		text = f"{self.type} {self.name}"
		if self.default is not None:
			text += f" = {self.default}"
		return text


@dataclass(frozen=True)
class ParamList:
	"""Mandatory positional, optional positional and named parameters."""

	positional: Tuple[Param, ...] = ()
	optional: Tuple[Param, ...] = ()
	named: Tuple[Param, ...] = ()

	def __post_init__(self) -> None:
		if self.optional and self.named:
			raise DeclGraphError("a parameter list cannot have both optional positional and named parameters")
		seen: set[str] = set()
		for p in self.named:
			if p.name in seen:
				raise DeclGraphError(f"duplicate named parameter '{p.name}'")
			seen.add(p.name)

	def named_map(self) -> Dict[str, Param]:
		return {p.name: p for p in self.named}

	def __str__(self) -> str:
		parts = [str(p) for p in self.positional]
		if self.optional:
			parts.append("[" + ", ".join(str(p) for p in self.optional) + "]")
		if self.named:
			parts.append("{" + ", ".join(str(p) for p in self.named) + "}")
		return "(" + ", ".join(parts) + ")"


@dataclass(frozen=True)
class FunctionType(Type):
	return_type: Type
	params: ParamList = field(default_factory=ParamList)

	def __str__(self) -> str:
		return f"{self.return_type} Function{self.params}"


@dataclass(frozen=True)
class TypeParam:
	name: str
	bound: Optional[Type] = None

	def __str__(self) -> str:
		return self.name if self.bound is None else f"{self.name} extends {self.bound}"


VOID = VoidType()


def named(library: str, name: str, *args: Type) -> NamedType:
	"""Shorthand for `NamedType(DeclRef(library, name), args)`."""
	return NamedType(ref=DeclRef(library=library, name=name), args=tuple(args))


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class MemberKind(Enum):
	TYPEDEF = "typedef"
	CLASS = "class"
	ENUM = "enum"
	CONSTRUCTOR = "constructor"
	METHOD = "method"
	GETTER = "getter"
	SETTER = "setter"

	@property
	def is_type_declaration(self) -> bool:
		return self in (MemberKind.TYPEDEF, MemberKind.CLASS, MemberKind.ENUM)


@dataclass(frozen=True)
class Member:
	"""
	Base for every declaration kind.

	`ref` is set for top-level declarations (it is their identity for Named
	type lookups) and left None for class members and constructors.
	"""

	name: str
	ref: Optional[DeclRef] = field(default=None, compare=False)
	span: Span = field(default_factory=Span, compare=False, repr=False)

	kind: ClassVar[MemberKind]

	@property
	def key(self) -> str:
		"""Namespace key: the name, with setters suffixed by `=`."""
		return self.name

	@property
	def is_private(self) -> bool:
		return is_private_name(self.name)


@dataclass(frozen=True)
class Typedef(Member):
	kind: ClassVar[MemberKind] = MemberKind.TYPEDEF

	type_params: Tuple[TypeParam, ...] = ()
	return_type: Type = VOID
	params: ParamList = field(default_factory=ParamList)


@dataclass(frozen=True)
class EnumDecl(Member):
	kind: ClassVar[MemberKind] = MemberKind.ENUM

	values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Constructor(Member):
	"""`name` is "" for the unnamed constructor."""

	kind: ClassVar[MemberKind] = MemberKind.CONSTRUCTOR

	is_factory: bool = False
	is_const: bool = False
	params: ParamList = field(default_factory=ParamList)


@dataclass(frozen=True)
class Method(Member):
	kind: ClassVar[MemberKind] = MemberKind.METHOD

	is_abstract: bool = False
	type_params: Tuple[TypeParam, ...] = ()
	return_type: Type = VOID
	params: ParamList = field(default_factory=ParamList)


@dataclass(frozen=True)
class Getter(Member):
	kind: ClassVar[MemberKind] = MemberKind.GETTER

	is_abstract: bool = False
	return_type: Type = VOID


@dataclass(frozen=True)
class Setter(Member):
	kind: ClassVar[MemberKind] = MemberKind.SETTER

	is_abstract: bool = False
	value_type: Type = VOID

	@property
	def key(self) -> str:
		return self.name + "="


def _member_map(members: Iterable[Member], *, owner: str) -> Dict[str, Member]:
	out: Dict[str, Member] = {}
	for m in members:
		if m.key in out:
			raise DeclGraphError(f"duplicate member '{m.key}'", path=owner, span=m.span)
		out[m.key] = m
	return out


@dataclass(frozen=True)
class ClassDecl(Member):
	kind: ClassVar[MemberKind] = MemberKind.CLASS

	is_abstract: bool = False
	type_params: Tuple[TypeParam, ...] = ()
	superclass: Optional[NamedType] = None
	mixins: Tuple[NamedType, ...] = ()
	interfaces: Tuple[NamedType, ...] = ()
	constructors: Tuple[Constructor, ...] = ()
	instance_members: Tuple[Member, ...] = ()
	static_members: Tuple[Member, ...] = ()

	def __post_init__(self) -> None:
		_member_map(self.constructors, owner=self.name)
		_member_map(self.instance_members, owner=self.name)
		_member_map(self.static_members, owner=self.name)

	def public_constructors(self) -> Dict[str, Member]:
		return {k: v for k, v in _member_map(self.constructors, owner=self.name).items() if not is_private_name(k)}

	def public_statics(self) -> Dict[str, Member]:
		return {k: v for k, v in _member_map(self.static_members, owner=self.name).items() if not is_private_name(k)}

	def declared_instance_members(self) -> Dict[str, Member]:
		return _member_map(self.instance_members, owner=self.name)

	def public_instance_members(self, lookup: Callable[[DeclRef], Optional[Member]]) -> Dict[str, Member]:
		"""
		Public instance members including inherited ones.

		Members are layered superclass first, then each mixin in order, then the
		class's own declarations; later layers override earlier ones. Supertypes
		that `lookup` cannot resolve contribute nothing. Cyclic hierarchies stop
		at the first repeated class.
		"""
		flat = _flatten(self, lookup, set())
		return {k: v for k, v in flat.items() if not is_private_name(k)}


def _flatten(cls: ClassDecl, lookup: Callable[[DeclRef], Optional[Member]], seen: set[int]) -> Dict[str, Member]:
	if id(cls) in seen:
		return {}
	seen.add(id(cls))
	out: Dict[str, Member] = {}
	supertypes = ([cls.superclass] if cls.superclass is not None else []) + list(cls.mixins)
	for sup in supertypes:
		decl = lookup(sup.ref)
		if isinstance(decl, ClassDecl):
			out.update(_flatten(decl, lookup, seen))
	out.update(cls.declared_instance_members())
	return out


def variable_members(
	name: str,
	type: Type,
	*,
	is_final: bool = False,
	is_const: bool = False,
	is_abstract: bool = False,
	span: Span | None = None,
) -> Tuple[Member, ...]:
	"""Normalize a variable into its implicit getter and (if mutable) setter."""
	sp = span or Span()
	getter = Getter(name=name, span=sp, is_abstract=is_abstract, return_type=type)
	if is_final or is_const:
		return (getter,)
	return (getter, Setter(name=name, span=sp, is_abstract=is_abstract, value_type=type))


# ---------------------------------------------------------------------------
# Libraries and namespaces
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Combinator:
	"""A `show` or `hide` clause on a directive."""

	kind: str
	names: Tuple[str, ...]

	def __post_init__(self) -> None:
		if self.kind not in ("show", "hide"):
			raise ValueError(f"unknown combinator '{self.kind}'")


def _base_name(key: str) -> str:
	return key[:-1] if key.endswith("=") else key


def apply_combinators(keys: Iterable[str], combinators: Sequence[Combinator]) -> list[str]:
	"""Filter namespace keys through `show`/`hide` clauses, in order."""
	out = list(keys)
	for comb in combinators:
		names = set(comb.names)
		if comb.kind == "show":
			out = [k for k in out if _base_name(k) in names]
		else:
			out = [k for k in out if _base_name(k) not in names]
	return out


class Library:
	"""
	A module's top-level declarations plus its export set.

	`declarations` are the library's own top-level members; their `ref` is
	(re)bound to this library. `imported` supplies declarations from other
	libraries that are needed for lookups (superclasses, re-exports).
	`exports` lists the exported keys; None means every public declaration.
	A re-export of an imported declaration is written `uri::Name`.
	"""

	def __init__(
		self,
		uri: str,
		declarations: Iterable[Member] = (),
		*,
		imported: Iterable[Member] = (),
		exports: Optional[Sequence[str]] = None,
	) -> None:
		self.uri = uri
		own: Dict[str, Member] = {}
		for m in declarations:
			if m.key in own:
				raise DeclGraphError(f"duplicate declaration '{m.key}'", path=uri, span=m.span)
			own[m.key] = replace(m, ref=DeclRef(library=uri, name=m.name))
		self.declarations: Dict[str, Member] = own
		self.imported: Tuple[Member, ...] = tuple(imported)
		# Type declarations by identity; Named types and supertypes resolve here.
		self.index: Dict[DeclRef, Member] = {}
		for m in self.imported:
			if m.ref is None:
				raise DeclGraphError(f"imported declaration '{m.name}' has no reference", path=uri, span=m.span)
			if m.kind.is_type_declaration:
				self.index[m.ref] = m
		for m in own.values():
			if m.kind.is_type_declaration:
				assert m.ref is not None
				self.index[m.ref] = m
		self.exports: Dict[str, Member] = self._exports(exports)

	def _exports(self, exports: Optional[Sequence[str]]) -> Dict[str, Member]:
		if exports is None:
			return {k: m for k, m in self.declarations.items() if not m.is_private}
		out: Dict[str, Member] = {}
		for entry in exports:
			if "::" in entry:
				ref = DeclRef.parse(entry)
				found = [m for m in self.imported if m.ref == ref]
				if not found:
					raise DeclGraphError(f"re-export of unknown declaration '{entry}'", path=self.uri)
			else:
				# A variable's name exports both its getter and its setter.
				found = [m for k, m in self.declarations.items() if k in (entry, entry + "=")]
				if not found:
					raise DeclGraphError(f"export of unknown declaration '{entry}'", path=self.uri)
			for member in found:
				if member.is_private:
					raise DeclGraphError(f"cannot export private declaration '{entry}'", path=self.uri)
				if member.key in out and out[member.key] is not member:
					raise DeclGraphError(f"conflicting exports for '{member.key}'", path=self.uri)
				out[member.key] = member
		return out

	def lookup(self, ref: DeclRef) -> Optional[Member]:
		return self.index.get(ref)

	def namespace(self, combinators: Sequence[Combinator] = ()) -> "Namespace":
		"""Visible namespace after applying `show`/`hide` combinators."""
		keys = apply_combinators(self.exports.keys(), combinators)
		return Namespace(self.uri, {k: self.exports[k] for k in keys}, index=self.index)

	def __repr__(self) -> str:
		return f"Library({self.uri!r}, {len(self.declarations)} declarations)"


class Namespace(Mapping):
	"""
	Public name -> Member mapping of a library as seen through a directive.

	Besides the visible members, a namespace keeps the library's declaration
	index so supertypes that are not themselves visible (private bases,
	imported classes) can still be resolved when flattening members.
	"""

	def __init__(self, uri: str, members: Mapping[str, Member], *, index: Mapping[DeclRef, Member] | None = None) -> None:
		self.uri = uri
		self._members: Dict[str, Member] = dict(members)
		self._index: Dict[DeclRef, Member] = dict(index or {})
		self._visible: Dict[DeclRef, str] = {}
		for key, m in self._members.items():
			if m.ref is not None:
				self._visible.setdefault(m.ref, key)
				self._index.setdefault(m.ref, m)

	def __getitem__(self, key: str) -> Member:
		return self._members[key]

	def __iter__(self) -> Iterator[str]:
		return iter(self._members)

	def __len__(self) -> int:
		return len(self._members)

	def lookup(self, ref: DeclRef) -> Optional[Member]:
		"""Resolve a declaration reference (visible or not)."""
		return self._index.get(ref)

	def visible_name(self, ref: DeclRef) -> Optional[str]:
		"""The name under which `ref` is visible in this namespace, if any."""
		return self._visible.get(ref)

	def has_type_declarations(self) -> bool:
		return any(m.kind.is_type_declaration for m in self._members.values())

	def __repr__(self) -> str:
		return f"Namespace({self.uri!r}, {sorted(self._members)})"


__all__ = [
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
	"VOID",
	"VoidType",
	"apply_combinators",
	"is_private_name",
	"named",
	"variable_members",
]
