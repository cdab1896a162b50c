# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build-time environment consulted by configured directives.

The environment is an immutable `dotted.key -> string` mapping assembled once
per build/run:

- the host contributes `<namespace>.library.<name> = "true"` for every
  available built-in library;
- the user contributes `-D key=value` defines, which win on collision.

Keys are stored in normalized dotted form (see `normalize_dotted_name`) so a
lookup never depends on how whitespace was laid out around the dots.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, Iterator, Optional, Sequence, Union


class DefineError(ValueError):
	"""User-facing error for a malformed `-D` define."""

	def __init__(self, message: str, *, text: str) -> None:
		super().__init__(message)
		self.text = text


def normalize_dotted_name(name: Union[str, Sequence[str]]) -> str:
	"""
	Join identifier segments with `.`, dropping whitespace around them.

	Accepts either a dotted string (`"ns . library.io"`) or the already-split
	segments a parser produces (`["ns", "library", "io"]`).
	"""
	segments = name.split(".") if isinstance(name, str) else list(name)
	return ".".join(seg.strip() for seg in segments)


class Environment(Mapping):
	"""Immutable, normalized view of the build environment."""

	__slots__ = ("_values",)

	def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
		norm: dict[str, str] = {}
		for key, value in (values or {}).items():
			if not isinstance(value, str):
				raise TypeError(f"environment value for '{key}' must be a string, got {type(value).__name__}")
			norm[normalize_dotted_name(key)] = value
		self._values = norm

	@classmethod
	def build(
		cls,
		libraries: Iterable[str] = (),
		*,
		namespace: str = "dart",
		defines: Optional[Mapping[str, str]] = None,
	) -> "Environment":
		"""
		Assemble the environment from host libraries and user defines.

		User defines are applied last so they override host-provided keys.
		"""
		values: dict[str, str] = {}
		for lib in libraries:
			values[normalize_dotted_name([namespace, "library", lib])] = "true"
		for key, value in (defines or {}).items():
			values[normalize_dotted_name(key)] = value
		return cls(values)

	def __getitem__(self, key: str) -> str:
		return self._values[key]

	def __iter__(self) -> Iterator[str]:
		return iter(self._values)

	def __len__(self) -> int:
		return len(self._values)

	def __repr__(self) -> str:
		return f"Environment({self._values!r})"


def parse_define(text: str) -> tuple[str, str]:
	"""
	Parse one `key=value` define.

	The value may be empty (`key=`) and may itself contain `=`; the key must be
	a non-empty dotted name.
	"""
	key, sep, value = text.partition("=")
	if not sep:
		raise DefineError(f"invalid define '{text}': expected key=value", text=text)
	norm = normalize_dotted_name(key)
	if not norm or any(not seg for seg in norm.split(".")):
		raise DefineError(f"invalid define '{text}': empty key segment", text=text)
	return norm, value


def parse_defines(texts: Iterable[str]) -> dict[str, str]:
	"""Parse repeated defines; a later define of the same key wins."""
	out: dict[str, str] = {}
	for text in texts:
		key, value = parse_define(text)
		out[key] = value
	return out


__all__ = ["DefineError", "Environment", "normalize_dotted_name", "parse_define", "parse_defines"]
