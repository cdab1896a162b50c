# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Configured import/export directives and the resolver that picks their URI.

A directive names a default URI plus an ordered list of `(test, uri)`
configurations:

    import "iface" if (ns.library.io) "io" if (ns.library.html) "html";

`resolve` scans the configurations in declared order and returns the URI of
the first one whose test holds; the default is used when none does. The scan
short-circuits, so tests after the winning one are never evaluated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional, Tuple

from confimport.core.span import Span
from confimport.decls.model import Combinator

from .environment import normalize_dotted_name


@dataclass(frozen=True)
class Test:
	"""
	`dotted.key` or `dotted.key == "value"`.

	`key` is stored normalized; `expected` of None means `"true"`.
	"""

	__test__ = False  # not a pytest class

	key: str
	expected: Optional[str] = None
	span: Span = field(default_factory=Span, compare=False, repr=False)

	def __post_init__(self) -> None:
		object.__setattr__(self, "key", normalize_dotted_name(self.key))

	@property
	def expected_value(self) -> str:
		return "true" if self.expected is None else self.expected

	def evaluate(self, environment: Mapping[str, str]) -> bool:
		"""True iff the key is present and its value equals the expected string."""
		value = environment.get(self.key)
		if value is None:
			return False
		return value == self.expected_value

	def __str__(self) -> str:
		if self.expected is None:
			return self.key
		return f'{self.key} == "{self.expected}"'


@dataclass(frozen=True)
class Configuration:
	test: Test
	uri: str


@dataclass(frozen=True)
class ConfiguredDirective:
	"""An import/export with a default URI and ordered configurations."""

	default_uri: str
	configurations: Tuple[Configuration, ...] = ()
	kind: str = "import"
	prefix: Optional[str] = None
	combinators: Tuple[Combinator, ...] = ()
	span: Span = field(default_factory=Span, compare=False, repr=False)

	def __post_init__(self) -> None:
		if self.kind not in ("import", "export"):
			raise ValueError(f"unknown directive kind '{self.kind}'")

	def uris(self) -> Tuple[str, ...]:
		"""Default URI followed by each distinct configuration URI, in order."""
		out = [self.default_uri]
		for conf in self.configurations:
			if conf.uri not in out:
				out.append(conf.uri)
		return tuple(out)


def resolve(directive: ConfiguredDirective, environment: Mapping[str, str]) -> str:
	"""Return the URI the directive binds to under `environment`."""
	for conf in directive.configurations:
		if conf.test.evaluate(environment):
			return conf.uri
	return directive.default_uri


__all__ = ["Configuration", "ConfiguredDirective", "Test", "resolve"]
