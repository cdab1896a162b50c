# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Directive-level orchestration.

A configured directive implies one compatibility check per alternative: the
default URI is the interface, and every other configuration URI is a
candidate that must be able to stand in for it. Resolution and checking are
independent pipelines; both are pure, so checks for different directives run
concurrently without coordination.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from confimport.compat.checker import CheckOptions, check_compatible
from confimport.compat.report import CompatibilityReport, Phase
from confimport.config.directive import ConfiguredDirective, resolve
from confimport.core.diagnostics import Diagnostic
from confimport.decls.model import Library, Namespace

# Maps a URI to its library. Loaders raise DeclGraphError for bad inputs.
LibraryLoader = Callable[[str], Library]


@dataclass(frozen=True)
class DirectiveCheck:
	"""Reports for every (interface, candidate) pair of one directive."""

	directive: ConfiguredDirective
	reports: Tuple[CompatibilityReport, ...]

	@property
	def ok(self) -> bool:
		return all(r.ok for r in self.reports)

	def to_diagnostics(self) -> List[Diagnostic]:
		out: List[Diagnostic] = []
		for r in self.reports:
			out.extend(r.to_diagnostics())
		return out


def directive_pairs(directive: ConfiguredDirective) -> List[Tuple[str, str]]:
	"""`(interface, candidate)` URI pairs implied by a directive, in order."""
	uris = directive.uris()
	return [(uris[0], uri) for uri in uris[1:]]


def _namespace(lib: Library, directive: ConfiguredDirective) -> Namespace:
	return lib.namespace(directive.combinators)


def check_directive(
	directive: ConfiguredDirective,
	loader: LibraryLoader,
	phase: Phase = Phase.FULL,
	options: Optional[CheckOptions] = None,
) -> DirectiveCheck:
	"""Check every candidate of `directive` against its default library."""
	pairs = directive_pairs(directive)
	if not pairs:
		return DirectiveCheck(directive=directive, reports=())
	interface = _namespace(loader(directive.default_uri), directive)
	reports = []
	for _, candidate_uri in pairs:
		candidate = _namespace(loader(candidate_uri), directive)
		report = check_compatible(interface, candidate, phase, options)
		reports.append(replace(report, span=directive.span))
	return DirectiveCheck(directive=directive, reports=tuple(reports))


def check_directives(
	directives: Sequence[ConfiguredDirective],
	loader: LibraryLoader,
	phase: Phase = Phase.FULL,
	options: Optional[CheckOptions] = None,
	*,
	jobs: Optional[int] = None,
) -> List[DirectiveCheck]:
	"""
	Check many directives; results keep the input order.

	With `jobs > 1` the directives are checked on a thread pool. The loader is
	called from worker threads and must be safe for that; `CachingLoader` is.
	"""
	if not jobs or jobs <= 1 or len(directives) <= 1:
		return [check_directive(d, loader, phase, options) for d in directives]
	with ThreadPoolExecutor(max_workers=jobs) as executor:
		futures = [executor.submit(check_directive, d, loader, phase, options) for d in directives]
		return [f.result() for f in futures]


def resolve_all(directives: Iterable[ConfiguredDirective], environment: Mapping[str, str]) -> List[str]:
	"""Resolve each directive against the same environment."""
	return [resolve(d, environment) for d in directives]


class CachingLoader:
	"""
	Wraps a loader so each URI is loaded once, also when called from the
	workers of `check_directives`.

	Libraries are immutable, so sharing one across checks is safe.
	"""

	def __init__(self, loader: LibraryLoader) -> None:
		self._loader = loader
		self._cache: dict[str, Library] = {}
		self._lock = threading.Lock()

	def __call__(self, uri: str) -> Library:
		with self._lock:
			lib = self._cache.get(uri)
			if lib is None:
				lib = self._loader(uri)
				self._cache[uri] = lib
		return lib


__all__ = [
	"CachingLoader",
	"DirectiveCheck",
	"LibraryLoader",
	"check_directive",
	"check_directives",
	"directive_pairs",
	"resolve_all",
]
