# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for configured import/export directives.

The grammar lives next to this file in `directive.lark`. Dotted test names are
tokenized segment by segment, so `ns . library . io` and `ns.library.io`
produce the same key.
"""

from __future__ import annotations

import codecs
import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from confimport.core.span import Span
from confimport.decls.model import Combinator

from .directive import Configuration, ConfiguredDirective, Test
from .environment import normalize_dotted_name

_GRAMMAR_PATH = Path(__file__).with_name("directive.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_ESCAPE_RE = re.compile(r"\\(?:u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{2}|[0-7]{1,3}|N\{[^}]*\}|.)", re.DOTALL)

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="directives",
	propagate_positions=True,
)


class DirectiveSyntaxError(ValueError):
	"""
	User-facing error for directive text that does not parse, or that parses
	but is not a valid directive (e.g. an `export` with an `as` prefix).
	"""

	def __init__(self, message: str, *, span: Span) -> None:
		super().__init__(message)
		self.span = span


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def _decode_escape(match: re.Match) -> str:
	text = match.group(0)
	if not text.isascii():
		return text
	return codecs.decode(text, "unicode_escape")


def _decode_string_token(tok: Token, file: Optional[str]) -> str:
	"""
	Decode STRING tokens (single or double quoted), interpreting Python-style
	escapes. Characters outside escapes are kept as written.
	"""
	content = tok.value[1:-1]
	try:
		return _ESCAPE_RE.sub(_decode_escape, content)
	except UnicodeDecodeError as err:
		raise DirectiveSyntaxError(f"invalid escape in string literal: {err.reason}", span=_span(tok, file)) from err


def _span(node: Tree | Token, file: Optional[str]) -> Span:
	if isinstance(node, Tree):
		meta = node.meta
		if getattr(meta, "empty", True):
			return Span(file=file)
		return Span.from_loc(meta, file=file)
	return Span.from_loc(node, file=file)


def _children(tree: Tree, name: str) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree) and _name(c) == name]


def _build_test(tree: Tree, file: Optional[str]) -> Test:
	dotted = _children(tree, "dotted_name")[0]
	segments = [tok.value for tok in dotted.children if isinstance(tok, Token)]
	expected_tok = next((c for c in tree.children if isinstance(c, Token) and c.type == "STRING"), None)
	expected = _decode_string_token(expected_tok, file) if expected_tok is not None else None
	return Test(key=normalize_dotted_name(segments), expected=expected, span=_span(tree, file))


def _build_uri(tree: Tree, file: Optional[str]) -> str:
	tok = tree.children[0]
	assert isinstance(tok, Token)
	return _decode_string_token(tok, file)


def _build_combinator(tree: Tree) -> Combinator:
	inner = tree.children[0]
	assert isinstance(inner, Tree)
	names = _children(inner, "name_list")[0]
	return Combinator(kind=_name(inner), names=tuple(tok.value for tok in names.children if isinstance(tok, Token)))


def _build_directive(tree: Tree, file: Optional[str]) -> ConfiguredDirective:
	span = _span(tree, file)
	kw_tree = _children(tree, "directive_kw")[0]
	kind = str(kw_tree.children[0])
	default_uri = _build_uri(_children(tree, "uri")[0], file)
	configurations = []
	for conf in _children(tree, "configuration"):
		configurations.append(
			Configuration(
				test=_build_test(_children(conf, "test")[0], file),
				uri=_build_uri(_children(conf, "uri")[0], file),
			)
		)
	prefix: Optional[str] = None
	prefix_trees = _children(tree, "prefix")
	if prefix_trees:
		if kind == "export":
			raise DirectiveSyntaxError("an export directive cannot have an 'as' prefix", span=_span(prefix_trees[0], file))
		prefix = str(prefix_trees[0].children[0])
	combinators = tuple(_build_combinator(c) for c in _children(tree, "combinator"))
	return ConfiguredDirective(
		default_uri=default_uri,
		configurations=tuple(configurations),
		kind=kind,
		prefix=prefix,
		combinators=combinators,
		span=span,
	)


def parse_directives(source: str, *, file: Optional[str] = None) -> List[ConfiguredDirective]:
	"""Parse zero or more `;`-terminated directives."""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		span = Span(file=file, line=getattr(err, "line", None), column=getattr(err, "column", None))
		raise DirectiveSyntaxError(f"invalid directive syntax: {str(err).splitlines()[0]}", span=span) from err
	return [_build_directive(d, file) for d in _children(tree, "directive")]


def parse_directive(source: str, *, file: Optional[str] = None) -> ConfiguredDirective:
	"""Parse exactly one directive."""
	directives = parse_directives(source, file=file)
	if len(directives) != 1:
		raise DirectiveSyntaxError(f"expected exactly one directive, found {len(directives)}", span=Span(file=file))
	return directives[0]


def parse_directives_file(path: Path) -> List[ConfiguredDirective]:
	return parse_directives(path.read_text(encoding="utf-8"), file=str(path))


__all__ = ["DirectiveSyntaxError", "parse_directive", "parse_directives", "parse_directives_file"]
