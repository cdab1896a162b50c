# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from confimport.config.directive import resolve
from confimport.config.environment import Environment
from confimport.config.parser import DirectiveSyntaxError, parse_directive, parse_directives


def test_parse_plain_import() -> None:
	d = parse_directive('import "iface.dart";')
	assert d.kind == "import"
	assert d.default_uri == "iface.dart"
	assert d.configurations == ()


def test_parse_configurations_in_order() -> None:
	d = parse_directive(
		"""
import "iface.dart"
	if (ns.library.io) "io.dart"
	if (ns.library.html == "true") "html.dart";
"""
	)
	assert [c.uri for c in d.configurations] == ["io.dart", "html.dart"]
	assert [c.test.key for c in d.configurations] == ["ns.library.io", "ns.library.html"]
	assert d.configurations[0].test.expected is None
	assert d.configurations[1].test.expected == "true"


def test_dotted_name_whitespace_is_ignored() -> None:
	d = parse_directive('import "a" if (ns . library . io) "b";')
	assert d.configurations[0].test.key == "ns.library.io"
	assert resolve(d, Environment({"ns.library.io": "true"})) == "b"


def test_parse_prefix_and_combinators() -> None:
	d = parse_directive("import 'a' if (x) 'b' as p show A, B hide C;")
	assert d.prefix == "p"
	assert [(c.kind, c.names) for c in d.combinators] == [("show", ("A", "B")), ("hide", ("C",))]


def test_parse_export() -> None:
	d = parse_directive('export "a" if (x.y == "1") "b" show f;')
	assert d.kind == "export"
	assert d.configurations[0].test.expected == "1"


def test_export_with_prefix_is_rejected() -> None:
	with pytest.raises(DirectiveSyntaxError):
		parse_directive('export "a" as p;')


def test_escapes_in_strings_are_decoded() -> None:
	d = parse_directive(r'import "a\x41" if (k == "tab\there") "b";')
	assert d.default_uri == "aA"
	assert d.configurations[0].test.expected == "tab\there"


def test_unicode_escapes_and_literal_text_decode_together() -> None:
	d = parse_directive('import "caf\\u00e9" if (lang == "é\\u00e9") "b\\U0001F600";')
	assert d.default_uri == "café"
	assert d.configurations[0].test.expected == "éé"
	assert d.configurations[0].uri == "b\U0001F600"


@pytest.mark.parametrize("literal", ['"a\\u12"', '"a\\x4"', '"\\N{NO SUCH CHARACTER}"'])
def test_malformed_escape_is_a_syntax_error(literal: str) -> None:
	with pytest.raises(DirectiveSyntaxError) as excinfo:
		parse_directives(f'import "a";\nimport {literal};', file="d.txt")
	assert "invalid escape" in str(excinfo.value)
	assert excinfo.value.span.file == "d.txt"
	assert excinfo.value.span.line == 2


def test_parse_many_directives_with_comments() -> None:
	ds = parse_directives(
		"""
// platform selection
import "a" if (ns.library.io) "a_io";
export "b";
"""
	)
	assert [d.default_uri for d in ds] == ["a", "b"]


def test_keyword_prefixed_identifiers_are_names() -> None:
	d = parse_directive('import "a" if (iffy.showing) "b";')
	assert d.configurations[0].test.key == "iffy.showing"


def test_syntax_error_carries_location() -> None:
	with pytest.raises(DirectiveSyntaxError) as excinfo:
		parse_directives('import "a" if ns.library.io "b";', file="d.txt")
	assert excinfo.value.span.file == "d.txt"
	assert excinfo.value.span.line == 1


def test_parse_directive_requires_exactly_one() -> None:
	with pytest.raises(DirectiveSyntaxError):
		parse_directive('import "a"; import "b";')


def test_directive_spans_are_recorded() -> None:
	d = parse_directives('\n\nimport "a";', file="x")[0]
	assert d.span.file == "x"
	assert d.span.line == 3
