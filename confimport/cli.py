# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line interface.

    confimport resolve DIRECTIVES [-D key=value]... [--library NAME]...
    confimport check DIRECTIVES --decls DIR [--phase full|functions]
    confimport compare IFACE.json CANDIDATE.json [--phase full|functions]

`resolve` prints the URI each directive binds to. `check` loads the
declaration graph of every URI a directive mentions from
`DIR/<file name derived from the URI>.json` (see `uri_to_filename`) and reports
incompatibilities. `compare` checks two declaration graphs directly.

With --json, output is a single JSON document with an `exit_code` and a list
of structured diagnostics; otherwise diagnostics go to stderr as
`file:line:col: severity: message`. Incompatibilities are warnings and do not
fail the run unless --warnings-as-errors is given; malformed inputs are errors.
"""

from __future__ import annotations

import argparse
import json
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from confimport.compat.checker import CheckOptions, check_compatible
from confimport.compat.report import Phase
from confimport.config.environment import DefineError, Environment, parse_defines
from confimport.config.parser import DirectiveSyntaxError, parse_directives_file
from confimport.core.diagnostics import Diagnostic
from confimport.core.span import Span
from confimport.decls.json_v0 import load_library
from confimport.decls.model import DeclGraphError, Library
from confimport.driver import CachingLoader, check_directives, resolve_all

_PHASES = {"functions": Phase.FUNCTIONS_ONLY, "full": Phase.FULL}


def uri_to_filename(uri: str) -> str:
	"""`package:app/io.dart` -> `package_app_io.dart.json`."""
	return re.sub(r"[^A-Za-z0-9._-]+", "_", uri).strip("_") + ".json"


def _emit(args: argparse.Namespace, diagnostics: List[Diagnostic], exit_code: int, extra: Optional[Dict[str, Any]] = None) -> int:
	if args.json:
		payload: Dict[str, Any] = {"exit_code": exit_code, "diagnostics": [d.to_json() for d in diagnostics]}
		payload.update(extra or {})
		print(json.dumps(payload))
	else:
		for diag in diagnostics:
			print(diag.render(), file=sys.stderr)
	return exit_code


def _input_error(args: argparse.Namespace, err: Exception, phase: str, file: Optional[str] = None) -> int:
	span = getattr(err, "span", None) or Span(file=file)
	if span.file is None and file is not None:
		span = Span(file=file, line=span.line, column=span.column)
	return _emit(args, [Diagnostic(message=str(err), phase=phase, severity="error", span=span)], 1)


def _findings_exit(args: argparse.Namespace, diagnostics: List[Diagnostic]) -> int:
	if args.warnings_as_errors and diagnostics:
		return 1
	return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
	try:
		defines = parse_defines(args.defines or [])
	except DefineError as err:
		return _input_error(args, err, "define")
	try:
		directives = parse_directives_file(args.directives)
	except (DirectiveSyntaxError, OSError) as err:
		return _input_error(args, err, "directive", str(args.directives))
	env = Environment.build(args.libraries or [], namespace=args.namespace, defines=defines)
	uris = resolve_all(directives, env)
	if args.json:
		return _emit(args, [], 0, {"resolved": uris})
	for uri in uris:
		print(uri)
	return 0


def _cmd_check(args: argparse.Namespace) -> int:
	try:
		directives = parse_directives_file(args.directives)
	except (DirectiveSyntaxError, OSError) as err:
		return _input_error(args, err, "directive", str(args.directives))
	decls_dir: Path = args.decls

	def load(uri: str) -> Library:
		return load_library(decls_dir / uri_to_filename(uri))

	options = CheckOptions(ignore_private_supertypes=args.ignore_private_supertypes)
	try:
		checks = check_directives(directives, CachingLoader(load), _PHASES[args.phase], options, jobs=args.jobs)
	except (DeclGraphError, OSError) as err:
		return _input_error(args, err, "decls")
	diagnostics: List[Diagnostic] = []
	for check in checks:
		diagnostics.extend(check.to_diagnostics())
	extra = {"reports": [r.to_json() for c in checks for r in c.reports]}
	return _emit(args, diagnostics, _findings_exit(args, diagnostics), extra)


def _cmd_compare(args: argparse.Namespace) -> int:
	try:
		iface = load_library(args.interface)
		cand = load_library(args.candidate)
	except (DeclGraphError, OSError) as err:
		return _input_error(args, err, "decls")
	options = CheckOptions(ignore_private_supertypes=args.ignore_private_supertypes)
	report = check_compatible(iface.namespace(), cand.namespace(), _PHASES[args.phase], options)
	diagnostics = report.to_diagnostics()
	return _emit(args, diagnostics, _findings_exit(args, diagnostics), {"reports": [report.to_json()]})


def _add_common(p: argparse.ArgumentParser) -> None:
	p.add_argument("--json", action="store_true", help="Emit a JSON document instead of text diagnostics")


def _add_check_flags(p: argparse.ArgumentParser) -> None:
	p.add_argument("--phase", choices=sorted(_PHASES), default="full", help="Checking strictness (default: full)")
	p.add_argument(
		"--ignore-private-supertypes",
		action="store_true",
		help="Leave private superclass/mixin/interface references out of class comparisons",
	)
	p.add_argument("--warnings-as-errors", action="store_true", help="Exit with status 1 when any incompatibility is found")


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="confimport", description="Configurable import resolution and compatibility checking")
	sub = parser.add_subparsers(dest="command", required=True)

	p_resolve = sub.add_parser("resolve", help="Print the URI each directive resolves to")
	p_resolve.add_argument("directives", type=Path, help="File containing configured import/export directives")
	p_resolve.add_argument(
		"-D",
		"--define",
		dest="defines",
		action="append",
		metavar="KEY=VALUE",
		help="Environment define (repeatable; overrides host libraries)",
	)
	p_resolve.add_argument(
		"--library",
		dest="libraries",
		action="append",
		metavar="NAME",
		help="Available built-in library; sets <namespace>.library.NAME=true (repeatable)",
	)
	p_resolve.add_argument("--namespace", default="dart", help="Prefix for built-in library keys (default: dart)")
	_add_common(p_resolve)
	p_resolve.set_defaults(func=_cmd_resolve)

	p_check = sub.add_parser("check", help="Check every configured alternative against its default")
	p_check.add_argument("directives", type=Path, help="File containing configured import/export directives")
	p_check.add_argument("--decls", type=Path, required=True, help="Directory of declaration-graph JSON files")
	p_check.add_argument("--jobs", type=int, default=None, help="Check directives on this many worker threads")
	_add_check_flags(p_check)
	_add_common(p_check)
	p_check.set_defaults(func=_cmd_check)

	p_compare = sub.add_parser("compare", help="Compare two declaration graphs")
	p_compare.add_argument("interface", type=Path, help="Interface library JSON")
	p_compare.add_argument("candidate", type=Path, help="Candidate library JSON")
	_add_check_flags(p_compare)
	_add_common(p_compare)
	p_compare.set_defaults(func=_cmd_compare)
	return parser


def main(argv: list[str] | None = None) -> int:
	args = build_parser().parse_args(argv)
	return args.func(args)


__all__ = ["build_parser", "main", "uri_to_filename"]
