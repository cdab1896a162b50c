# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
confimport: configurable import/export resolution and interface compatibility.

Subpackages:
  core:    spans and diagnostics
  config:  build environment, configured directives, resolver, directive parser
  decls:   declaration model and its JSON interchange format
  compat:  type comparator, compatibility checker, reports

`driver` ties resolution and checking to whole directives; `cli` exposes both.
"""

from confimport.compat import CheckOptions, CompatibilityReport, Phase, ReasonCode, check_compatible
from confimport.config import ConfiguredDirective, Environment, Test, resolve

__all__ = [
	"CheckOptions",
	"CompatibilityReport",
	"ConfiguredDirective",
	"Environment",
	"Phase",
	"ReasonCode",
	"Test",
	"check_compatible",
	"resolve",
]
