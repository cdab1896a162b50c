# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Environment assembly, configured directives and URI resolution.
"""

from .directive import Configuration, ConfiguredDirective, Test, resolve
from .environment import DefineError, Environment, normalize_dotted_name, parse_define, parse_defines

__all__ = [
	"Configuration",
	"ConfiguredDirective",
	"DefineError",
	"Environment",
	"Test",
	"normalize_dotted_name",
	"parse_define",
	"parse_defines",
	"resolve",
]
