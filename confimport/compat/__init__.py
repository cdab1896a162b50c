# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural compatibility checking between an interface library and a
candidate library.
"""

from .checker import CheckOptions, CompatibilityChecker, check_compatible
from .comparator import COMPATIBLE, CompatResult, TypeComparator
from .report import CompatibilityReport, Finding, Phase, ReasonCode

__all__ = [
	"COMPATIBLE",
	"CheckOptions",
	"CompatResult",
	"CompatibilityChecker",
	"CompatibilityReport",
	"Finding",
	"Phase",
	"ReasonCode",
	"TypeComparator",
	"check_compatible",
]
