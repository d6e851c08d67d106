"""
BONOMEN: critical process impersonation detector.

Flags running processes whose name is within a small edit distance of a
critical system process but whose executable is not in that process's
whitelisted locations.

CLI entry: bonomen (see pyproject.toml)
"""

__version__ = "1.0.0"

from .models import (
    BonomenError,
    CriticalProcessRule,
    DetectionReport,
    EnumerationError,
    EnumerationResult,
    Finding,
    ProcessFailure,
    ProcessSnapshot,
    RuleSet,
)
from .distance import damerau_levenshtein
from .detector import ImpersonationDetector, compare, detect
from .proc import DefaultEnumerator, ProcessEnumerator, UnixEnumerator, WindowsEnumerator
from .rules import RulesFileError, load_rules, parse_rules

__all__ = [
    "BonomenError",
    "CriticalProcessRule",
    "DetectionReport",
    "EnumerationError",
    "EnumerationResult",
    "Finding",
    "ProcessFailure",
    "ProcessSnapshot",
    "RuleSet",
    "damerau_levenshtein",
    "ImpersonationDetector",
    "compare",
    "detect",
    "DefaultEnumerator",
    "ProcessEnumerator",
    "UnixEnumerator",
    "WindowsEnumerator",
    "RulesFileError",
    "load_rules",
    "parse_rules",
]
