from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple


class BonomenError(Exception):
    """Base class for fatal scanner errors."""


class EnumerationError(BonomenError):
    """The OS refused to list processes at all; the scan did not run."""


@dataclass(frozen=True)
class CriticalProcessRule:
    name: str
    threshold: int
    whitelist: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("rule name must not be empty")
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int):
            raise ValueError(f"threshold must be an integer, got {self.threshold!r}")
        if self.threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {self.threshold}")
        if not isinstance(self.whitelist, frozenset):
            object.__setattr__(self, "whitelist", frozenset(self.whitelist))

    def is_whitelisted(self, exe_path: str) -> bool:
        # exact string membership, no normalization
        return exe_path in self.whitelist


class RuleSet:
    """Ordered, read-only collection of critical process rules."""

    def __init__(self, rules: Iterable[CriticalProcessRule] = ()):
        self._rules: Tuple[CriticalProcessRule, ...] = tuple(rules)

    def __iter__(self) -> Iterator[CriticalProcessRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> CriticalProcessRule:
        return self._rules[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f"RuleSet({list(self._rules)!r})"

    @property
    def names(self) -> List[str]:
        return [r.name for r in self._rules]


@dataclass(frozen=True)
class ProcessSnapshot:
    name: str
    exe_path: str
    pid: Optional[int] = None


@dataclass(frozen=True)
class ProcessFailure:
    pid: int
    reason: str


@dataclass(frozen=True)
class EnumerationResult:
    snapshots: Tuple[ProcessSnapshot, ...] = ()
    failures: Tuple[ProcessFailure, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class Finding:
    observed_name: str
    rule_name: str
    distance: int
    exe_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "observed_name": self.observed_name,
            "rule_name": self.rule_name,
            "distance": self.distance,
            "exe_path": self.exe_path,
        }


@dataclass(frozen=True)
class DetectionReport:
    findings: Tuple[Finding, ...] = ()

    @property
    def suspicious_count(self) -> int:
        return len(self.findings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "findings": [f.to_dict() for f in self.findings],
            "suspicious_count": self.suspicious_count,
        }
