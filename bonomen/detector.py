from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence

from .distance import damerau_levenshtein
from .models import CriticalProcessRule, DetectionReport, Finding, ProcessSnapshot

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Comparison:
    snapshot: ProcessSnapshot
    rule: CriticalProcessRule
    distance: int

    @property
    def suspicious(self) -> bool:
        # 0 is the legitimate process itself; above threshold is unrelated
        if not 0 < self.distance <= self.rule.threshold:
            return False
        return not self.rule.is_whitelisted(self.snapshot.exe_path)

    def to_finding(self) -> Finding:
        return Finding(
            observed_name=self.snapshot.name,
            rule_name=self.rule.name,
            distance=self.distance,
            exe_path=self.snapshot.exe_path,
        )


def compare(rules: Iterable[CriticalProcessRule], snapshots: Iterable[ProcessSnapshot]) -> Iterator[Comparison]:
    """Yield every (snapshot, rule) pair with its edit distance, snapshot-major."""
    rules = list(rules)
    for snap in snapshots:
        for rule in rules:
            yield Comparison(snap, rule, damerau_levenshtein(snap.name, rule.name))


def detect(rules: Iterable[CriticalProcessRule], snapshots: Iterable[ProcessSnapshot]) -> DetectionReport:
    findings: List[Finding] = []
    for cmp in compare(rules, snapshots):
        if cmp.suspicious:
            log.debug("suspicious: %s <-> %s : distance %d (%s)",
                      cmp.snapshot.name, cmp.rule.name, cmp.distance, cmp.snapshot.exe_path)
            findings.append(cmp.to_finding())
    return DetectionReport(tuple(findings))


class ImpersonationDetector:
    """Stateless wrapper around detect(); safe to share between scans."""

    def __init__(self, rules: Sequence[CriticalProcessRule]):
        self.rules = rules

    def __call__(self, snapshots: Iterable[ProcessSnapshot]) -> DetectionReport:
        return detect(self.rules, snapshots)

    def trace(self, snapshots: Iterable[ProcessSnapshot]) -> Iterator[Comparison]:
        return compare(self.rules, snapshots)
