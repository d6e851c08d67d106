from __future__ import annotations
import json
from typing import Any, Dict, Iterable, List

from .detector import Comparison
from .models import DetectionReport, EnumerationResult, Finding

BANNER = r"""
      =======  ======= ==    == ======= ========== ====== ==    ==
      ||   //  ||   || ||\\  || ||   || ||\\  //|| ||     ||\\  ||
      ||====   ||   || || \\ || ||   || ||  ||  || ||==== || \\ ||
      ||   \\  ||   || ||  \\|| ||   || ||  ||  || ||     ||  \\||
      =======  ======= ==    == ======= ==  ==  == ====== ==    =="""


def finding_row(f: Finding, c) -> str:
    return f"{c.RED}Suspicious: {f.observed_name} <-> {f.rule_name} : distance {f.distance}{c.RESET} {c.GRAY}({f.exe_path}){c.RESET}"


def trace_lines(comparisons: Iterable[Comparison], c) -> List[str]:
    """Per-process/per-rule distance trace, grouped by observed process."""
    out: List[str] = []
    current = None
    for cmp in comparisons:
        if cmp.snapshot is not current:
            current = cmp.snapshot
            out.append(f"{c.BRIGHT_GREEN}> Checking system process: {current.name}{c.RESET}")
            out.append(f"{c.BRIGHT_GREEN}> system process executable absolute path: {current.exe_path}{c.RESET}")
        out.append(f"{c.CYAN}\tagainst critical process: {cmp.rule.name}, distance: {cmp.distance}{c.RESET}")
    return out


def summary_line(report: DetectionReport, c) -> str:
    n = report.suspicious_count
    color = c.RED if n > 0 else c.GREEN
    return f"{color}Found {n} suspicious processes.\nDone!{c.RESET}"


def render_text(report: DetectionReport, c) -> str:
    lines = [finding_row(f, c) for f in report.findings]
    lines.append(summary_line(report, c))
    return "\n".join(lines)


def to_json(report: DetectionReport, enumeration: EnumerationResult | None = None) -> str:
    data: Dict[str, Any] = report.to_dict()
    if enumeration is not None:
        data["processes_scanned"] = len(enumeration.snapshots)
        data["failures"] = [{"pid": f.pid, "reason": f.reason} for f in enumeration.failures]
    return json.dumps(data, indent=2)
