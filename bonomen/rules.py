"""
Critical process rules file.

One rule per line:

    <process-name>;<threshold>;<whitelisted-path-1>[;<whitelisted-path-2>...]

Blank lines and lines starting with '#' are ignored. Any other line that
does not parse aborts loading; a scan must never run against a partially
understood rule set.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import List

from .models import BonomenError, CriticalProcessRule, RuleSet

log = logging.getLogger(__name__)

FIELD_SEP = ";"
MIN_FIELDS = 3
COMMENT_PREFIX = "#"
MAX_THRESHOLD = 2**32 - 1


class RulesFileError(BonomenError):
    def __init__(self, path: str, lineno: int, line: str, reason: str):
        self.path = path
        self.lineno = lineno
        self.line = line
        self.reason = reason
        if lineno:
            msg = f"{path}:{lineno}: {reason}: {line!r}"
        else:
            msg = f"{path}: {reason}"
        super().__init__(msg)


def parse_rule_line(line: str, path: str = "<rules>", lineno: int = 0) -> CriticalProcessRule:
    raw = line.rstrip("\r\n")
    fields = raw.split(FIELD_SEP)
    if len(fields) < MIN_FIELDS:
        raise RulesFileError(path, lineno, raw,
                             f"expected at least {MIN_FIELDS} '{FIELD_SEP}'-separated fields, got {len(fields)}")

    name = fields[0].strip()
    if not name:
        raise RulesFileError(path, lineno, raw, "empty process name")

    threshold_s = fields[1].strip()
    if not (threshold_s.isascii() and threshold_s.isdigit()):
        raise RulesFileError(path, lineno, raw, f"threshold must be a non-negative integer, got {threshold_s!r}")
    if int(threshold_s) > MAX_THRESHOLD:
        raise RulesFileError(path, lineno, raw, f"threshold exceeds {MAX_THRESHOLD}")

    # paths are matched verbatim, so only drop empty fields (e.g. trailing ';')
    whitelist = frozenset(p for p in fields[2:] if p)
    return CriticalProcessRule(name=name, threshold=int(threshold_s), whitelist=whitelist)


def parse_rules(lines: List[str], path: str = "<rules>") -> RuleSet:
    rules: List[CriticalProcessRule] = []
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        rules.append(parse_rule_line(line, path, lineno))
    if not rules:
        # an empty rule set would make every host look clean
        raise RulesFileError(path, 0, "", "no rules defined")
    log.debug("parsed %d rules from %s", len(rules), path)
    return RuleSet(rules)


def load_rules(path: str | Path) -> RuleSet:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RulesFileError(str(p), 0, "", f"could not read rules file: {e}") from e
    return parse_rules(text.splitlines(), str(p))
