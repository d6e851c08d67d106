"""
Tests for rules file parsing.
"""
import pytest

from bonomen.models import CriticalProcessRule, RuleSet
from bonomen.rules import RulesFileError, load_rules, parse_rule_line, parse_rules


def test_parse_single_path():
    rule = parse_rule_line(r"svchost.exe;1;C:\Windows\System32\svchost.exe")
    assert rule.name == "svchost.exe"
    assert rule.threshold == 1
    assert rule.whitelist == frozenset({r"C:\Windows\System32\svchost.exe"})


def test_parse_multiple_paths():
    rule = parse_rule_line("systemd;2;/usr/lib/systemd/systemd;/lib/systemd/systemd")
    assert rule.whitelist == frozenset({"/usr/lib/systemd/systemd", "/lib/systemd/systemd"})


def test_empty_whitelist_field_allowed():
    """Three fields are required but the path itself may be empty."""
    rule = parse_rule_line("lsass;1;")
    assert rule.whitelist == frozenset()


def test_paths_are_kept_verbatim():
    rule = parse_rule_line("sshd;1; /usr/sbin/sshd ")
    assert " /usr/sbin/sshd " in rule.whitelist
    assert "/usr/sbin/sshd" not in rule.whitelist


def test_windows_line_endings_stripped():
    rule = parse_rule_line("cron;1;/usr/sbin/cron\r\n")
    assert rule.whitelist == frozenset({"/usr/sbin/cron"})


@pytest.mark.parametrize("line", [
    "svchost;1",
    "svchost",
    ";1;/usr/bin/svchost",
    "svchost;one;/usr/bin/svchost",
    "svchost;-1;/usr/bin/svchost",
    "svchost;1.5;/usr/bin/svchost",
    "svchost;99999999999;/usr/bin/svchost",
])
def test_malformed_lines_rejected(line):
    with pytest.raises(RulesFileError):
        parse_rule_line(line)


def test_error_reports_line_number_and_text():
    with pytest.raises(RulesFileError) as exc:
        parse_rules(["svchost;1;/usr/bin/svchost", "lsass;1"], "procs.txt")
    err = exc.value
    assert err.lineno == 2
    assert err.line == "lsass;1"
    assert "procs.txt:2" in str(err)


def test_comments_and_blank_lines_skipped():
    rules = parse_rules([
        "# critical processes",
        "",
        "   ",
        "svchost;1;/usr/bin/svchost",
        "  # indented comment",
        "lsass;2;/usr/bin/lsass",
    ])
    assert rules.names == ["svchost", "lsass"]


def test_load_rules_preserves_order(rules_file):
    path = rules_file("b;1;/b\na;1;/a\nc;0;/c\n")
    rules = load_rules(path)
    assert isinstance(rules, RuleSet)
    assert rules.names == ["b", "a", "c"]
    assert rules[2] == CriticalProcessRule("c", 0, frozenset({"/c"}))


def test_load_rules_two_field_line_is_fatal(rules_file):
    path = rules_file("svchost;1;/usr/bin/svchost\nlsass;1\n")
    with pytest.raises(RulesFileError):
        load_rules(path)


def test_load_rules_missing_file(tmp_path):
    with pytest.raises(RulesFileError) as exc:
        load_rules(tmp_path / "missing.txt")
    assert exc.value.lineno == 0


def test_rule_invariants():
    with pytest.raises(ValueError):
        CriticalProcessRule("", 1)
    with pytest.raises(ValueError):
        CriticalProcessRule("svchost", -1)
    rule = CriticalProcessRule("svchost", 1, ["/usr/bin/svchost"])
    assert isinstance(rule.whitelist, frozenset)


@pytest.mark.parametrize("text", ["", "\n\n", "# only comments\n  # here\n"])
def test_file_without_rules_rejected(rules_file, text):
    """An empty rule set would report every host as clean."""
    with pytest.raises(RulesFileError) as exc:
        load_rules(rules_file(text))
    assert "no rules defined" in str(exc.value)
