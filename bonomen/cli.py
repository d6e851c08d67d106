from __future__ import annotations
import argparse
import logging
import sys
from typing import Any, Dict

from . import __version__
from .config import load_config
from .detector import ImpersonationDetector
from .models import EnumerationError
from .proc import default_enumerator
from .report import BANNER, render_text, to_json, trace_lines
from .rules import RulesFileError, load_rules
from .utils import is_elevated, palette

EXIT_CLEAN = 0
EXIT_SUSPICIOUS = 1
EXIT_ERROR = 2


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def effective_config(args: argparse.Namespace) -> Dict[str, Any]:
    cfg = load_config(args.config)
    if args.file:
        cfg["rules_file"] = args.file
    if getattr(args, "verbose", False):
        cfg["verbose"] = True
    if getattr(args, "no_color", False):
        cfg["color"] = False
    if getattr(args, "json", False):
        cfg["output"] = "json"
    if getattr(args, "max_pids", None) is not None:
        cfg["max_pids"] = args.max_pids
    if getattr(args, "no_privilege_check", False):
        cfg["require_privileges"] = False
    return cfg


def cmd_scan(args: argparse.Namespace) -> int:
    cfg = effective_config(args)
    text_mode = cfg["output"] == "text"
    c = palette(bool(cfg["color"]) and text_mode and sys.stdout.isatty())
    setup_logging(cfg["verbose"])

    if text_mode:
        print(f"{c.BOLD}{BANNER}\n\tVersion: {__version__}\n{c.RESET}")

    if cfg["require_privileges"] and not is_elevated():
        print(f"{c.BOLD}{c.RED}BONOMEN needs root privileges to read process executable path!{c.RESET}",
              file=sys.stderr)
        return EXIT_ERROR

    rules_file = cfg["rules_file"]
    if text_mode:
        print(f"{c.GREEN}Standard processes file: {rules_file}{c.RESET}")
    try:
        rules = load_rules(rules_file)
    except RulesFileError as e:
        print(f"{c.RED}Invalid rules file: {e}{c.RESET}", file=sys.stderr)
        return EXIT_ERROR

    try:
        enumerator = default_enumerator(cfg["max_pids"])
    except ValueError as e:
        print(f"{c.RED}Invalid configuration: {e}{c.RESET}", file=sys.stderr)
        return EXIT_ERROR
    try:
        enumeration = enumerator.enumerate()
    except EnumerationError as e:
        print(f"{c.RED}Process enumeration failed, scan did not run: {e}{c.RESET}", file=sys.stderr)
        return EXIT_ERROR
    if not enumeration.snapshots:
        print(f"{c.RED}No processes could be enumerated, scan did not run.{c.RESET}", file=sys.stderr)
        return EXIT_ERROR

    detector = ImpersonationDetector(rules)
    if cfg["verbose"] and text_mode:
        for line in trace_lines(detector.trace(enumeration.snapshots), c):
            print(line)

    report = detector(enumeration.snapshots)
    if text_mode:
        if enumeration.failures:
            print(f"{c.GRAY}{len(enumeration.failures)} processes could not be fully inspected.{c.RESET}")
        print(render_text(report, c))
    else:
        print(to_json(report, enumeration))
    sys.stdout.flush()
    return EXIT_SUSPICIOUS if report.suspicious_count else EXIT_CLEAN


def cmd_rules(args: argparse.Namespace) -> int:
    cfg = effective_config(args)
    try:
        rules = load_rules(cfg["rules_file"])
    except RulesFileError as e:
        print(f"Invalid rules file: {e}", file=sys.stderr)
        return EXIT_ERROR
    header = f"{'NAME':<24} {'THR':>4}  WHITELIST"
    print(header + "\n" + "-" * len(header))
    for rule in rules:
        paths = ", ".join(sorted(rule.whitelist)) or "-"
        print(f"{rule.name:<24} {rule.threshold:>4}  {paths}")
    print(f"{len(rules)} rules OK")
    return EXIT_CLEAN


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="bonomen", description="Detect critical process impersonation")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_scan = sub.add_parser("scan", help="Scan running processes")
    p_scan.add_argument("-f", "--file", type=str, help="File containing critical processes name, threshold, whitelist")
    p_scan.add_argument("-v", "--verbose", action="store_true", help="Verbose mode")
    p_scan.add_argument("--config", type=str, help="Config YAML")
    p_scan.add_argument("--json", action="store_true", help="Machine-readable output")
    p_scan.add_argument("--no-color", action="store_true", help="Disable colored output")
    p_scan.add_argument("--max-pids", type=positive_int, help="Upper bound on enumerated PIDs (Windows)")
    p_scan.add_argument("--no-privilege-check", action="store_true",
                        help="Run without root/administrator (paths of other users' processes may be unavailable)")
    p_scan.set_defaults(func=cmd_scan)

    p_rules = sub.add_parser("rules", help="Validate and list a rules file")
    p_rules.add_argument("-f", "--file", type=str, help="Rules file")
    p_rules.add_argument("--config", type=str, help="Config YAML")
    p_rules.set_defaults(func=cmd_rules)

    return ap


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)
