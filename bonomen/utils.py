import ctypes
import os


class C:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    CYAN = '\033[36m'
    BRIGHT_GREEN = '\033[92m'
    GRAY = '\033[90m'


class NoColor:
    RESET = BOLD = RED = GREEN = CYAN = BRIGHT_GREEN = GRAY = ''


def palette(enabled: bool):
    return C if enabled else NoColor


def is_elevated() -> bool:
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0
