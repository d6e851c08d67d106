"""
Process enumeration.

Both enumerators normalize the host's process table into ProcessSnapshot
entries. A failure on one process never aborts the scan: the Unix
enumerator keeps the process with a placeholder path, the Windows
enumerator skips it. Only a failure of the top-level listing call is
fatal (EnumerationError).
"""
from __future__ import annotations
import abc
import logging
import os
from typing import Callable, List, Optional, Tuple

import psutil

from .models import EnumerationError, EnumerationResult, ProcessSnapshot, ProcessFailure

log = logging.getLogger(__name__)

DEFAULT_MAX_PIDS = 65536
INITIAL_PID_CAPACITY = 1024
INITIAL_NAME_CAPACITY = 64
INITIAL_PATH_CAPACITY = 260
MAX_TEXT_CAPACITY = 32767  # longest NT path, in UTF-16 units


def placeholder_path(reason: str) -> str:
    # never absolute, so never equal to a whitelist entry
    return f"<exe unavailable: {reason}>"


class ProcessEnumerator(abc.ABC):
    @abc.abstractmethod
    def enumerate(self) -> EnumerationResult:
        ...


class UnixEnumerator(ProcessEnumerator):
    """Reads the process table through psutil, once per call."""

    def __init__(self, include_self: bool = False):
        self.include_self = include_self

    def enumerate(self) -> EnumerationResult:
        snapshots: List[ProcessSnapshot] = []
        failures: List[ProcessFailure] = []
        self_pid = os.getpid()
        try:
            procs = list(psutil.process_iter(["name"]))
        except (psutil.Error, OSError) as e:
            raise EnumerationError(f"could not read process table: {e}") from e

        for proc in procs:
            if proc.pid == self_pid and not self.include_self:
                continue
            name = (proc.info or {}).get("name") or ""
            exe, reason = self._exe(proc)
            if reason:
                log.warning("PID %d (%s): %s", proc.pid, name or "?", reason)
                failures.append(ProcessFailure(proc.pid, reason))
            snapshots.append(ProcessSnapshot(name=name, exe_path=exe, pid=proc.pid))
        return EnumerationResult(tuple(snapshots), tuple(failures))

    @staticmethod
    def _exe(proc: psutil.Process) -> Tuple[str, Optional[str]]:
        try:
            exe = proc.exe()
        except psutil.ZombieProcess:
            reason = "zombie process"
        except psutil.NoSuchProcess:
            reason = "process exited during scan"
        except psutil.AccessDenied:
            reason = "access denied"
        except (psutil.Error, OSError) as e:
            reason = str(e) or type(e).__name__
        else:
            if exe:
                return exe, None
            reason = "no executable path"
        return placeholder_path(reason), reason


class WindowsEnumerator(ProcessEnumerator):
    """
    Lists PIDs with EnumProcesses, then opens each process with
    query-info + read-memory rights to resolve its main module's base
    name and full path.

    The PID buffer doubles until the OS no longer fills it, up to
    `max_pids`; beyond that only the first `max_pids` processes are seen.
    """

    def __init__(self, max_pids: int = DEFAULT_MAX_PIDS, api=None):
        if max_pids < 1:
            raise ValueError("max_pids must be positive")
        self.max_pids = max_pids
        if api is None:
            from .winapi import Win32ProcessApi
            api = Win32ProcessApi()
        self.api = api

    def process_ids(self) -> List[int]:
        capacity = min(INITIAL_PID_CAPACITY, self.max_pids)
        while True:
            try:
                pids = self.api.enum_process_ids(capacity)
            except OSError as e:
                raise EnumerationError(f"EnumProcesses failed: {e}") from e
            if len(pids) < capacity:
                return pids
            if capacity >= self.max_pids:
                log.warning("process list truncated to %d PIDs (max_pids)", capacity)
                return pids[:capacity]
            capacity = min(capacity * 2, self.max_pids)

    @staticmethod
    def _read_text(read: Callable[[int], str], initial: int) -> str:
        capacity = initial
        while True:
            text = read(capacity)
            # a full buffer may mean a truncated string
            if len(text) < capacity - 1 or capacity >= MAX_TEXT_CAPACITY:
                return text
            capacity = min(capacity * 2, MAX_TEXT_CAPACITY)

    def snapshot(self, pid: int) -> ProcessSnapshot:
        handle = self.api.open_process(pid)
        try:
            module = self.api.main_module(handle)
            name = self._read_text(lambda n: self.api.module_base_name(handle, module, n),
                                   INITIAL_NAME_CAPACITY)
            path = self._read_text(lambda n: self.api.module_file_name(handle, module, n),
                                   INITIAL_PATH_CAPACITY)
        finally:
            self.api.close_handle(handle)
        return ProcessSnapshot(name=name, exe_path=path, pid=pid)

    def enumerate(self) -> EnumerationResult:
        snapshots: List[ProcessSnapshot] = []
        failures: List[ProcessFailure] = []
        for pid in self.process_ids():
            try:
                snap = self.snapshot(pid)
            except OSError as e:
                log.warning("PID %d: %s", pid, e)
                failures.append(ProcessFailure(pid, str(e)))
                continue
            if not snap.name or not snap.exe_path:
                reason = "empty module name or path"
                log.warning("PID %d: %s", pid, reason)
                failures.append(ProcessFailure(pid, reason))
                continue
            snapshots.append(snap)
        return EnumerationResult(tuple(snapshots), tuple(failures))


if os.name == "nt":
    DefaultEnumerator = WindowsEnumerator
else:
    DefaultEnumerator = UnixEnumerator


def default_enumerator(max_pids: int = DEFAULT_MAX_PIDS) -> ProcessEnumerator:
    if DefaultEnumerator is WindowsEnumerator:
        return WindowsEnumerator(max_pids=max_pids)
    return UnixEnumerator()
