"""
Minimal ctypes binding of the Win32 process and module APIs
(kernel32 + psapi) used by WindowsEnumerator.

Only constructed on Windows; importing this module elsewhere is harmless.
"""
from __future__ import annotations
import ctypes
from ctypes import wintypes
from typing import List

PROCESS_QUERY_INFORMATION = 0x0400
PROCESS_VM_READ = 0x0010
LIST_MODULES_ALL = 0x03

# least privilege: no write or terminate rights on inspected processes
PROCESS_ACCESS = PROCESS_QUERY_INFORMATION | PROCESS_VM_READ


def wide_to_str(chars: str) -> str:
    """Text of a UTF-16 buffer up to its first NUL terminator."""
    return chars.split("\x00", 1)[0]


class Win32ProcessApi:
    def __init__(self) -> None:
        self.kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]
        self.psapi = ctypes.WinDLL("psapi", use_last_error=True)  # type: ignore[attr-defined]

        k32, psapi = self.kernel32, self.psapi
        k32.OpenProcess.restype = wintypes.HANDLE
        k32.OpenProcess.argtypes = [wintypes.DWORD, wintypes.BOOL, wintypes.DWORD]
        k32.CloseHandle.restype = wintypes.BOOL
        k32.CloseHandle.argtypes = [wintypes.HANDLE]

        psapi.EnumProcesses.restype = wintypes.BOOL
        psapi.EnumProcesses.argtypes = [ctypes.POINTER(wintypes.DWORD), wintypes.DWORD,
                                        ctypes.POINTER(wintypes.DWORD)]
        psapi.EnumProcessModulesEx.restype = wintypes.BOOL
        psapi.EnumProcessModulesEx.argtypes = [wintypes.HANDLE, ctypes.POINTER(wintypes.HMODULE),
                                               wintypes.DWORD, ctypes.POINTER(wintypes.DWORD),
                                               wintypes.DWORD]
        psapi.GetModuleBaseNameW.restype = wintypes.DWORD
        psapi.GetModuleBaseNameW.argtypes = [wintypes.HANDLE, wintypes.HMODULE,
                                             wintypes.LPWSTR, wintypes.DWORD]
        psapi.GetModuleFileNameExW.restype = wintypes.DWORD
        psapi.GetModuleFileNameExW.argtypes = [wintypes.HANDLE, wintypes.HMODULE,
                                               wintypes.LPWSTR, wintypes.DWORD]

    @staticmethod
    def _last_error(func: str) -> OSError:
        err = ctypes.get_last_error()  # type: ignore[attr-defined]
        return OSError(err, f"{func} failed (error {err})")

    def enum_process_ids(self, capacity: int) -> List[int]:
        pids = (wintypes.DWORD * capacity)()
        written = wintypes.DWORD()
        if not self.psapi.EnumProcesses(pids, ctypes.sizeof(pids), ctypes.byref(written)):
            raise self._last_error("EnumProcesses")
        count = written.value // ctypes.sizeof(wintypes.DWORD)
        return list(pids[:count])

    def open_process(self, pid: int) -> int:
        handle = self.kernel32.OpenProcess(PROCESS_ACCESS, False, pid)
        if not handle:
            raise self._last_error("OpenProcess")
        return handle

    def close_handle(self, handle: int) -> None:
        self.kernel32.CloseHandle(handle)

    def main_module(self, handle: int) -> int:
        # the first module listed is the process image itself
        hmod = wintypes.HMODULE()
        needed = wintypes.DWORD()
        if not self.psapi.EnumProcessModulesEx(handle, ctypes.byref(hmod), ctypes.sizeof(hmod),
                                               ctypes.byref(needed), LIST_MODULES_ALL):
            raise self._last_error("EnumProcessModulesEx")
        return hmod.value

    def module_base_name(self, handle: int, module: int, capacity: int) -> str:
        buf = ctypes.create_unicode_buffer(capacity)
        copied = self.psapi.GetModuleBaseNameW(handle, module, buf, capacity)
        if copied == 0:
            raise self._last_error("GetModuleBaseNameW")
        return wide_to_str(buf[:copied])

    def module_file_name(self, handle: int, module: int, capacity: int) -> str:
        buf = ctypes.create_unicode_buffer(capacity)
        copied = self.psapi.GetModuleFileNameExW(handle, module, buf, capacity)
        if copied == 0:
            raise self._last_error("GetModuleFileNameExW")
        return wide_to_str(buf[:copied])
