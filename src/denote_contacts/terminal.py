"""Raw-mode keyboard input decoded into key names like ``enter`` or ``ctrl+s``."""

from __future__ import annotations

import codecs
import os
import select
import sys
import termios
import tty


_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[3~": "delete",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOH": "home",
    "\x1bOF": "end",
}

_CONTROL = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x11": "ctrl+q",
    "\x13": "ctrl+s",
    "\x15": "ctrl+u",
}


def decode_keys(data: str) -> list[str]:
    """Split a chunk of terminal input into key names.

    Printable characters map to themselves. A lone ESC is ``esc``; unknown
    CSI sequences are dropped.
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            for seq, name in _SEQUENCES.items():
                if data.startswith(seq, i):
                    keys.append(name)
                    i += len(seq)
                    break
            else:
                if data.startswith("\x1b[", i):
                    j = i + 2
                    while j < len(data) and not ("@" <= data[j] <= "~"):
                        j += 1
                    i = j + 1
                else:
                    keys.append("esc")
                    i += 1
            continue
        if ch in _CONTROL:
            keys.append(_CONTROL[ch])
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


class KeyReader:
    """Puts stdin into raw mode for the duration of a ``with`` block."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self._fd = self.stream.fileno()
        self._saved = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def __enter__(self) -> KeyReader:
        self._saved = termios.tcgetattr(self._fd)
        tty.setraw(self._fd)
        return self

    def __exit__(self, *exc) -> None:
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)

    def read_keys(self, timeout: float) -> list[str]:
        """Wait up to ``timeout`` seconds and return whatever keys arrived."""
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return []
        data = os.read(self._fd, 1024)
        return decode_keys(self._decoder.decode(data))
