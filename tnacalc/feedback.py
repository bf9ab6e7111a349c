"""Callback hub through which components report errors and requests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable


class Feedback:
    """Holds user handlers for errors, commands and file loading.

    Invoking an event with no handler set does nothing; loading a file
    without a loader reports failure.
    """

    def __init__(self) -> None:
        self._generic_error: Callable[[str], None] | None = None
        self._parse_error: Callable[[Any], None] | None = None
        self._compile_error: Callable[[Any, str], None] | None = None
        self._compile_warning: Callable[[Any, str], None] | None = None
        self._compile_note: Callable[[Any, str], None] | None = None
        self._command: Callable[[Any], None] | None = None
        self._file_loader: Callable[[Path], bool] | None = None

    # Handler setup

    def on_error(self, handler: Callable[[str], None]) -> None:
        self._generic_error = handler

    def on_parse_error(self, handler: Callable[[Any], None]) -> None:
        self._parse_error = handler

    def on_compile_error(self, handler: Callable[[Any, str], None]) -> None:
        self._compile_error = handler

    def on_compile_warning(self, handler: Callable[[Any, str], None]) -> None:
        self._compile_warning = handler

    def on_compile_note(self, handler: Callable[[Any, str], None]) -> None:
        self._compile_note = handler

    def on_command(self, handler: Callable[[Any], None]) -> None:
        self._command = handler

    def on_load_request(self, handler: Callable[[Path], bool]) -> None:
        self._file_loader = handler

    # Handler invocations

    def error(self, msg: str) -> None:
        if self._generic_error:
            self._generic_error(msg)

    def parse_error(self, err: Any) -> None:
        if self._parse_error:
            self._parse_error(err)

    def compile_error(self, loc: Any, msg: str) -> None:
        if self._compile_error:
            self._compile_error(loc, msg)

    def compile_warning(self, loc: Any, msg: str) -> None:
        if self._compile_warning:
            self._compile_warning(loc, msg)

    def compile_note(self, loc: Any, msg: str) -> None:
        if self._compile_note:
            self._compile_note(loc, msg)

    def command(self, cmd: Any) -> None:
        if self._command:
            self._command(cmd)

    def load_file(self, path: str | Path) -> bool:
        if not self._file_loader:
            return False
        return bool(self._file_loader(Path(path)))