"""Commands produced by the parser and the store of declared commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterator, Sequence

from tnacalc.token import Token, TokKind


@dataclass
class Command:
    """An instruction to the driver: a command token and its arguments."""

    cmd: Token
    args: list[Token] = field(default_factory=list)

    def __getitem__(self, idx: int) -> Token:
        return self.args[idx]

    def __iter__(self) -> Iterator[Token]:
        return iter(self.args)

    @property
    def pos(self) -> Token:
        """The token the command was introduced by."""
        return self.cmd

    @property
    def name(self) -> str:
        return self.cmd.value

    def arg_count(self) -> int:
        return len(self.args)


class Verification(Enum):
    """Outcome of checking a command against its declaration."""

    CORRECT = auto()
    WRONG_NAME = auto()
    TOO_FEW = auto()
    TOO_MANY = auto()
    WRONG_KIND = auto()


@dataclass
class VerResult:
    """Result of a command verification; true when the command is correct."""

    expected_args: int = 0
    diff: int = 0
    result: Verification = Verification.CORRECT

    def __bool__(self) -> bool:
        return self.result == Verification.CORRECT


CommandHandler = Callable[[Command], None]


class Descriptor:
    """Declaration of a command: parameter kinds, required count and handler."""

    def __init__(
        self,
        handler: CommandHandler,
        params: Sequence[TokKind] = (),
        required: int | None = None,
    ) -> None:
        self.params: tuple[TokKind, ...] = tuple(params)
        self.required = len(self.params) if required is None else required
        self._handler = handler

    def __call__(self, cmd: Command) -> None:
        self._handler(cmd)

    def __len__(self) -> int:
        return len(self.params)

    def __getitem__(self, idx: int) -> TokKind:
        return self.params[idx]


class CommandStore:
    """Named command declarations; later declarations replace earlier ones."""

    def __init__(self) -> None:
        self._cmds: dict[str, Descriptor] = {}

    def declare(
        self,
        name: str,
        handler: CommandHandler,
        params: Sequence[TokKind] = (),
        required: int | None = None,
    ) -> Descriptor:
        descr = Descriptor(handler, params, required)
        self._cmds[name] = descr
        return descr

    def find(self, name: str) -> Descriptor | None:
        return self._cmds.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._cmds