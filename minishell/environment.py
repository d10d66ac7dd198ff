"""Shell variables and the per-session shell state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field


def _is_ascii_alpha(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_ascii_alnum(c: str) -> bool:
    return c.isascii() and c.isalnum()


def is_valid_identifier(name: str | None) -> bool:
    """Return True if ``name`` is a valid shell variable name."""
    if not name:
        return False
    first, rest = name[0], name[1:]
    if first != "_" and not _is_ascii_alpha(first):
        return False
    return all(c == "_" or _is_ascii_alnum(c) for c in rest)


class Environment:
    """Ordered shell variables; a variable may exist without a value.

    Variables keep the order in which they were first defined. Exported
    entries (those with a value) are rendered as ``KEY=VALUE`` strings by
    :meth:`build_envp`, which caches its result until the next change.
    """

    def __init__(self, initial: Mapping[str, str | None] | Iterable[tuple[str, str | None]] = ()) -> None:
        self._vars: dict[str, str | None] = {}
        self._envp: list[str] = []
        self.dirty = True
        items = initial.items() if isinstance(initial, Mapping) else initial
        for key, value in items:
            self.set(key, value)

    def get(self, key: str | None) -> str | None:
        """Return the value of ``key``, or None if unset or without a value."""
        if key is None:
            return None
        return self._vars.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Define ``key``.

        A value of None declares the variable without a value; an existing
        value is then left untouched.
        """
        if value is not None or key not in self._vars:
            self._vars[key] = value
        self.dirty = True

    def unset(self, key: str) -> None:
        """Remove ``key``; removing an unknown name is not an error."""
        if self._vars.pop(key, _MISSING) is not _MISSING:
            self.dirty = True

    def build_envp(self) -> list[str]:
        """Return ``KEY=VALUE`` strings for every variable that has a value."""
        if self.dirty:
            self._envp = [f"{key}={value}" for key, value in self._vars.items() if value is not None]
            self.dirty = False
        return list(self._envp)

    def entries(self) -> Iterator[tuple[str, str | None]]:
        """Yield ``(key, value)`` pairs in definition order, value None if unset."""
        yield from list(self._vars.items())

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __len__(self) -> int:
        return len(self._vars)


_MISSING = object()


@dataclass
class ShellContext:
    """State shared by all parts of a running shell."""

    env: Environment = field(default_factory=Environment)
    last_status: int = 0
    interactive: bool = False
    exit_requested: bool = False