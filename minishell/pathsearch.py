"""Locate the program a command names."""

from __future__ import annotations

import errno
import os
import stat

from minishell.environment import ShellContext


class PathError(OSError):
    """The command cannot be run; ``errno`` tells why."""


def _fail(code: int, name: str) -> PathError:
    return PathError(code, os.strerror(code), name)


def split_path(value: str) -> list[str]:
    """Split a ``PATH`` value on colons, dropping empty entries."""
    return [part for part in value.split(":") if part]


def _direct_path(name: str) -> str:
    try:
        st = os.stat(name)
    except OSError as exc:
        raise _fail(exc.errno or errno.ENOENT, name) from None
    if stat.S_ISDIR(st.st_mode):
        raise _fail(errno.EISDIR, name)
    if not os.access(name, os.X_OK):
        raise _fail(errno.EACCES, name)
    return name


def find_in_path(name: str, path_value: str | None) -> str:
    """Return the first executable ``dir/name`` along ``path_value``.

    Raises PathError with EACCES if only non-executable matches exist, and
    with ENOENT if there is no match or no path at all.
    """
    if path_value is None:
        raise _fail(errno.ENOENT, name)
    denied = False
    for directory in split_path(path_value):
        full = f"{directory}/{name}"
        if os.access(full, os.F_OK):
            if os.access(full, os.X_OK):
                return full
            denied = True
    raise _fail(errno.EACCES if denied else errno.ENOENT, name)


def resolve_path(ctx: ShellContext, name: str) -> str:
    """Return the path to run for ``name``; raise PathError if there is none.

    A name holding a slash is used as it is; any other name is searched
    along the exported ``PATH``.
    """
    if "/" in name:
        return _direct_path(name)
    return find_in_path(name, ctx.env.get("PATH"))