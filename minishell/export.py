"""The ``export`` builtin."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TextIO

from minishell.environment import Environment, ShellContext, is_valid_identifier


def format_export(env: Environment) -> str:
    """Return the ``declare -x`` listing of ``env``, sorted by name."""
    lines = []
    for key, value in sorted(env.entries(), key=lambda item: item[0]):
        if value is None:
            lines.append(f"declare -x {key}\n")
        else:
            lines.append(f'declare -x {key}="{value}"\n')
    return "".join(lines)


def _invalid_identifier(arg: str, err: TextIO) -> int:
    err.write(f"minishell: export: '{arg}': not a valid identifier\n")
    return 1


def _export_one(ctx: ShellContext, arg: str, err: TextIO) -> int:
    name, eq, value = arg.partition("=")
    if not eq:
        if not is_valid_identifier(arg):
            return _invalid_identifier(arg, err)
        ctx.env.set(arg, None)
        return 0
    append = name.endswith("+")
    key = name[:-1] if append else name
    if not is_valid_identifier(key):
        return _invalid_identifier(arg, err)
    old = ctx.env.get(key) if append else None
    ctx.env.set(key, old + value if old is not None else value)
    return 0


def builtin_export(ctx: ShellContext, argv: Sequence[str], out: TextIO, err: TextIO) -> int:
    """Run ``export``; return its exit status.

    Without arguments the variables are listed. Each ``NAME``, ``NAME=VALUE``
    or ``NAME+=VALUE`` argument is applied in turn; an option stops with
    status 2, an invalid name gives status 1 but does not stop the rest.
    """
    args = list(argv[1:])
    if not args:
        out.write(format_export(ctx.env))
        return 0
    status = 0
    for arg in args:
        if arg.startswith("-") and len(arg) > 1:
            err.write(f"minishell: export: -{arg[1]}: invalid option\n")
            return 2
        result = _export_one(ctx, arg, err)
        if result:
            status = result
    return status