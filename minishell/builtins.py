"""The builtin commands other than ``export``: echo, pwd, cd, env, unset, exit."""

from __future__ import annotations

import contextlib
import copy
import os
import re
import sys
from collections.abc import Iterator, Sequence
from typing import TextIO

from minishell.environment import ShellContext, is_valid_identifier
from minishell.export import builtin_export

_BUILTIN_NAMES = frozenset({"echo", "pwd", "env", "cd", "export", "unset", "exit"})
_EXIT_CODE = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]+)[ \t\n\v\f\r]*")
_LLONG_MAX = 2**63 - 1


class ShellExit(Exception):
    """Raised by ``exit`` when the shell should terminate with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(f"exit {status}")
        self.status = status


class _InvalidEnvArgument(ValueError):
    def __init__(self, arg: str) -> None:
        super().__init__(f"'{arg}': not a valid identifier")
        self.arg = arg


def is_builtin(argv: Sequence[str] | None) -> bool:
    """Return True if ``argv`` names a builtin command."""
    return bool(argv) and argv[0] in _BUILTIN_NAMES


def run_builtin(
    ctx: ShellContext,
    argv: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its status.

    ``exit`` raises ShellExit instead of returning when the shell should stop.
    An empty ``argv`` gives 0 and an unknown name gives 1.
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    if not argv:
        return 0
    name = argv[0]
    if name == "echo":
        return builtin_echo(argv, out)
    if name == "pwd":
        return builtin_pwd(out, err)
    if name == "env":
        return builtin_env(ctx, argv, out, err)
    if name == "cd":
        return builtin_cd(ctx, argv, out, err)
    if name == "export":
        return builtin_export(ctx, argv, out, err)
    if name == "unset":
        return builtin_unset(ctx, argv, err)
    if name == "exit":
        return builtin_exit(ctx, argv, err)
    return 1


def is_n_flag(arg: str | None) -> bool:
    """Return True for ``-n``, ``-nn`` and so on."""
    return bool(arg) and len(arg) > 1 and arg[0] == "-" and set(arg[1:]) == {"n"}


def builtin_echo(argv: Sequence[str], out: TextIO) -> int:
    """Write the arguments separated by spaces; leading ``-n`` flags drop the newline."""
    args = list(argv[1:])
    no_newline = False
    while args and is_n_flag(args[0]):
        no_newline = True
        args.pop(0)
    out.write(" ".join(args))
    if not no_newline:
        out.write("\n")
    return 0


def builtin_pwd(out: TextIO, err: TextIO) -> int:
    """Write the current directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        err.write(f"minishell: pwd: {exc.strerror}\n")
        return 1
    out.write(cwd + "\n")
    return 0


def _cd_target(ctx: ShellContext, argv: Sequence[str], err: TextIO) -> tuple[str | None, bool]:
    arg = argv[1] if len(argv) > 1 else None
    if arg is None or arg == "~":
        home = ctx.env.get("HOME")
        if home is None:
            err.write("minishell: cd: HOME not set\n")
        return home, False
    if arg == "-":
        oldpwd = ctx.env.get("OLDPWD")
        if oldpwd is None:
            err.write("minishell: cd: OLDPWD not set\n")
            return None, False
        return oldpwd, True
    if arg.startswith("~/"):
        home = ctx.env.get("HOME")
        if home is None:
            err.write("minishell: cd: HOME not set\n")
            return None, False
        return home + arg[1:], False
    return arg, False


def builtin_cd(ctx: ShellContext, argv: Sequence[str], out: TextIO, err: TextIO) -> int:
    """Change directory and update ``OLDPWD`` and ``PWD``."""
    try:
        oldpwd = os.getcwd()
    except OSError:
        oldpwd = ""
    path, print_path = _cd_target(ctx, argv, err)
    if path is None:
        return 1
    try:
        os.chdir(path)
    except OSError as exc:
        err.write(f"minishell: cd: {path}: {exc.strerror}\n")
        return 1
    if print_path:
        out.write(path + "\n")
    ctx.env.set("OLDPWD", oldpwd)
    with contextlib.suppress(OSError):
        ctx.env.set("PWD", os.getcwd())
    return 0


def parse_exit_code(text: str) -> int:
    """Parse the argument of ``exit``; raise ValueError if it is not a 64-bit integer."""
    match = _EXIT_CODE.fullmatch(text)
    if match is None:
        raise ValueError(f"{text}: numeric argument required")
    negative = match.group(1) == "-"
    value = int(match.group(2))
    if value > _LLONG_MAX + negative:
        raise ValueError(f"{text}: numeric argument required")
    return -value if negative else value


def builtin_exit(ctx: ShellContext, argv: Sequence[str], err: TextIO) -> int:
    """Request shell termination by raising ShellExit.

    With too many arguments nothing is raised and the status 1 is returned.
    """
    if not argv:
        return 0
    if len(argv) < 2:
        raise ShellExit(ctx.last_status)
    try:
        code = parse_exit_code(argv[1])
    except ValueError:
        err.write(f"minishell: exit: {argv[1]}: numeric argument required\n")
        ctx.last_status = 255
        raise ShellExit(255) from None
    if len(argv) > 2:
        err.write("minishell: exit: too many arguments\n")
        ctx.last_status = 1
        return 1
    ctx.last_status = code & 0xFF
    raise ShellExit(ctx.last_status)


def builtin_unset(ctx: ShellContext, argv: Sequence[str], err: TextIO) -> int:
    """Remove the named variables; invalid names are ignored, options give status 2."""
    status = 0
    for arg in argv[1:]:
        if arg.startswith("-") and len(arg) > 1:
            err.write(f"minishell: unset: -{arg[1]}: invalid option\n")
            status = 2
        elif is_valid_identifier(arg):
            ctx.env.unset(arg)
    return status


def parse_env_args(argv: Sequence[str]) -> tuple[list[tuple[str, str]], int | None]:
    """Split ``env`` arguments into overrides and the index of the command.

    Leading ``NAME=VALUE`` arguments become overrides; the first argument
    without ``=`` starts the command. The index is None when there is no
    command. An invalid name raises ValueError.
    """
    overrides: list[tuple[str, str]] = []
    for idx, arg in enumerate(argv[1:], start=1):
        key, eq, value = arg.partition("=")
        if not eq:
            return overrides, idx
        if not is_valid_identifier(key):
            raise _InvalidEnvArgument(arg)
        overrides.append((key, value))
    return overrides, None


def _env_listing(ctx: ShellContext, overrides: list[tuple[str, str]]) -> Iterator[str]:
    override_map: dict[str, str] = {}
    for key, value in overrides:
        override_map.setdefault(key, value)
    for key, value in ctx.env.entries():
        if key in override_map:
            yield f"{key}={override_map[key]}\n"
        elif value is not None:
            yield f"{key}={value}\n"
    for key, value in overrides:
        if key not in ctx.env:
            yield f"{key}={value}\n"


@contextlib.contextmanager
def _preserved_cwd() -> Iterator[None]:
    try:
        saved = os.getcwd()
    except OSError:
        saved = None
    try:
        yield
    finally:
        if saved is not None:
            with contextlib.suppress(OSError):
                os.chdir(saved)


def _run_with_overrides(
    ctx: ShellContext,
    overrides: list[tuple[str, str]],
    argv: Sequence[str],
    out: TextIO,
    err: TextIO,
) -> int:
    child = copy.deepcopy(ctx)
    for key, value in overrides:
        child.env.set(key, value)
    with _preserved_cwd():
        try:
            run_builtin(child, argv, out, err)
        except ShellExit:
            pass
    return child.last_status


def builtin_env(ctx: ShellContext, argv: Sequence[str], out: TextIO, err: TextIO) -> int:
    """List the variables, or run a builtin with extra variables set.

    The command runs on a copy of the shell state; its exit status is the
    copy's last status once the command has finished.
    """
    try:
        overrides, cmd_idx = parse_env_args(argv)
    except _InvalidEnvArgument as exc:
        err.write(f"minishell: env: '{exc.arg}': not a valid identifier\n")
        return 1
    if cmd_idx is None:
        out.write("".join(_env_listing(ctx, overrides)))
        return 0
    status = _run_with_overrides(ctx, overrides, argv[cmd_idx:], out, err)
    ctx.last_status = status
    return status