"""File redirections and here-documents of a command."""

from __future__ import annotations

import os
import sys
import tempfile
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import BinaryIO, Optional

from minishell.environment import ShellContext
from minishell.expander import expand_string
from minishell.parser import Command, Heredoc, Redirect, RedirType

ReadLine = Callable[[str], Optional[str]]

HEREDOC_PROMPT = "> "
_EOF_WARNING = "minishell: warning: here-document at EOF\n"

_OPEN_FLAGS = {
    RedirType.IN: os.O_RDONLY,
    RedirType.OUT_TRUNC: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    RedirType.OUT_APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}
_FILE_MODES = {
    RedirType.IN: "rb",
    RedirType.OUT_TRUNC: "wb",
    RedirType.OUT_APPEND: "ab",
}


class RedirectionError(Exception):
    """A redirection target could not be opened."""

    status = 1

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"{target}: {reason}")
        self.target = target
        self.reason = reason


class HeredocInterrupted(Exception):
    """Reading a here-document was interrupted by the user."""

    status = 130


@dataclass
class Redirections:
    """The streams a command reads from and writes to; None keeps the shell's own."""

    stdin: Optional[BinaryIO] = None
    stdout: Optional[BinaryIO] = None

    def close(self) -> None:
        """Close every stream opened for the command."""
        for stream in (self.stdin, self.stdout):
            if stream is not None:
                stream.close()
        self.stdin = None
        self.stdout = None

    def __enter__(self) -> Redirections:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _open_redirect(redirect: Redirect) -> BinaryIO:
    try:
        fd = os.open(redirect.target, _OPEN_FLAGS[redirect.type], 0o644)
    except OSError as exc:
        raise RedirectionError(redirect.target, exc.strerror or str(exc)) from exc
    return os.fdopen(fd, _FILE_MODES[redirect.type])


def _heredoc_stream(body: str) -> BinaryIO:
    stream = tempfile.TemporaryFile()
    stream.write(body.encode("utf-8", "surrogateescape"))
    stream.seek(0)
    return stream


def apply_redirections(cmd: Command) -> Redirections:
    """Open the redirections of ``cmd`` in order; raise RedirectionError on failure.

    A later redirection of the same direction replaces an earlier one, and
    the last here-document, if read, replaces any input file.
    """
    result = Redirections()
    try:
        for redirect in cmd.redirs:
            stream = _open_redirect(redirect)
            if redirect.type is RedirType.IN:
                if result.stdin is not None:
                    result.stdin.close()
                result.stdin = stream
            else:
                if result.stdout is not None:
                    result.stdout.close()
                result.stdout = stream
        if cmd.heredocs and cmd.heredocs[-1].body is not None:
            if result.stdin is not None:
                result.stdin.close()
            result.stdin = _heredoc_stream(cmd.heredocs[-1].body)
    except BaseException:
        result.close()
        raise
    return result


def heredoc_line(ctx: ShellContext, heredoc: Heredoc, line: str) -> str:
    """Return ``line`` as stored in the here-document, expanded if it expands."""
    if heredoc.expand_mode:
        line = expand_string(ctx, line, True)
    return line + "\n"


def read_heredoc(ctx: ShellContext, heredoc: Heredoc, read_line: ReadLine) -> str:
    """Read lines until the delimiter and store the body in ``heredoc.body``.

    ``read_line`` is called with the prompt and returns None at end of input.
    An interrupt raises HeredocInterrupted.
    """
    parts: list[str] = []
    while True:
        try:
            line = read_line(HEREDOC_PROMPT)
        except KeyboardInterrupt:
            raise HeredocInterrupted() from None
        if line is None:
            sys.stderr.write(_EOF_WARNING)
            break
        if line == heredoc.delim:
            break
        parts.append(heredoc_line(ctx, heredoc, line))
    heredoc.body = "".join(parts)
    return heredoc.body


def collect_heredocs(ctx: ShellContext, pipeline: Iterable[Command], read_line: ReadLine) -> None:
    """Read every here-document of the pipeline in order.

    On interrupt all bodies are discarded and HeredocInterrupted is raised.
    """
    commands = list(pipeline)
    try:
        for cmd in commands:
            for heredoc in cmd.heredocs:
                read_heredoc(ctx, heredoc, read_line)
    except HeredocInterrupted:
        for cmd in commands:
            for heredoc in cmd.heredocs:
                heredoc.body = None
        raise