"""Build the command pipeline from a token list."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import IntEnum

from minishell.lexer import OpKind, Token, TokenKind


class RedirType(IntEnum):
    """Kind of a file redirection."""

    IN = 1
    OUT_TRUNC = 2
    OUT_APPEND = 3


@dataclass
class Redirect:
    """A file redirection of one command."""

    type: RedirType
    target: str


@dataclass
class Heredoc:
    """A here-document of one command; ``body`` is filled in when it is read."""

    delim: str
    expand_mode: bool
    body: str | None = None


@dataclass
class Command:
    """One simple command of a pipeline."""

    argv: list[str] = field(default_factory=list)
    redirs: list[Redirect] = field(default_factory=list)
    heredocs: list[Heredoc] = field(default_factory=list)


class ParseError(ValueError):
    """The tokens do not form a valid pipeline."""


_REDIR_OPS = {
    OpKind.IN: RedirType.IN,
    OpKind.OUT_TRUNC: RedirType.OUT_TRUNC,
    OpKind.OUT_APPEND: RedirType.OUT_APPEND,
}


def is_redir_or_heredoc(op: OpKind) -> bool:
    """Return True for redirection and here-document operators."""
    return op in _REDIR_OPS or op is OpKind.HEREDOC


def _is_pipe(token: Token) -> bool:
    return token.kind is TokenKind.OP and token.op is OpKind.PIPE


def _segments(tokens: Iterable[Token]) -> Iterator[list[Token]]:
    current: list[Token] = []
    for token in tokens:
        if _is_pipe(token):
            yield current
            current = []
        else:
            current.append(token)
    if current:
        yield current


def _parse_command(segment: list[Token]) -> Command:
    cmd = Command()
    it = iter(segment)
    for token in it:
        if token.kind is TokenKind.WORD:
            cmd.argv.append(token.lex or "")
            continue
        if not is_redir_or_heredoc(token.op):
            continue
        target = next(it, None)
        if target is None or target.kind is not TokenKind.WORD:
            raise ParseError("redirection without a target word")
        if token.op is OpKind.HEREDOC:
            cmd.heredocs.append(Heredoc(target.lex or "", not target.no_expand))
        else:
            cmd.redirs.append(Redirect(_REDIR_OPS[token.op], target.lex or ""))
    return cmd


def parse(tokens: Iterable[Token]) -> list[Command]:
    """Return the commands of the pipeline; raise ParseError on a bad redirection."""
    return [_parse_command(segment) for segment in _segments(tokens)]