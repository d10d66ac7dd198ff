"""Variable expansion, quote removal and word splitting."""

from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Iterable

from minishell.environment import ShellContext
from minishell.lexer import OpKind, Token, TokenKind

_IFS = frozenset(" \t\n")
_IFS_RUN = re.compile(r"[ \t\n]+")


class AmbiguousRedirectError(ValueError):
    """A redirection target expanded to nothing or to several words."""

    status = 1

    def __init__(self, word: str) -> None:
        super().__init__(f"{word}: ambiguous redirect")
        self.word = word


def is_var_start(c: str) -> bool:
    """Return True for a character that may start a variable name."""
    return len(c) == 1 and (c == "_" or (c.isascii() and c.isalpha()))


def is_var_char(c: str) -> bool:
    """Return True for a character that may continue a variable name."""
    return is_var_start(c) or (len(c) == 1 and "0" <= c <= "9")


def has_quotes(text: str | None) -> bool:
    """Return True if ``text`` holds a single or double quote."""
    return bool(text) and ("'" in text or '"' in text)


def contains_ifs(text: str | None) -> bool:
    """Return True if ``text`` holds a space, tab or newline."""
    return bool(text) and any(c in _IFS for c in text)


def split_words(text: str) -> list[str]:
    """Split ``text`` into fields on runs of spaces, tabs and newlines."""
    return [word for word in _IFS_RUN.split(text) if word]


def _expand_dollar(ctx: ShellContext, text: str, i: int, out: list[str]) -> int:
    nxt = text[i] if i < len(text) else ""
    if nxt == "?":
        out.append(str(ctx.last_status))
        return i + 1
    if nxt == "$":
        out.append(str(os.getpid()))
        return i + 1
    if is_var_start(nxt):
        end = i
        while end < len(text) and is_var_char(text[end]):
            end += 1
        value = ctx.env.get(text[i:end])
        if value:
            out.append(value)
        return end
    if "0" <= nxt <= "9" and nxt:
        return i + 1
    out.append("$")
    return i


def expand_string(ctx: ShellContext, text: str | None, in_dquote: bool = False) -> str:
    """Expand ``$`` references in ``text`` and remove quotes.

    With ``in_dquote`` set, quote characters are kept literally and every
    ``$`` reference is expanded, as inside a here-document.
    """
    if not text:
        return ""
    out: list[str] = []
    state: str | None = None
    i = 0
    while i < len(text):
        c = text[i]
        if not in_dquote:
            if state is None and c in ("'", '"'):
                state = c
                i += 1
                continue
            if state is not None and c == state:
                state = None
                i += 1
                continue
        if c == "$" and state != "'":
            i = _expand_dollar(ctx, text, i + 1, out)
            continue
        out.append(c)
        i += 1
    return "".join(out)


def _is_redir_op(token: Token | None) -> bool:
    return (
        token is not None
        and token.kind is TokenKind.OP
        and token.op in (OpKind.IN, OpKind.OUT_TRUNC, OpKind.OUT_APPEND)
    )


def _is_heredoc_op(token: Token | None) -> bool:
    return token is not None and token.kind is TokenKind.OP and token.op is OpKind.HEREDOC


def expand_tokens(tokens: Iterable[Token], ctx: ShellContext) -> list[Token]:
    """Return the tokens with every expandable word expanded.

    Unquoted words that expand to nothing are dropped (except a heredoc
    delimiter), and unquoted words holding whitespace are split into
    several words. A redirection target that would be dropped or split
    raises AmbiguousRedirectError and sets the last status to 1.
    """
    out: list[Token] = []
    for token in tokens:
        prev = out[-1] if out else None
        if token.kind is not TokenKind.WORD or not token.lex or token.no_expand:
            out.append(token)
            continue
        quoted = has_quotes(token.lex)
        expanded = expand_string(ctx, token.lex, False)
        if not quoted and (expanded == "" or contains_ifs(expanded)):
            if _is_redir_op(prev):
                ctx.last_status = AmbiguousRedirectError.status
                raise AmbiguousRedirectError(token.lex)
            if expanded == "":
                if _is_heredoc_op(prev):
                    out.append(dataclasses.replace(token, lex=expanded))
                continue
            out.extend(Token(TokenKind.WORD, OpKind.NONE, word) for word in split_words(expanded))
            continue
        out.append(dataclasses.replace(token, lex=expanded))
    return out