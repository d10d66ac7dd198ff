"""Check that a token list forms a well-shaped pipeline."""

from __future__ import annotations

from collections.abc import Iterable

from minishell.lexer import OpKind, Token, TokenKind

_OP_NAMES = {
    OpKind.PIPE: "|",
    OpKind.IN: "<",
    OpKind.OUT_TRUNC: ">",
    OpKind.OUT_APPEND: ">>",
    OpKind.HEREDOC: "<<",
}


class ShellSyntaxError(ValueError):
    """A token appears where the grammar does not allow it."""

    status = 2

    def __init__(self, token: str) -> None:
        super().__init__(f"syntax error near unexpected token `{token}'")
        self.token = token


def token_name(token: Token | None) -> str:
    """Return how ``token`` is named in syntax error messages."""
    if token is None:
        return "newline"
    if token.kind is TokenKind.OP and token.op in _OP_NAMES:
        return _OP_NAMES[token.op]
    return "word"


def validate(tokens: Iterable[Token]) -> list[Token]:
    """Return the tokens unchanged; raise ShellSyntaxError if they are malformed.

    A line may not start with a pipe, and every operator must be followed
    by a word.
    """
    toks = list(tokens)
    if not toks:
        return toks
    first = toks[0]
    if first.kind is TokenKind.OP and first.op is OpKind.PIPE:
        raise ShellSyntaxError(token_name(first))
    for current, following in zip(toks, toks[1:] + [None]):
        if current.kind is not TokenKind.OP:
            continue
        if following is None:
            raise ShellSyntaxError(token_name(None))
        if following.kind is TokenKind.OP:
            raise ShellSyntaxError(token_name(following))
    return toks