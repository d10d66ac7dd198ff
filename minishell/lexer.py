"""Split a command line into word and operator tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

_WHITESPACE = frozenset(" \t\n\v\f\r")
_OPERATOR_CHARS = frozenset("<>|")


class TokenKind(IntEnum):
    """Whether a token is a word or an operator."""

    WORD = 1
    OP = 2


class OpKind(IntEnum):
    """The operator a token stands for."""

    NONE = 0
    IN = 1
    OUT_TRUNC = 2
    OUT_APPEND = 3
    HEREDOC = 4
    PIPE = 5


class _Quote(Enum):
    NONE = 0
    SINGLE = 1
    DOUBLE = 2


@dataclass
class Token:
    """One lexical token of a command line."""

    kind: TokenKind
    op: OpKind = OpKind.NONE
    lex: str | None = None
    no_expand: bool = False


class UnclosedQuoteError(ValueError):
    """A word ends while a quote is still open."""

    def __init__(self, quote: str) -> None:
        super().__init__(f"unexpected end of line while looking for matching `{quote}'")
        self.quote = quote


def is_operator_char(c: str) -> bool:
    """Return True for the characters that start an operator."""
    return len(c) == 1 and c in _OPERATOR_CHARS


def _next_state(state: _Quote, c: str) -> _Quote:
    if state is _Quote.NONE:
        if c == "'":
            return _Quote.SINGLE
        if c == '"':
            return _Quote.DOUBLE
    elif state is _Quote.SINGLE and c == "'":
        return _Quote.NONE
    elif state is _Quote.DOUBLE and c == '"':
        return _Quote.NONE
    return state


def _quote_char(state: _Quote) -> str | None:
    if state is _Quote.SINGLE:
        return "'"
    if state is _Quote.DOUBLE:
        return '"'
    return None


def has_unmatched_quote(line: str, idx: int) -> str | None:
    """Return the quote left open by the word starting at ``idx``, or None."""
    state = _Quote.NONE
    for c in line[idx:]:
        if state is _Quote.NONE and (c in _WHITESPACE or is_operator_char(c)):
            break
        state = _next_state(state, c)
    return _quote_char(state)


def strip_quotes(word: str) -> str:
    """Remove the quote characters that open and close quoted sections."""
    state = _Quote.NONE
    kept = []
    for c in word:
        new_state = _next_state(state, c)
        if new_state is state:
            kept.append(c)
        state = new_state
    return "".join(kept)


def _scan_word(line: str, start: int) -> int:
    state = _Quote.NONE
    end = start
    for end in range(start, len(line) + 1):
        if end == len(line):
            break
        c = line[end]
        if state is _Quote.NONE and (c in _WHITESPACE or is_operator_char(c)):
            break
        state = _next_state(state, c)
    quote = _quote_char(state)
    if quote is not None:
        raise UnclosedQuoteError(quote)
    return end


def _scan_operator(line: str, idx: int) -> tuple[OpKind, int]:
    pair = line[idx:idx + 2]
    if pair == "<<":
        return OpKind.HEREDOC, idx + 2
    if pair == ">>":
        return OpKind.OUT_APPEND, idx + 2
    single = {"<": OpKind.IN, ">": OpKind.OUT_TRUNC, "|": OpKind.PIPE}
    return single[line[idx]], idx + 1


def _mark_heredoc_delimiter(token: Token) -> None:
    lex = token.lex or ""
    token.no_expand = "'" in lex or '"' in lex
    token.lex = strip_quotes(lex)


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens; raise UnclosedQuoteError on an open quote."""
    tokens: list[Token] = []
    idx = 0
    length = len(line)
    while True:
        while idx < length and line[idx] in _WHITESPACE:
            idx += 1
        if idx >= length:
            break
        if is_operator_char(line[idx]):
            op, idx = _scan_operator(line, idx)
            token = Token(TokenKind.OP, op)
        else:
            end = _scan_word(line, idx)
            token = Token(TokenKind.WORD, OpKind.NONE, line[idx:end])
            idx = end
        if (
            tokens
            and token.kind is TokenKind.WORD
            and tokens[-1].kind is TokenKind.OP
            and tokens[-1].op is OpKind.HEREDOC
        ):
            _mark_heredoc_delimiter(token)
        tokens.append(token)
    return tokens