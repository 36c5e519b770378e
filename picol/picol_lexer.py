"""
The picol lexer.

There is no AST: the evaluator pulls tokens one at a time straight off the
script text and acts on each as it arrives. The only state carried between
tokens is the cursor, the type of the previous token and whether an
unterminated double-quoted word is open.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List

WHITESPACE = " \t\r"
TERMINATORS = "\n;"


class TokenType(Enum):
    ESC = "esc"  # unbraced word text; backslash pairs are still raw
    STR = "str"  # literal text: a brace-quoted word or a lone '$'
    CMD = "cmd"
    VAR = "var"
    SEP = "sep"
    EOL = "eol"
    EOF = "eof"


@dataclass
class Token:
    type: TokenType
    text: str
    start: int
    end: int


def _is_var_char(c: str) -> bool:
    return c.isalnum() or c == '_'


class Lexer:
    """Tokenizes one script on demand via `next_token()`."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.start = 0
        self.end = 0
        # A fresh script is at a command-start position.
        self.type = TokenType.EOL
        self.inside_quotes = False

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _token(self, typ: TokenType, start: int, end: int) -> Token:
        self.type = typ
        self.start = start
        self.end = end
        return Token(typ, self.source[start:end], start, end)

    def next_token(self) -> Token:
        src = self.source
        while True:
            if self.at_end:
                if self.type not in (TokenType.EOL, TokenType.EOF):
                    return self._token(TokenType.EOL, self.pos, self.pos)
                return self._token(TokenType.EOF, self.pos, self.pos)
            c = src[self.pos]
            if c in WHITESPACE:
                if self.inside_quotes:
                    return self._parse_string()
                if self.type is TokenType.EOL:
                    # indentation before a command still counts as command start
                    return self._parse_eol()
                return self._parse_sep()
            if c in TERMINATORS:
                if self.inside_quotes:
                    return self._parse_string()
                return self._parse_eol()
            if c == '[':
                return self._parse_command()
            if c == '$':
                return self._parse_var()
            if c == '#' and self.type is TokenType.EOL:
                self._skip_comment()
                continue
            return self._parse_string()

    def _parse_sep(self) -> Token:
        start = self.pos
        src = self.source
        while not self.at_end and src[self.pos] in WHITESPACE:
            self.pos += 1
        return self._token(TokenType.SEP, start, self.pos)

    def _parse_eol(self) -> Token:
        start = self.pos
        src = self.source
        while not self.at_end and (src[self.pos] in WHITESPACE or src[self.pos] in TERMINATORS):
            self.pos += 1
        return self._token(TokenType.EOL, start, self.pos)

    def _parse_command(self) -> Token:
        src = self.source
        n = len(src)
        level = 1
        blevel = 0
        self.pos += 1
        start = self.pos
        while self.pos < n:
            c = src[self.pos]
            if c == '[' and blevel == 0:
                level += 1
            elif c == ']' and blevel == 0:
                level -= 1
                if level == 0:
                    break
            elif c == '{':
                blevel += 1
            elif c == '}':
                blevel -= 1
            elif c == '\\':
                self.pos += 1
            self.pos += 1
        end = min(self.pos, n)
        if self.pos < n and src[self.pos] == ']':
            self.pos += 1
        else:
            # unterminated: the substitution runs to end of input
            self.pos = n
        return self._token(TokenType.CMD, start, end)

    def _parse_var(self) -> Token:
        src = self.source
        self.pos += 1
        start = self.pos
        while not self.at_end and _is_var_char(src[self.pos]):
            self.pos += 1
        if start == self.pos:
            return self._token(TokenType.STR, start - 1, start)
        return self._token(TokenType.VAR, start, self.pos)

    def _parse_brace(self) -> Token:
        src = self.source
        n = len(src)
        level = 1
        self.pos += 1
        start = self.pos
        while self.pos < n:
            c = src[self.pos]
            if c == '\\' and self.pos + 1 < n:
                self.pos += 1
            elif c == '{':
                level += 1
            elif c == '}':
                level -= 1
                if level == 0:
                    end = self.pos
                    self.pos += 1
                    return self._token(TokenType.STR, start, end)
            self.pos += 1
        return self._token(TokenType.STR, start, n)

    def _parse_string(self) -> Token:
        src = self.source
        n = len(src)
        new_word = self.type in (TokenType.EOL, TokenType.SEP, TokenType.STR)
        if new_word:
            c = src[self.pos]
            if c == '{':
                return self._parse_brace()
            if c == '"':
                self.inside_quotes = True
                self.pos += 1
        start = self.pos
        while self.pos < n:
            c = src[self.pos]
            if c == '\\':
                if self.pos + 1 < n:
                    self.pos += 1
            elif c == '$' or c == '[':
                return self._token(TokenType.ESC, start, self.pos)
            elif c in WHITESPACE or c in TERMINATORS:
                if not self.inside_quotes:
                    return self._token(TokenType.ESC, start, self.pos)
            elif c == '"':
                if self.inside_quotes:
                    end = self.pos
                    self.pos += 1
                    self.inside_quotes = False
                    return self._token(TokenType.ESC, start, end)
            self.pos += 1
        return self._token(TokenType.ESC, start, n)

    def _skip_comment(self):
        src = self.source
        while not self.at_end and src[self.pos] != '\n':
            self.pos += 1


_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r'}


def unescape(text: str) -> str:
    """Interpret backslash escapes in an unbraced word."""
    if '\\' not in text:
        return text
    out = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == '\\' and i + 1 < n:
            nxt = text[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(c)
        i += 1
    return ''.join(out)


def tokenize(source: str) -> List[Token]:
    """Returns every token of `source`, up to and including EOF."""
    return list(Lexer(source))
