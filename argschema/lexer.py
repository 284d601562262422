"""
Argschema lexer: raw argument vector → tokens.

Token kinds
- SHORT: one letter of a "-abc" bundle (each letter becomes its own token).
- LONG: "--name" with a valid long name.
- SUBCOMMAND: the first argument, when it names a known sub-command.
- TOPLEVEL: the first argument, when it is neither an option nor a known
  sub-command; the argument itself becomes the token's first value.

Every other argument is a value of the currently open token. Only the first
argument can become a command token; a hyphen-led argument whose suffix is not
a valid option name ("-1", "--", "-", "--bad_name") is a plain value.
The lexer never raises on content.
"""
from enum import StrEnum
from typing import NamedTuple

from .utils import *


class TokenKind(StrEnum):
    SHORT = "short"
    LONG = "long"
    TOPLEVEL = "toplevel"
    SUBCOMMAND = "subcommand"


class Token(NamedTuple):
    """
    Immutable lexer token.

    - kind: a TokenKind.
    - name: option letter, long name or sub-command name (None for TOPLEVEL).
    - values: the plain arguments collected after this token, in order.
    """
    kind: TokenKind
    name: str | None
    values: tuple[str, ...] = ()

    @property
    def command(self):
        return self.kind in (TokenKind.TOPLEVEL, TokenKind.SUBCOMMAND)


def is_option(text, /):
    """
    Return whether text addresses options ("--name" or a "-abc" letter bundle).
    """
    if text.startswith("--"):
        return is_long_name(text[2:])
    if text.startswith("-"):
        return len(text) > 1 and all(is_short_name(char) for char in text[1:])
    return False


def lex(args, commands=(), ignorecase=False):
    """
    Tokenize an argument vector.

    Parameters
    - args: iterable of strings, already split by the shell.
    - commands: names of the registered sub-commands.
    - ignorecase: compare the first argument with sub-command names case-insensitively.

    Returns
    - tuple[Token, ...] in input order.
    """
    known = {fold(name, ignorecase) for name in commands}
    tokens = []
    kind = name = Unset
    values = []

    def close():
        if kind is not Unset:
            tokens.append(Token(kind, name, tuple(values)))

    for index, arg in enumerate(args):
        if index == 0 and not is_option(arg):
            if fold(arg, ignorecase) in known:
                kind, name, values = TokenKind.SUBCOMMAND, arg, []
            else:
                kind, name, values = TokenKind.TOPLEVEL, None, [arg]
        elif arg.startswith("--") and is_option(arg):
            close()
            kind, name, values = TokenKind.LONG, arg[2:], []
        elif is_option(arg):
            close()
            # Every letter but the last is closed right away.
            *bundle, last = arg[1:]
            tokens.extend(Token(TokenKind.SHORT, letter) for letter in bundle)
            kind, name, values = TokenKind.SHORT, last, []
        else:
            values.append(arg)

    close()
    return tuple(tokens)


__all__ = (
    "TokenKind",
    "Token",
    "is_option",
    "lex",
)
