"""
Argschema matcher: decide whether a token sequence fits one command schema.

Results
- Matched(target): the schema fits; target holds every bound value.
- NotApplicable(reason): the input is not addressed to this schema
  (another command name, or options given to a named command).
- InvalidInput(reason, code, fault): the input is addressed to this schema but
  breaks it (missing option, arity, conversion, leftovers).

Only Matched is truthy, so `if match(...)` keeps the plain yes/no reading.

Procedure
1. the first token decides applicability: a command token must identify the
   schema (and is consumed, its values going to the default option); an option
   token is only acceptable for the top-level schema;
2. every other option binds the first remaining token addressing it by short or
   long name, under the arity rule of the option;
3. a missing non-optional option, or any leftover token, fails the match.

The caller's token sequence is never mutated: matching works on a private list.
"""
import sys

from .converters import Coercer
from .faults import ConversionError, FaultCode
from .lexer import TokenKind
from .schemas import Arity
from .utils import *


class MatchResult:
    __slots__ = ()

    def __bool__(self):
        return False


class Matched(MatchResult):
    __slots__ = ("target",)

    def __init__(self, target, /):
        self.target = target

    def __bool__(self):
        return True

    def __repr__(self):
        return f"matched({self.target!r})"


class NotApplicable(MatchResult):
    __slots__ = ("reason",)

    code = FaultCode.NOT_APPLICABLE

    def __init__(self, reason, /):
        self.reason = reason

    def __repr__(self):
        return f"not-applicable({self.reason!r})"


class InvalidInput(MatchResult):
    __slots__ = ("reason", "code", "fault")

    def __init__(self, reason, /, code, fault=None):
        self.reason = reason
        self.code = code
        self.fault = fault

    def __repr__(self):
        return f"invalid-input({self.reason!r}, code={self.code.name})"


def _label(option):
    return " | ".join(option.names)


def _identifies(schema, token, ignorecase):
    if token.kind is TokenKind.TOPLEVEL:
        return schema.toplevel
    return not schema.toplevel and same(schema.name, token.name, ignorecase)


def _addresses(option, token, ignorecase):
    match token.kind:
        case TokenKind.SHORT:
            return option.short is not None and same(option.short, token.name, ignorecase)
        case TokenKind.LONG:
            return option.long is not None and same(option.long, token.name, ignorecase)
        case _:
            return False


def _bind(option, values, target, coercer):
    """
    Check arity, convert values and assign them; return an InvalidInput on failure, else None.
    """
    minimum, maximum = option.bounds
    if not minimum <= len(values) <= maximum:
        if option.arity is Arity.NONE:
            expected = "no value"
        elif minimum == maximum:
            expected = f"exactly {minimum} value" + "s" * (minimum != 1)
        elif maximum == sys.maxsize:
            expected = f"at least {minimum} value" + "s" * (minimum != 1)
        else:
            expected = f"between {minimum} and {maximum} values"
        return InvalidInput(
            f"option {_label(option)!r} expects {expected}, got {len(values)}",
            code=FaultCode.ARITY_VIOLATION,
        )

    try:
        match option.arity:
            case Arity.NONE:
                value = True
            case Arity.SINGLE:
                value = coercer.coerce(values[0], option.type)
            case _:
                value = coercer.coerce_all(values, option.type, option.container)
        option.assign(target, value)
    except Exception as exception:
        return InvalidInput(
            f"option {_label(option)!r}: {exception}",
            code=FaultCode.CONVERSION_FAILED if isinstance(exception, ConversionError) else FaultCode.TARGET_FAILED,
            fault=exception,
        )
    return None


def match(schema, tokens, *, ignorecase=False, coercer=Unset):
    """
    Try to bind tokens to schema.

    Parameters
    - schema: a Command schema.
    - tokens: sequence of lexer tokens (left untouched).
    - ignorecase: compare command and option names case-insensitively.
    - coercer: Coercer of the session (a fresh default one when Unset).

    Returns
    - Matched | NotApplicable | InvalidInput
    """
    tokens = list(tokens)
    if coercer is Unset:
        coercer = Coercer()

    if not tokens:
        return NotApplicable("no tokens to match")

    head = tokens[0]
    pending = list(schema.options)

    if head.command:
        if not _identifies(schema, head, ignorecase):
            return NotApplicable(f"command {head.name!r} does not identify this schema" if head.name else
                                 "input is not addressed to the top-level command")
    elif not schema.toplevel:
        return NotApplicable("options without a command only apply to the top-level command")

    try:
        target = schema.target()
    except Exception as exception:
        return InvalidInput(f"cannot create the command target: {exception}", code=FaultCode.TARGET_FAILED,
                            fault=exception)

    if head.command:
        del tokens[0]
        if head.values:
            if (default := schema.default) is None:
                return InvalidInput(
                    f"unexpected value{"s" * (len(head.values) > 1)}: {" ".join(head.values)}",
                    code=FaultCode.UNEXPECTED_VALUES,
                )
            if (result := _bind(default, head.values, target, coercer)) is not None:
                return result
            pending.remove(default)

    for option in pending:
        token = next((token for token in tokens if _addresses(option, token, ignorecase)), None)
        if token is None:
            if not option.optional:
                return InvalidInput(f"missing required option {_label(option)!r}", code=FaultCode.MISSING_OPTION)
            continue
        if (result := _bind(option, token.values, target, coercer)) is not None:
            return result
        tokens.remove(token)

    if tokens:
        unknown = ", ".join(("-" if token.kind is TokenKind.SHORT else "--") + token.name for token in tokens)
        return InvalidInput(f"unrecognized option{"s" * (len(tokens) > 1)}: {unknown}",
                            code=FaultCode.UNCONSUMED_TOKENS)

    return Matched(target)


__all__ = (
    "MatchResult",
    "Matched",
    "NotApplicable",
    "InvalidInput",
    "match",
)
