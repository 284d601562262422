"""
Argschema faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the package
  can report. Codes are grouped by the phase that produces them.
- SchemaError family: developer-facing errors raised while building or
  registering schemas. They are plain ValueError subclasses carrying a code.
- ConversionError: raised by the value coercer when a string cannot become
  the requested type.
- CommandException / CommandWarning: user-facing faults that know how to
  render themselves through rich in a short, lowercased, actionable way.
- trigger(): central entry point to surface a user-facing fault.

Phases
- schema (21xxx): construction and registration, raised immediately.
- matching (22xxx): reasons attached to failed match attempts.
- dispatch (23xxx): faults rendered by the dispatcher at run time.
- warnings (24xxx).
"""
import copy
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - schema (211xx)
      • MISSING_COMMAND, DUPLICATED_COMMAND, MALFORMED_NAME, DUPLICATED_NAME,
        DUPLICATED_BINDING, DEFAULT_CONFLICT, ARITY_TYPE_MISMATCH, ARITY_BOUNDS
    - matching (221xx)
      • NOT_APPLICABLE, MISSING_OPTION, UNEXPECTED_VALUES, ARITY_VIOLATION,
        UNCONSUMED_TOKENS, CONVERSION_FAILED, TARGET_FAILED
    - dispatch (231xx)
      • UNMATCHED_INPUT, HANDLER_FAILED
    - warnings (241xx)
      • SHADOWED_SWITCH

    normalize() lets the host remap codes to custom labels.
    """
    # --- schema errors (21xxx) ---
    MISSING_COMMAND             = 21101
    DUPLICATED_COMMAND          = 21102
    MALFORMED_NAME              = 21111
    DUPLICATED_NAME             = 21112
    DUPLICATED_BINDING          = 21113
    DEFAULT_CONFLICT            = 21121
    ARITY_TYPE_MISMATCH         = 21122
    ARITY_BOUNDS                = 21123

    # --- matching reasons (22xxx) ---
    NOT_APPLICABLE              = 22101
    MISSING_OPTION              = 22111
    UNEXPECTED_VALUES           = 22112
    ARITY_VIOLATION             = 22113
    UNCONSUMED_TOKENS           = 22114
    CONVERSION_FAILED           = 22121
    TARGET_FAILED               = 22131

    # --- dispatch errors (23xxx) ---
    UNMATCHED_INPUT             = 23101
    HANDLER_FAILED              = 23111

    # --- warnings (24xxx) ---
    SHADOWED_SWITCH             = 24101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SchemaError(ValueError):
    """
    Base class of every error raised while building or registering a schema.

    The registry is left unchanged whenever one of these escapes register().
    """
    code = Unset

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message


class MissingCommandError(SchemaError):
    code = FaultCode.MISSING_COMMAND
class DuplicatedCommandError(SchemaError):
    code = FaultCode.DUPLICATED_COMMAND
class MalformedNameError(SchemaError):
    code = FaultCode.MALFORMED_NAME
class DuplicatedNameError(SchemaError):
    code = FaultCode.DUPLICATED_NAME
class DuplicatedBindingError(SchemaError):
    code = FaultCode.DUPLICATED_BINDING
class DefaultConflictError(SchemaError):
    code = FaultCode.DEFAULT_CONFLICT
class ArityTypeError(SchemaError):
    code = FaultCode.ARITY_TYPE_MISMATCH
class ArityBoundsError(SchemaError):
    code = FaultCode.ARITY_BOUNDS


class ConversionError(ValueError):
    """
    A string could not be converted into the requested type.

    Attributes
    - text: the offending input.
    - type: the requested target type.
    """
    code = FaultCode.CONVERSION_FAILED

    def __init__(self, text, type, /, reason=Unset):
        self.text = text
        self.type = type
        name = getattr(type, "__name__", repr(type))
        message = f"cannot convert {text!r} to {name}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.message = message


def _palette(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class CommandException(Exception):
    """
    User-facing run-time fault.

    Options (merged by trigger())
    - console: rich console to print to (stderr console by default).
    - prog: program name shown in the header.
    - code: a FaultCode; title: short headline; hint: one actionable sentence.
    - colorful / fancy: rendering switches of the session.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message or "")

    def __rich__(self):
        main = __import__("__main__")

        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))
        code = self.options.get("code", FaultCode.HANDLER_FAILED)

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize(), styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class HandlerError(CommandException): ...
class UnmatchedError(CommandException): ...


class CommandWarning(ABC, Warning):
    """
    Developer-facing warning carrying a code, emitted through warnings.warn().
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message or "")


class ShadowedSwitchWarning(CommandWarning):
    code = FaultCode.SHADOWED_SWITCH


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace() before triggering.

    typical options
    - console, prog, code, title, hint, colorful, fancy.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "SchemaError",
    "MissingCommandError",
    "DuplicatedCommandError",
    "MalformedNameError",
    "DuplicatedNameError",
    "DuplicatedBindingError",
    "DefaultConflictError",
    "ArityTypeError",
    "ArityBoundsError",
    "ConversionError",
    "CommandException",
    "HandlerError",
    "UnmatchedError",
    "CommandWarning",
    "ShadowedSwitchWarning",
    "trigger",
)
