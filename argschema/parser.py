"""
Argschema dispatcher.

A Parser owns one session: its registry, converter table, renderer and
configuration. run() drives one argument vector through it:

1. active schemas: the builtin help schema (-h/--help), the builtin version
   schema (-v/--version), then the registered schemas in registration order;
2. a lone "-?" prints the help and stops (unless disabled);
3. the arguments are lexed once, then every schema is tried on its own copy
   of the tokens; the first match wins;
4. the matched target's handle(context) runs. A failure is rendered as a
   fault; otherwise the completion notice is printed, unless the handler
   called context.prevent_default() or the session disabled it;
5. when nothing matches, the registered fallback receives the context, or an
   "unrecognized command or option" fault is rendered.

Quick example:
    >>> parser = Parser(prog="tool", version="2.0.0")
    >>> @parser.register
    ... @command("build", Single("-o", "--output"), Flag("-v", "--verbose", optional=True))
    ... class Build(Handler):
    ...     def handle(self, context):
    ...         context.console.print(f"building {self.output}")
    ...
    >>> parser.run(["build", "-o", "out.bin"])
"""
import logging
import os
import sys
import warnings
from abc import ABC, abstractmethod
from collections.abc import Iterable
from enum import StrEnum
from typing import NamedTuple

from rich.console import Console

from .converters import Coercer
from .descriptors import describe
from .faults import FaultCode, HandlerError, ShadowedSwitchWarning, UnmatchedError, trigger
from .helper import HelpBuilder
from .lexer import lex
from .matcher import InvalidInput, match
from .registry import Registry
from .schemas import Command, Flag
from .utils import *

logger = logging.getLogger(__name__)


class Outcome(StrEnum):
    """
    Terminal state of Parser.run().

    - DISPATCHED: a schema matched and its handler completed.
    - FAILED: a schema matched but its handler raised (the fault was rendered).
    - UNMATCHED: no schema matched.
    - QUERIED: the "-?" shortcut printed the help.
    """
    DISPATCHED = "dispatched"
    FAILED = "failed"
    UNMATCHED = "unmatched"
    QUERIED = "queried"


class Config(NamedTuple):
    """
    Session configuration.

    - ignorecase: compare command and option names case-insensitively.
    - helper / versioner: enable the builtin help / version schemas.
    - query: enable the lone "-?" help shortcut (and the tip advertising it).
    - notice: print the completion notice after a successful handler.
    - colorful / fancy: rendering switches.
    """
    ignorecase: bool = False
    helper: bool = True
    versioner: bool = True
    query: bool = True
    notice: bool = True
    colorful: bool = False
    fancy: bool = False


class Context:
    """
    What a handler (or the fallback) receives.

    Properties
    - console: the session's rich console; handlers print through it.
    - commands: descriptors of every active schema, builtins included.
    - helper: the session's HelpBuilder.
    - ignorecase: the session's case rule.
    - failures: (schema, result) pairs of the attempts that did not match.
    - notice: whether the completion notice will still be printed.
    """

    def __init__(self, console, commands, helper, config, failures=()):
        self._console = console
        self._commands = tuple(commands)
        self._helper = helper
        self._config = config
        self._failures = tuple(failures)
        self._notice = True

    @property
    def commands(self):
        return self._commands

    @property
    def failures(self):
        return self._failures

    @property
    def console(self):
        return self._console

    @property
    def helper(self):
        return self._helper

    @property
    def ignorecase(self):
        return self._config.ignorecase

    @property
    def notice(self):
        return self._notice

    def prevent_default(self):
        """
        Suppress the completion notice for this run.
        """
        self._notice = False


class Handler(ABC):
    """
    Base class of command targets.

    The dispatcher instantiates the class without arguments for every match
    attempt, binds option values as attributes (or through setters), then
    calls handle() on the instance that matched.
    """

    @abstractmethod
    def handle(self, context):
        raise NotImplementedError


class HelpHandler(Handler):
    help = False

    def handle(self, context):
        if self.help:
            context.console.print(context.helper.build(context.commands))
            context.prevent_default()


class VersionHandler(Handler):
    version = False

    def handle(self, context):
        if self.version:
            context.console.print(context.helper.versioner())
            context.prevent_default()


HELP = Command(None, Flag("-h", "--help", descr="print this help"), target=HelpHandler, order=-sys.maxsize)
VERSION = Command(None, Flag("-v", "--version", descr="print the version"), target=VersionHandler,
                  order=-sys.maxsize)


class Parser:
    """
    Declarative command-line dispatcher.

    Parameters
    - prog: program name (default: __main__.__prog__, else the basename of sys.argv[0]).
    - version: program version (default: __main__.__version__, else "1.0.0").
    - descr / copyright: shown in help.
    - console: rich Console receiving every output (default: stdout console).
    - ignorecase, helper, versioner, query, notice, colorful, fancy: see Config.
    """

    def __init__(
            self,
            *,
            prog=Unset,
            version=Unset,
            descr=Unset,
            copyright=Unset,
            console=Unset,
            ignorecase=False,
            helper=True,
            versioner=True,
            query=True,
            notice=True,
            colorful=False,
            fancy=False
    ):
        main = __import__("__main__")
        script = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "prog"
        prog = coalesce(prog, getattr(main, "__prog__", script))
        version = coalesce(version, getattr(main, "__version__", "1.0.0"))
        if not isinstance(prog, str) or not prog:
            raise TypeError("parser 'prog' must be a non-empty string")
        if not isinstance(version, str):
            raise TypeError("parser 'version' must be a string")

        self._config = Config(
            ignorecase=bool(ignorecase),
            helper=bool(helper),
            versioner=bool(versioner),
            query=bool(query),
            notice=bool(notice),
            colorful=bool(colorful),
            fancy=bool(fancy),
        )
        self._prog = prog
        self._console = coalesce(console, Console())
        self._registry = Registry(ignorecase=ignorecase)
        self._coercer = Coercer()
        self._helper = HelpBuilder(
            prog,
            version,
            descr=descr,
            copyright=copyright,
            tip=query,
            colorful=colorful,
            fancy=fancy,
        )
        self._fallback = Unset

    @property
    def config(self):
        return self._config

    @property
    def console(self):
        return self._console

    @property
    def helper(self):
        return self._helper

    @property
    def registry(self):
        return self._registry

    @property
    def coercer(self):
        return self._coercer

    @property
    def schemas(self):
        """
        Active schemas in priority order: builtins first, then registration order.
        """
        builtins = []
        if self._config.helper:
            builtins.append(HELP)
        if self._config.versioner:
            builtins.append(VERSION)
        return (*builtins, *self._registry)

    def _shadowed(self, schema):
        reserved = {}
        if self._config.helper:
            reserved.update(dict.fromkeys(("-h", "--help"), "help"))
        if self._config.versioner:
            reserved.update(dict.fromkeys(("-v", "--version"), "version"))
        reserved = {fold(name, self._config.ignorecase): builtin for name, builtin in reserved.items()}
        for option in schema.options:
            for name in option.names:
                if (builtin := reserved.get(fold(name, self._config.ignorecase))) is not None:
                    yield name, builtin

    def register(self, schema, /):
        """
        Register a command schema (see Registry.register for the rules).

        The schema target must provide a handle(context) method. Returns the
        schema, enabling decorator-style usage: @parser.register.
        """
        if isinstance(schema, Command) and not callable(getattr(schema.target, "handle", None)):
            raise TypeError("parser command target must provide a handle(context) method")
        self._registry.register(schema)
        if schema.toplevel:
            for name, builtin in self._shadowed(schema):
                warnings.warn(ShadowedSwitchWarning(
                    f"option {name!r} is shadowed by the builtin {builtin} command when given alone",
                ), stacklevel=2)
        return schema

    def converter(self, type, /):
        """
        Decorator registering a converter for type in this session.

            @parser.converter(Url)
            def url(text): ...
        """
        @rename("converter")
        def wrapper(converter, /):
            return self._coercer.register(type, converter)
        return wrapper

    def fallback(self, fallback, /):
        """
        Register a one-time callback invoked with the Context when nothing matches.

        Returns the same callable, enabling decorator-style usage: @parser.fallback
        """
        if not callable(fallback):
            raise TypeError("parser fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("parser fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def _context(self, schemas, failures=()):
        return Context(self._console, map(describe, schemas), self._helper, self._config, failures)

    def _trigger(self, fault, **options):
        trigger(
            fault,
            console=self._console,
            prog=self._prog,
            colorful=self._config.colorful,
            fancy=self._config.fancy,
            **options,
        )

    def run(self, args=Unset, /):
        """
        Interpret an argument vector (default: sys.argv[1:]).

        Returns
        - Outcome: DISPATCHED, FAILED, UNMATCHED or QUERIED.

        Raises
        - TypeError: when args is a plain string or holds non-string items.
        """
        if args is Unset:
            args = sys.argv[1:]
        elif isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("run() argument must be an iterable of strings")
        args = list(args)
        if not all(isinstance(arg, str) for arg in args):
            raise TypeError("run() argument must be an iterable of strings")

        schemas = self.schemas

        if self._config.query and args == ["-?"]:
            self._console.print(self._helper.build(tuple(map(describe, schemas))))
            return Outcome.QUERIED

        tokens = lex(args, self._registry.subcommands, self._config.ignorecase)
        logger.debug("lexed %r into %r", args, tokens)

        failures = []
        for schema in schemas:
            result = match(schema, tokens, ignorecase=self._config.ignorecase, coercer=self._coercer)
            logger.debug("tried %r: %r", schema.name, result)
            if result:
                break
            failures.append((schema, result))
        else:
            context = self._context(schemas, failures)
            if self._fallback is not Unset:
                self._fallback(context)
                return Outcome.UNMATCHED

            hint = next((
                result.reason for schema, result in failures
                if isinstance(result, InvalidInput) and schema in self._registry
            ), None)
            if hint is None and self._config.query:
                hint = f"run '{self._prog} -?' for help"
            self._trigger(
                UnmatchedError("unrecognized command or option"),
                code=FaultCode.UNMATCHED_INPUT,
                title="unrecognized input",
                hint=hint,
            )
            return Outcome.UNMATCHED

        context = self._context(schemas)
        logger.debug("dispatching to %r", result.target)
        try:
            result.target.handle(context)
        except Exception as exception:
            logger.debug("handler %r failed", result.target, exc_info=True)
            self._trigger(
                HandlerError(str(exception) or type(exception).__name__),
                code=FaultCode.HANDLER_FAILED,
                title="command failed",
            )
            return Outcome.FAILED

        if context.notice and self._config.notice:
            self._console.print(self._helper.notice())
        return Outcome.DISPATCHED

    def __call__(self, args=Unset, /):
        return self.run(args)


__all__ = (
    "Outcome",
    "Config",
    "Context",
    "Handler",
    "Parser",
)
