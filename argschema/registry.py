"""
Argschema schema registry.

register() validates a command schema and, when every rule passes, records it
together with its option names. Rules, in order:

1. the object is a Command schema, not registered yet (neither the schema nor its target);
2. at most one default option;
3. flags declare a bool type;
4. multiple-value options gather into an ordered collection (a Sequence, not str/bytes);
5. multiple-value bounds: max ≥ 1, min ≥ 1, min ≤ max;
6. option names (and attribute binding sites) are unique within the command.

Registration is atomic: a rejected schema leaves no trace, so it can be fixed
and registered again.
"""
import logging
from collections.abc import Sequence

from .faults import (
    ArityBoundsError,
    ArityTypeError,
    DefaultConflictError,
    DuplicatedBindingError,
    DuplicatedCommandError,
    DuplicatedNameError,
    MissingCommandError,
)
from .schemas import Arity, Command
from .utils import *

logger = logging.getLogger(__name__)


def _describe(schema):
    return f"command {schema.name!r}" if not schema.toplevel else "top-level command"


class Registry:
    """
    Ordered collection of validated command schemas.

    Parameters
    - ignorecase: compare option names case-insensitively when looking for duplicates.
    """

    def __init__(self, *, ignorecase=False):
        self._ignorecase = bool(ignorecase)
        self._commands = []
        self._names = set()

    ignorecase = mirror("ignorecase")
    commands = mirror("commands")
    names = mirror("names")

    @property
    def subcommands(self):
        """
        Names of the registered sub-commands (the top-level command excluded), in registration order.
        """
        return tuple(dict.fromkeys(schema.name for schema in self._commands if not schema.toplevel))

    def __iter__(self):
        return iter(tuple(self._commands))

    def __len__(self):
        return len(self._commands)

    def __contains__(self, schema):
        return schema in self._commands

    def _check_options(self, schema):
        if sum(option.default for option in schema) > 1:
            raise DefaultConflictError(f"{_describe(schema)} declares more than one default option")

        for option in schema:
            label = " | ".join(option.names)
            match option.arity:
                case Arity.NONE:
                    if option.type is not bool:
                        raise ArityTypeError(f"flag {label!r} of {_describe(schema)} must bind a bool")
                case Arity.MULTIPLE:
                    container = option.container
                    if not issubclass(container, Sequence) or issubclass(container, str | bytes):
                        raise ArityTypeError(
                            f"option {label!r} of {_describe(schema)} must gather values into an ordered collection"
                        )
                    if option.max < 1:
                        raise ArityBoundsError(f"option {label!r} of {_describe(schema)} 'max' must be at least 1")
                    if option.min < 1:
                        raise ArityBoundsError(f"option {label!r} of {_describe(schema)} 'min' must be at least 1")
                    if option.min > option.max:
                        raise ArityBoundsError(
                            f"option {label!r} of {_describe(schema)} 'min' cannot exceed 'max'"
                        )

    def _collect_names(self, schema):
        command = fold(schema.name, self._ignorecase)
        names = set()
        bindings = set()
        for option in schema:
            for name in option.names:
                if (key := (command, fold(name, self._ignorecase))) in names or key in self._names:
                    raise DuplicatedNameError(f"option {name!r} is declared more than once for {_describe(schema)}")
                names.add(key)
            if isinstance(option.bind, str):
                if option.bind in bindings:
                    raise DuplicatedBindingError(
                        f"{_describe(schema)} binds more than one option to {option.bind!r}"
                    )
                bindings.add(option.bind)
        return names

    def register(self, schema, /):
        """
        Validate and record a command schema.

        Returns
        - the schema, enabling decorator-style usage.

        Raises
        - SchemaError subclasses (see module documentation); the registry is
          left unchanged.
        """
        if not isinstance(schema, Command):
            raise MissingCommandError(
                f"register() argument must be a command schema, not {type(schema).__name__!r}"
            )
        if schema in self._commands or any(other.target is schema.target for other in self._commands):
            raise DuplicatedCommandError(f"{_describe(schema)} is already registered")

        self._check_options(schema)
        names = self._collect_names(schema)

        # Every rule passed: commit.
        self._names |= names
        self._commands.append(schema)
        logger.debug("registered %s with %d option(s)", _describe(schema), len(schema.options))
        return schema


__all__ = (
    "Registry",
)
