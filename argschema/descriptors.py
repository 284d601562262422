"""
Argschema descriptors: read-only views of registered schemas for renderers.

Handlers receive them through Context.commands; the help builder renders them.
"""
from typing import Any, NamedTuple

from .schemas import Arity


class OptionDescriptor(NamedTuple):
    short: str | None
    long: str | None
    descr: Any
    order: int
    hidden: bool
    optional: bool
    hint: Any
    default: bool
    arity: Arity
    type: Any
    min: int
    max: int

    @property
    def names(self):
        return tuple(
            prefix + name for prefix, name in (("-", self.short), ("--", self.long)) if name is not None
        )


class CommandDescriptor(NamedTuple):
    name: str | None
    descr: Any
    order: int
    hidden: bool
    options: tuple[OptionDescriptor, ...]

    @property
    def toplevel(self):
        return self.name is None


def describe(schema, /):
    """
    Build the CommandDescriptor of a command schema.
    """
    return CommandDescriptor(
        name=schema.name,
        descr=schema.descr,
        order=schema.order,
        hidden=schema.hidden,
        options=tuple(
            OptionDescriptor(
                short=option.short,
                long=option.long,
                descr=option.descr,
                order=option.order,
                hidden=option.hidden,
                optional=option.optional,
                hint=option.hint,
                default=option.default,
                arity=option.arity,
                type=option.type,
                min=option.bounds[0],
                max=option.bounds[1],
            )
            for option in schema.options
        ),
    )


__all__ = (
    "OptionDescriptor",
    "CommandDescriptor",
    "describe",
)
