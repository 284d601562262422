"""
Argschema help builder: rich renderables for help, version, errors and notices.

Layout of every framed block (content())
    {prog} {version}
    {copyright}

    {pre-build hook}        (help only)

    {content}

    {post-build hook}       (help only)

    {tip}                   (when the -? shortcut is enabled)

Help content (build())
- description: the program description, when set.
- usage: one entry per visible command, the top-level command first, then by
  order; options ordered default first, required before optional, then by order.
- options: one aligned line per visible option name set, shown once even when
  several commands share it.

Palette keys
- program-name, program-version, copyright, section-label, description,
  command-name, option-name, flag-name, metavar, option-description,
  annotation, tip, notice, panel-title
Define a mapping named __styles__ in __main__ to override any palette entry;
styles only apply when colorful is True.
"""
import codecs
import sys
from collections import defaultdict

from rich.panel import Panel
from rich.text import Text

from .converters import Directory, File, Switch
from .schemas import Arity
from .utils import *


TYPESTRINGS = {
    str: "string",
    bool: "boolean",
    float: "real",
    int: "int",
    File: "FILE",
    Directory: "DIR",
    Switch: "on|off",
    codecs.CodecInfo: "encoding",
}


def _order(options):
    return sorted(options, key=lambda option: (not option.default, option.optional, option.order))


def _count(minimum, maximum):
    """
    Describe a value count: {2}, {1,} or {1,3}.
    """
    text = "{" + str(minimum)
    if minimum < maximum:
        text += ","
    if maximum < sys.maxsize:
        text += str(maximum) if minimum < maximum else ""
    return text + "}"


class HelpBuilder:
    """
    Session-scoped renderer.

    Parameters
    - prog / version / descr / copyright: program metadata shown in the blocks.
    - tip: append the "-?" hint at the end of framed blocks.
    - colorful / fancy: rendering switches (fancy wraps help in a panel).
    """

    def __init__(self, prog, version, *, descr=Unset, copyright=Unset, tip=True, colorful=False, fancy=False):
        self._prog = prog
        self._version = version
        self._descr = coalesce(descr)
        self._copyright = coalesce(copyright)
        self._tip = bool(tip)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._typestrings = dict(TYPESTRINGS)
        self._prebuild = None
        self._postbuild = None

    prog = mirror("prog")
    typestrings = mirror("typestrings")

    @property
    def version(self):
        return self._version

    def typestring(self, type, text, /):
        """
        Register the help text shown for values of type (e.g., "URL").
        """
        if not isinstance(text, str) or not text:
            raise TypeError("typestring() second argument must be a non-empty string")
        self._typestrings[type] = text

    def prebuild(self, callback, /):
        """
        Register a hook returning text shown before the help content.

        The hook receives this builder and may return None to show nothing.
        Returns the callback, enabling decorator-style usage.
        """
        if not callable(callback):
            raise TypeError("prebuild() argument must be callable")
        self._prebuild = callback
        return callback

    def postbuild(self, callback, /):
        """
        Register a hook returning text shown after the help content.
        """
        if not callable(callback):
            raise TypeError("postbuild() argument must be callable")
        self._postbuild = callback
        return callback

    def _styler(self, style):
        if not self._colorful:
            return ""
        return defaultdict(str, {
            # === Head ===
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "program-version": "bold #00E6FF",  # CYAN version
            "copyright": "#9CA3AF",

            # === Sections ===
            "section-label": "bold #FFFFFF",
            "description": "italic #A3A3A3",
            "command-name": "bold #36C5F0",  # SKY-BLUE sub-commands

            # === Options ===
            "option-name": "bold #00E6FF",  # CYAN for valued options
            "flag-name": "bold #22C55E",  # GREEN for flags
            "metavar": "bold #FFD600",  # AMBER for value types
            "option-description": "#9CA3AF",
            "annotation": "italic #737373",

            # === Footer ===
            "tip": "#737373",
            "notice": "bold #22C55E",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__('__main__'), "__styles__", {}))[style]

    def _text(self, fragment, style=""):
        if not fragment:
            return Text("")
        if not self._colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), self._styler(style))

    def typename(self, option, /):
        """
        Value placeholder of an option: "" for flags, "<int>", "<string>{1,3}"...
        """
        if option.arity is Arity.NONE:
            return ""
        name = self._typestrings.get(option.type) or getattr(option.type, "__name__", str(option.type))
        if option.arity is Arity.SINGLE:
            return f"<{name}>"
        return f"<{name}>{_count(option.min, option.max)}"

    def _names(self, option, separator):
        style = "flag-name" if option.arity is Arity.NONE else "option-name"
        return self._text(separator).join(self._text(name, style) for name in option.names)

    def _usage_option(self, option, total):
        names = self._names(option, " | ")
        if len(option.names) > 1 and (option.arity is not Arity.NONE or total > 1):
            names = Text.assemble("(", names, ")")
        if typename := self.typename(option):
            names = Text.assemble(names, " ", self._text(typename, "metavar"))
        if option.optional:
            names = Text.assemble("[", names, "]")
        return names

    def usage(self, command, /):
        """
        Usage entry of one command descriptor (description line, then the invocation).
        """
        head = Text.assemble("    ", self._text(self._prog.lower(), "program-name"))
        if not command.toplevel:
            head.append(" ").append_text(self._text(command.name, "command-name"))
        indent = " " * (len(head) + 1)

        options = [option for option in _order(command.options) if not option.hidden]
        lines = [head]
        for index, option in enumerate(options):
            rendered = self._usage_option(option, len(options))
            if index == 0:
                head.append(" ").append_text(rendered)
            else:
                lines.append(Text.assemble(indent, rendered))

        usage = Text("\n").join(lines)
        if command.descr:
            usage = Text.assemble("    ", self._text(command.descr, "description"), "\n", usage)
        return usage

    def options(self, commands, /):
        """
        Aligned option lines, each option name set shown once.
        """
        rows = []
        seen = set()
        for option in _order(option for command in commands for option in command.options):
            if option.hidden or seen & set(option.names):
                continue
            seen.update(option.names)

            key = Text.assemble(self._names(option, ", "))
            if typename := self.typename(option):
                key.append(" ").append_text(self._text(typename, "metavar"))

            value = Text()
            if option.descr:
                value.append_text(self._text(option.descr, "option-description"))
            if option.optional:
                value.append_text(self._text((", " if value else "") + "optional", "annotation"))
                if option.hint is not None:
                    value.append_text(self._text(f", default: {option.hint}", "annotation"))
            rows.append((key, value))

        width = max((len(key) for key, _ in rows), default=0)
        lines = []
        for key, value in rows:
            line = Text.assemble("    ", key, " " * (width - len(key)), "    ", value)
            line.rstrip()
            lines.append(line)
        return lines

    def build(self, commands, /):
        """
        Full help for the given command descriptors, framed by content().
        """
        commands = sorted(
            (command for command in commands if not command.hidden),
            key=lambda command: (not command.toplevel, command.order),
        )
        if not commands:
            return self.content(hooks=True)

        sections = []
        if self._descr:
            sections.append(Text.assemble(
                self._text("description", "section-label"), ":\n",
                "    ", self._text(self._descr, "description"),
            ))

        usage = Text.assemble(self._text("usage", "section-label"), ":\n")
        usage.append_text(Text("\n\n").join(self.usage(command) for command in commands))
        sections.append(usage)

        if rows := self.options(commands):
            options = Text.assemble(self._text("options", "section-label"), ":\n")
            options.append_text(Text("\n").join(rows))
            sections.append(options)

        return self.content(Text("\n\n").join(sections), hooks=True)

    def header(self):
        header = Text.assemble(
            self._text(self._prog, "program-name"), " ", self._text(self._version, "program-version"),
        )
        if self._copyright:
            header.append("\n").append_text(self._text(self._copyright, "copyright"))
        return header

    def content(self, content=Unset, /, *, hooks=False):
        """
        Frame content with the program header, the optional hooks and the tip.
        """
        renders = [self.header()]

        if hooks and self._prebuild is not None and (text := self._prebuild(self)):
            renders.append(self._text(text))
        if content:
            renders.append(self._text(content))
        if hooks and self._postbuild is not None and (text := self._postbuild(self)):
            renders.append(self._text(text))
        if self._tip:
            renders.append(self._text(f"run '{self._prog} -?' for help.", "tip"))

        renderable = Text("\n\n").join(renders)
        if self._fancy:
            return Panel(
                renderable,
                title=Text.assemble("[", " ", self._prog.upper(), " ", "]", style=self._styler("panel-title")),
                title_align="left",
            )
        return renderable

    def versioner(self):
        """
        Version block: "{prog} {version}" and the copyright line.
        """
        return self.header()

    def notice(self):
        """
        Completion notice printed after a successful handler.
        """
        return self.content(self._text("done.", "notice"))


__all__ = (
    "HelpBuilder",
    "TYPESTRINGS",
)
