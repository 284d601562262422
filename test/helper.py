# python
"""
Help builder behavioral tests.

Scope
- Framing (header, hooks, tip), version block and completion notice.
- Value placeholders and session typestrings.
- Usage and options sections: ordering, visibility, alignment, de-duplication.

Conventions
- Test method names follow CamelCase per project convention.
- Renderables are compared through their plain text.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from rich.panel import Panel
from rich.text import Text

from argschema import Command, Flag, HelpBuilder, Multiple, Single, describe


class Target:
    pass


class Url:
    pass


BUILD = describe(Command(
    "build",
    Flag("-v", "--verbose", optional=True),
    Single("-o", "--output"),
    target=Target,
    descr="build the project",
))


def plain(renderable):
    return renderable.plain


class TestFraming(TestCase):
    def testHeader(self):
        self.assertEqual(plain(HelpBuilder("tool", "2.0.0").header()), "tool 2.0.0")
        self.assertEqual(
            plain(HelpBuilder("tool", "2.0.0", copyright="(c) someone").header()),
            "tool 2.0.0\n(c) someone",
        )

    def testVersioner(self):
        self.assertEqual(plain(HelpBuilder("tool", "2.0.0").versioner()), "tool 2.0.0")

    def testNotice(self):
        self.assertEqual(
            plain(HelpBuilder("tool", "2.0.0").notice()),
            "tool 2.0.0\n\ndone.\n\nrun 'tool -?' for help.",
        )

    def testNoticeWithoutTip(self):
        self.assertEqual(plain(HelpBuilder("tool", "2.0.0", tip=False).notice()), "tool 2.0.0\n\ndone.")

    def testHooksOnlyFrameHelp(self):
        builder = HelpBuilder("tool", "2.0.0", tip=False)
        builder.prebuild(lambda helper: f"before {helper.prog}")
        builder.postbuild(lambda helper: "after")

        help = plain(builder.build([BUILD]))
        self.assertTrue(help.startswith("tool 2.0.0\n\nbefore tool\n\n"))
        self.assertTrue(help.endswith("\n\nafter"))
        self.assertNotIn("before", plain(builder.notice()))

    def testHookMayReturnNothing(self):
        builder = HelpBuilder("tool", "2.0.0", tip=False)
        builder.prebuild(lambda helper: None)
        self.assertTrue(plain(builder.build([BUILD])).startswith("tool 2.0.0\n\nusage:"))

    def testHooksMustBeCallable(self):
        with self.assertRaises(TypeError):
            HelpBuilder("tool", "2.0.0").prebuild("text")
        with self.assertRaises(TypeError):
            HelpBuilder("tool", "2.0.0").postbuild(3)

    def testFancyFramesInPanel(self):
        self.assertIsInstance(HelpBuilder("tool", "2.0.0", fancy=True).notice(), Panel)

    def testColorfulKeepsText(self):
        colorful = HelpBuilder("tool", "2.0.0", colorful=True).build([BUILD])
        self.assertIsInstance(colorful, Text)
        self.assertEqual(colorful.plain, plain(HelpBuilder("tool", "2.0.0").build([BUILD])))


class TestTypename(TestCase):
    def setUp(self):
        self.builder = HelpBuilder("tool", "2.0.0")

    def testFlag(self):
        self.assertEqual(self.builder.typename(Flag("-v")), "")

    def testSingle(self):
        self.assertEqual(self.builder.typename(Single("-n", type=int)), "<int>")
        self.assertEqual(self.builder.typename(Single("-o")), "<string>")

    def testMultiple(self):
        self.assertEqual(self.builder.typename(Multiple("-i", max=3)), "<string>{1,3}")
        self.assertEqual(self.builder.typename(Multiple("-i")), "<string>{1,}")
        self.assertEqual(self.builder.typename(Multiple("-i", type=float, min=2, max=2)), "<real>{2}")

    def testUnknownTypeUsesItsName(self):
        self.assertEqual(self.builder.typename(Single("-u", type=Url)), "<Url>")

    def testSessionTypestring(self):
        self.builder.typestring(Url, "URL")
        self.assertEqual(self.builder.typename(Single("-u", type=Url)), "<URL>")
        self.assertEqual(HelpBuilder("tool", "2.0.0").typename(Single("-u", type=Url)), "<Url>")

    def testTypestringMustBeText(self):
        with self.assertRaises(TypeError):
            self.builder.typestring(Url, "")


class TestHelp(TestCase):
    def setUp(self):
        self.builder = HelpBuilder("Tool", "2.0.0", tip=False)

    def testUsageOrdersRequiredFirst(self):
        self.assertEqual(
            plain(self.builder.usage(BUILD)),
            "    build the project\n"
            "    tool build (-o | --output) <string>\n"
            "               [(-v | --verbose)]",
        )

    def testLoneFlagIsNotParenthesized(self):
        command = describe(Command(None, Flag("-q", "--quiet"), target=Target))
        self.assertEqual(plain(self.builder.usage(command)), "    tool -q | --quiet")

    def testOptionsAreAligned(self):
        lines = [plain(line) for line in self.builder.options([BUILD])]
        self.assertEqual(lines, [
            "    -o, --output <string>",
            "    -v, --verbose            optional",
        ])

    def testOptionAnnotations(self):
        command = describe(Command(
            None,
            Single("-l", "--level", type=int, optional=True, hint=3, descr="verbosity level"),
            target=Target,
        ))
        line, = self.builder.options([command])
        self.assertEqual(plain(line), "    -l, --level <int>    verbosity level, optional, default: 3")

    def testSharedOptionsShownOnce(self):
        other = describe(Command("clean", Flag("-v", "--verbose", optional=True), target=Target))
        lines = [plain(line) for line in self.builder.options([BUILD, other])]
        self.assertEqual(sum("--verbose" in line for line in lines), 1)

    def testHiddenEntriesSkipped(self):
        hidden = describe(Command("secret", Flag("-s", "--secret"), target=Target, hidden=True))
        visible = describe(Command("clean", Flag("-f", "--force", hidden=True), target=Target))
        help = plain(self.builder.build([hidden, visible]))
        self.assertNotIn("secret", help)
        self.assertNotIn("--force", help)
        self.assertIn("tool clean", help)

    def testTopLevelFirstThenOrder(self):
        first = describe(Command("zeta", target=Target, order=-1))
        second = describe(Command("alpha", target=Target, order=5))
        main = describe(Command(None, Flag("-q"), target=Target, order=10))
        help = plain(self.builder.build([second, first, main]))
        self.assertLess(help.index("tool -q"), help.index("tool zeta"))
        self.assertLess(help.index("tool zeta"), help.index("tool alpha"))

    def testSections(self):
        builder = HelpBuilder("tool", "2.0.0", descr="does things", tip=False)
        help = plain(builder.build([BUILD]))
        self.assertIn("description:\n    does things", help)
        self.assertIn("\n\nusage:\n", help)
        self.assertIn("\n\noptions:\n", help)
        self.assertLess(help.index("description:"), help.index("usage:"))
        self.assertLess(help.index("usage:"), help.index("options:"))


if __name__ == "__main__":
    unittest.main()
