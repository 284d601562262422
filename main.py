from rich.pretty import pprint

from argschema import *

__prog__ = "forge"
__version__ = "0.1.0"


parser = Parser(descr="toy build tool", copyright="(c) forge authors", colorful=True)


@parser.register
@command("build", Single("-o", "--output", type=File, descr="artifact path"),
         Multiple("-s", "--sources", default=True, descr="files to compile"),
         Flag("-n", "--dry-run", optional=True, descr="only print the plan"),
         descr="compile sources into an artifact")
class Build(Handler):
    dry_run = False

    def handle(self, context):
        pprint({"output": self.output, "sources": self.sources, "dry_run": self.dry_run}, console=context.console)


@parser.register
@command("clean", Single("-c", "--cache", type=Switch, optional=True, hint="off"),
         descr="remove build outputs")
class Clean(Handler):
    cache = Switch.OFF

    def handle(self, context):
        context.console.print("cleaning" + " (cache too)" * bool(self.cache))


if __name__ == '__main__':
    parser.run()
