"""CLI frontend for lineloop.

Commands:
    lineloop            Start the interactive REPL

Example:
    $ lineloop
    > x = [1, 2, 3]
    > sum(x)
    6
    > :x
"""

from lineloop.frontends.cli.main import main

__all__ = ["main"]
