"""Allow ``python -m lineloop``."""

from lineloop.frontends.cli.main import main

main()
