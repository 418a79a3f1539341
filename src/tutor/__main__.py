"""Allow ``python -m tutor``."""

from tutor.cli.app import main

main()
