"""Allow ``python -m instructkit_cli``."""

import sys

from instructkit_cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
