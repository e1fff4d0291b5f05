"""Allow ``python -m jstyle``."""

import sys

from jstyle.cli import main

if __name__ == '__main__':
    sys.exit(main())
