"""Allow running as ``python -m shelfmark``."""

import sys

from shelfmark.cli import main

if __name__ == "__main__":
    sys.exit(main())
