"""Entry point for running bicep-docs as a module."""

import sys

from bicepdocs.cli_entry import main

if __name__ == "__main__":
    sys.exit(main())
