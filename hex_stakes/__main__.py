"""Allow running the package as a module: python -m hex_stakes"""

import sys

from hex_stakes.cli import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
