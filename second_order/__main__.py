"""
Main entry point for the second_order package.

Allows running the crawler as: python -m second_order
"""

import sys

from second_order.cli import main

if __name__ == "__main__":
    sys.exit(main())
