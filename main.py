#!/usr/bin/env python3
"""
tenor
Application entry point
"""

from tenor.cli import main


if __name__ == "__main__":
    main()
