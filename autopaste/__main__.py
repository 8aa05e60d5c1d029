#!/usr/bin/env python3
"""
AutoPaste entry point for running as a module: python3 -m autopaste
"""

import sys
from autopaste.cli import main

if __name__ == '__main__':
    sys.exit(main())
