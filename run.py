#!/usr/bin/env python3
"""
Wrapper to run the compass from a source checkout without installing it.
"""
import os
import sys

# Add src to path FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    from compass.main import main

    sys.exit(main(sys.argv[1:]))
