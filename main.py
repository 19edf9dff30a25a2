#!/usr/bin/env python3
"""
main.py - Quick-start entry point.

    python main.py build target.jpg tiles/ -o output/mosaic.png
    python main.py chop sheet.png -o pieces/ -x 32 -y 32

Or use the installed script:

    photo-mosaic --help
"""

from photo_mosaic.cli import app

if __name__ == "__main__":
    app()
