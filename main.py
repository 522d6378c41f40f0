#!/usr/bin/env python3
"""
xlsx translator - Main entry point

Translates the text cells of an xlsx workbook using a dictionary of known
terms and an OpenAI model for everything else.
"""

import sys

from xlsx_translator.cli import main

if __name__ == "__main__":
    sys.exit(main())
