#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chat Exporter - Export a DeepSeek conversation to Markdown, PDF or PNG.

Reads the chat page from a saved HTML file, the clipboard, or a live
browser session, rebuilds the conversation as Markdown and writes the
requested export. Run ``python run.py --help`` for the commands.
"""

import sys

from chat_exporter.cli import main

if __name__ == "__main__":
    sys.exit(main())
