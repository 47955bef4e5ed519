# -*- coding: utf-8 -*-
"""Console logging helpers. Everything goes to stderr so stdout stays clean."""

import os
import sys

_debug = os.environ.get("CHAT_EXPORTER_DEBUG", "").lower() in ("1", "true", "yes")

def set_debug(enabled: bool):
    global _debug
    _debug = bool(enabled)

def is_debug() -> bool:
    return _debug

def log_debug(msg):
    if _debug:
        print(f"DEBUG: {msg}", file=sys.stderr)

def log_warn(msg):
    # Always show warnings unless we want to be very quiet
    print(f"WARN: {msg}", file=sys.stderr)

def log_error(msg):
    print(f"ERROR: {msg}", file=sys.stderr)

def alert(msg):
    """User-visible notice (the command-line counterpart of a browser alert)."""
    print(msg, file=sys.stderr)
