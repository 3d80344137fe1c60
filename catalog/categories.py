"""Static category tables.

Command rows carry a numeric category code; the display names below are the
closed set shipped with the data build. Basic categories get a short
description keyed by their title.
"""

from types import MappingProxyType
from typing import Optional

UNKNOWN_CATEGORY = "Other"

CATEGORY_NAMES = MappingProxyType({
    1: "Miscellaneous",
    2: "System information",
    3: "System control",
    4: "Users & Groups",
    5: "Files & Folders",
    6: "Games",
    7: "Input",
    8: "Printing",
    9: "JSON",
    10: "Network",
    11: "Search & Find",
    12: "GIT",
    13: "SSH",
    14: "Video & Audio",
    15: "Package manager",
    16: "Hacking tools",
    17: "Terminal games",
    18: "Crypto currencies",
    19: "VIM Texteditor",
    20: "Emacs Texteditor",
    21: "Nano Texteditor",
    22: "Pico Texteditor",
    23: "Micro Texteditor",
})

# Reverse index for name lookups, lower-cased
_CODES_BY_NAME = MappingProxyType({name.lower(): code for code, name in CATEGORY_NAMES.items()})

BASIC_CATEGORY_DESCRIPTIONS = MappingProxyType({
    "One-liners": "Useful linux command line one liners",
    "System information": "System and battery/cpu/memory/disk usage info on Linux",
    "System control": "Lock, unlock, start/stop bluetooth/wifi, shutdown, reboot system",
    "Users & Groups": "Create, delete, user, group, list, info",
    "Files & Folders": "File and directory operations",
    "Input": "Move, click, mouse, type, text, xdotool, ydotool, read, copy, clipboard",
    "Printing": "Printer management and printing commands",
    "JSON": "JSON processing and manipulation tools",
    "Network": "Network configuration and tools",
    "Search & Find": "Search and find files and content",
    "GIT": "Git version control commands",
    "SSH": "SSH connection and key management",
    "Video & Audio": "Video and audio processing tools",
    "Package manager": "Package management commands",
    "Hacking tools": "Security testing and hacking tools",
    "Terminal games": "Games that run in the terminal",
    "Crypto currencies": "Cryptocurrency related commands",
    "VIM Texteditor": "VIM text editor commands and shortcuts",
    "Emacs Texteditor": "Emacs text editor commands and shortcuts",
    "Nano Texteditor": "Nano text editor commands and shortcuts",
    "Pico Texteditor": "Pico text editor commands and shortcuts",
    "Micro Texteditor": "Micro text editor commands and shortcuts",
})


def category_name(code) -> str:
    """Display name for a category code; unknown codes map to ``"Other"``."""
    try:
        return CATEGORY_NAMES.get(int(code), UNKNOWN_CATEGORY)
    except (TypeError, ValueError):
        return UNKNOWN_CATEGORY


def category_code(name: str) -> Optional[int]:
    """Case-insensitive reverse lookup. Returns None for unknown names."""
    if not name:
        return None
    return _CODES_BY_NAME.get(name.strip().lower())


def basic_category_description(title: str) -> Optional[str]:
    return BASIC_CATEGORY_DESCRIPTIONS.get(title)
