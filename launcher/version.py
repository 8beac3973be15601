"""App launcher version registry.

Single source of truth for runtime versioning.
"""

from launcher.alias_table import ALIAS_TABLE_VERSION

CURRENT_VERSION = "1.2.0"
CURRENT_MILESTONE = "bank-qr-strategy-tiers"
CURRENT_DATE = "2026-10-12"

VERSION_HISTORY = [
    {
        "version": "1.0.0",
        "date": "2026-08-03",
        "notes": "Launch by identifier, browser hand-off, clipboard copy",
    },
    {
        "version": "1.1.0",
        "date": "2026-09-14",
        "notes": "URL, bank and text choosers",
    },
    {
        "version": "1.2.0",
        "date": CURRENT_DATE,
        "notes": "QR delivery tiers: deep link, data URI, launch with extras",
    },
]


def get_version():
    return {
        "version": CURRENT_VERSION,
        "milestone": CURRENT_MILESTONE,
        "date": CURRENT_DATE,
        "alias_table": ALIAS_TABLE_VERSION,
        "history": VERSION_HISTORY,
    }
