"""System constants for collaborator identity resolution.

These constants define default tunables, scoring weights and the character
tables shared by the identity helpers."""

from __future__ import annotations

import re

# Lifetimes (seconds). Overridable through filtertube.config.
DEFAULT_PENDING_TTL_SECONDS = 30.0
DEFAULT_TRIGGER_TTL_SECONDS = 5.0
DEFAULT_REGISTRY_MAX_SIZE = 500
DEFAULT_RESOLVED_CACHE_MAX_SIZE = 5000

# Single-collaborator content never needs a disambiguation dialog
DEFAULT_MIN_DETAILED_COLLABORATORS = 2
DEFAULT_DIALOG_TITLE_PATTERN = "collaborator"

# Quality weights: every entry counts, then each populated identifier field.
# Only the ordering they produce matters to callers.
QUALITY_WEIGHTS = {
    "entry": 10,
    "name": 1,
    "handle": 3,
    "id": 5,
}

HANDLE_MARKER = "@"

# Characters that end a handle embedded in surrounding text
HANDLE_TERMINATOR_REGEX = re.compile(r"[/\s?#\"'<>&\u2022\u00B7]")

# Visually-equivalent punctuation folded to ASCII
HANDLE_GLYPH_NORMALIZERS = [
    (re.compile(r"[\u2018\u2019\u201A\u201B\u2032\uFF07]"), "'"),
    (re.compile(r"[\u201C\u201D\u2033\uFF02]"), '"'),
    (re.compile(r"[\u2013\u2014]"), "-"),
    (re.compile(r"\uFF0E"), "."),
    (re.compile(r"\uFF3F"), "_"),
]

# Zero-width and bidi control characters
ZERO_WIDTH_REGEX = re.compile(r"[\u200B-\u200F\u202A-\u202E\u2066-\u2069\uFEFF]")
PERCENT_ESCAPE_REGEX = re.compile(r"%[0-9A-Fa-f]{2}")

# Opaque channel IDs: "UC" + 22 URL-safe characters
OPAQUE_ID_LENGTH = 24
OPAQUE_ID_REGEX = re.compile(r"^UC[\w-]{22}$", re.IGNORECASE)
OPAQUE_ID_SEARCH_REGEX = re.compile(r"(UC[\w-]{22})", re.IGNORECASE)
CHANNEL_PATH_ID_REGEX = re.compile(r"(?:^|/)(?:channel/)?(UC[\w-]{22})", re.IGNORECASE)
