"""Channel identity parsing and normalization.

Pure helpers shared by every component that compares identities:
- handles are canonicalized to a lowercase ``@handle`` key
- opaque channel IDs (``UC`` + 22 characters) are a separate identifier class
- display names get a loose key (case and whitespace insensitive)

None of these functions raise on malformed input; they return an empty
result instead."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import NamedTuple
from urllib.parse import unquote, urlsplit

from ..core.constants import (
    CHANNEL_PATH_ID_REGEX,
    HANDLE_GLYPH_NORMALIZERS,
    HANDLE_MARKER,
    HANDLE_TERMINATOR_REGEX,
    OPAQUE_ID_REGEX,
    OPAQUE_ID_SEARCH_REGEX,
    PERCENT_ESCAPE_REGEX,
    ZERO_WIDTH_REGEX,
)
from ..core.models import Collaborator

logger = logging.getLogger(__name__)


class ChannelInput(NamedTuple):
    """Typed canonical form of arbitrary channel input."""

    kind: str  # "ucid", "handle" or "unknown"
    value: str


def normalize_glyphs(value: str) -> str:
    """Fold visually-equivalent Unicode punctuation to ASCII."""
    for pattern, replacement in HANDLE_GLYPH_NORMALIZERS:
        value = pattern.sub(replacement, value)
    return value


def decode_percent(value: str) -> str:
    """Decode percent-escapes until the value is stable.

    Every pass that changes the value shortens it, so the loop ends. Invalid
    UTF-8 sequences leave the value as it was before that pass.
    """
    while PERCENT_ESCAPE_REGEX.search(value):
        try:
            decoded = unquote(value, errors="strict")
        except UnicodeDecodeError:
            break
        if decoded == value:
            break
        value = decoded
    return value


def _cut_at_terminator(value: str) -> str:
    match = HANDLE_TERMINATOR_REGEX.search(value)
    return value[: match.start()] if match else value


def _scan_handle_body(text: str) -> str:
    """Collect characters up to the first terminator, keeping %XX escapes intact."""
    buffer: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "%" and PERCENT_ESCAPE_REGEX.match(text, i):
            buffer.append(text[i : i + 3])
            i += 3
            continue
        if HANDLE_TERMINATOR_REGEX.match(char):
            break
        buffer.append(char)
        i += 1
    return "".join(buffer)


def _clean_handle_body(body: str) -> str:
    body = decode_percent(body)
    body = ZERO_WIDTH_REGEX.sub("", body)
    body = normalize_glyphs(body)
    return _cut_at_terminator(body.strip())


def extract_raw_handle(value: str | None) -> str:
    """Extract a display handle from any string containing ``@...``.

    Returns the handle with its original casing (e.g. ``@SomeHandle``) or an
    empty string. Use normalize_handle() for a comparison key.
    """
    if not value or not isinstance(value, str):
        return ""
    working = value.strip()
    marker_index = working.find(HANDLE_MARKER)
    if marker_index == -1:
        return ""

    body = _scan_handle_body(working[marker_index + 1 :])
    if not body:
        return ""

    body = _clean_handle_body(body)
    if not body:
        return ""
    return f"{HANDLE_MARKER}{body}"


def normalize_handle(raw: str | None) -> str | None:
    """Canonicalize a handle for comparison and storage.

    Examples:
        "@Foo/videos" -> "@foo"
        "https://www.youtube.com/@F%6Fo" -> "@foo"
        "UCxxxxxxxxxxxxxxxxxxxxxx" -> None (opaque IDs are not handles)

    Returns:
        Lowercase ``@handle`` or None when nothing usable remains
    """
    if not raw or not isinstance(raw, str):
        return None
    working = raw.strip()
    if not working:
        return None

    raw_handle = extract_raw_handle(working)
    if raw_handle:
        working = raw_handle
    else:
        # Free text without a marker: the whole string is the candidate body
        working = _clean_handle_body("".join(working.split()))

    working = working.lstrip(HANDLE_MARKER)
    working = working.split("/")[0]
    working = "".join(working.split())
    if not working:
        return None

    if OPAQUE_ID_REGEX.match(working):
        return None

    return f"{HANDLE_MARKER}{working.lower()}"


def extract_opaque_id(value: str | None) -> str | None:
    """Find an opaque channel ID inside arbitrary text, preserving its casing."""
    if not value or not isinstance(value, str):
        return None
    match = OPAQUE_ID_SEARCH_REGEX.search(value.strip())
    return match.group(1) if match else None


def normalize_opaque_id(value: str | None) -> str | None:
    """Lowercase comparison key for an opaque channel ID, or None."""
    found = extract_opaque_id(value)
    return found.lower() if found else None


def is_opaque_id(value: str | None) -> bool:
    """True if ``value`` contains a valid opaque channel ID."""
    return extract_opaque_id(value) is not None


def normalize_name(value: str | None) -> str | None:
    """Loose display-name key: trimmed, lowercase, single-spaced."""
    if not value or not isinstance(value, str):
        return None
    cleaned = normalize_glyphs(ZERO_WIDTH_REGEX.sub("", value))
    cleaned = " ".join(cleaned.strip().lower().split())
    return cleaned or None


def canonicalize_channel_input(value: str | None) -> ChannelInput:
    """Convert user input (URL, @handle, UC id, channel/UC...) into a typed form."""
    if not isinstance(value, str):
        return ChannelInput("unknown", "")
    cleaned = value.strip()
    if not cleaned:
        return ChannelInput("unknown", "")

    cleaned = decode_percent(cleaned)

    path_candidate = cleaned
    lowered = cleaned.lower()
    if lowered.startswith(("http://", "https://")):
        path_candidate = urlsplit(cleaned).path or cleaned
    elif lowered.startswith("www.") or "youtube.com/" in lowered or "youtu.be/" in lowered:
        path_candidate = urlsplit(f"https://{cleaned}").path or cleaned

    id_match = CHANNEL_PATH_ID_REGEX.search(path_candidate or cleaned)
    if id_match:
        return ChannelInput("ucid", id_match.group(1))

    raw_handle = extract_raw_handle(path_candidate) or extract_raw_handle(cleaned)
    if raw_handle:
        handle = normalize_handle(raw_handle)
        if handle:
            return ChannelInput("handle", handle)

    return ChannelInput("unknown", cleaned)


def identity_keys(collaborator: Collaborator) -> set[str]:
    """All comparison keys a collaborator can be matched by."""
    keys: set[str] = set()
    opaque = normalize_opaque_id(collaborator.id)
    if opaque:
        keys.add(f"id:{opaque}")
    handle = normalize_handle(collaborator.handle) if collaborator.handle else None
    if handle:
        keys.add(f"handle:{handle}")
    name = normalize_name(collaborator.name)
    if name:
        keys.add(f"name:{name}")
    return keys


def _mapped(channel_map: Mapping[str, str] | None, key: str | None) -> str:
    if not channel_map or not key:
        return ""
    value = channel_map.get(key.lower())
    return value if isinstance(value, str) else ""


def _linked_by_map(
    channel_map: Mapping[str, str] | None,
    opaque: str | None,
    handle: str | None,
) -> bool:
    """True if the map ties an opaque ID to a handle, in either direction."""
    if not channel_map or not (opaque and handle):
        return False
    if normalize_handle(_mapped(channel_map, opaque)) == handle:
        return True
    return normalize_opaque_id(_mapped(channel_map, handle)) == opaque


def collaborators_match(
    a: Collaborator | None,
    b: Collaborator | None,
    channel_map: Mapping[str, str] | None = None,
) -> bool:
    """Check whether two collaborators describe the same channel.

    Matches on opaque ID, handle, loose name, or a name equal to the other
    side's handle without the marker. With a ``channel_map`` (lowercase
    opaque ID or ``@handle`` to its counterpart) an ID on one side also
    matches the mapped handle on the other.
    """
    if a is None or b is None:
        return False

    a_id, b_id = normalize_opaque_id(a.id), normalize_opaque_id(b.id)
    if a_id and b_id and a_id == b_id:
        return True

    a_handle = normalize_handle(a.handle) if a.handle else None
    b_handle = normalize_handle(b.handle) if b.handle else None
    if a_handle and b_handle and a_handle == b_handle:
        return True

    a_name, b_name = normalize_name(a.name), normalize_name(b.name)
    if a_name and b_name and a_name == b_name:
        return True

    if a_name and b_handle and b_handle[1:] == a_name:
        return True
    if b_name and a_handle and a_handle[1:] == b_name:
        return True

    if _linked_by_map(channel_map, a_id, b_handle) or _linked_by_map(channel_map, b_id, a_handle):
        return True

    return False
