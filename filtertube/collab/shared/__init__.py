"""Shared identity helpers"""

from __future__ import annotations

from .identity import (
    ChannelInput,
    canonicalize_channel_input,
    collaborators_match,
    decode_percent,
    extract_opaque_id,
    extract_raw_handle,
    identity_keys,
    is_opaque_id,
    normalize_glyphs,
    normalize_handle,
    normalize_name,
    normalize_opaque_id,
)

__all__ = [
    "ChannelInput",
    "canonicalize_channel_input",
    "collaborators_match",
    "decode_percent",
    "extract_opaque_id",
    "extract_raw_handle",
    "identity_keys",
    "is_opaque_id",
    "normalize_glyphs",
    "normalize_handle",
    "normalize_name",
    "normalize_opaque_id",
]
