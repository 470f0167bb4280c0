from __future__ import annotations

PERMITTED_EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F600, 0x1F64F),  # Emoticons
    (0x1F300, 0x1F5FF),  # Misc Symbols and Pictographs
    (0x1F680, 0x1F6FF),  # Transport and Map
    (0x2600, 0x26FF),  # Misc Symbols
    (0x2700, 0x27BF),  # Dingbats
    (0xFE00, 0xFE0F),  # Variation Selectors
    (0x1F900, 0x1F9FF),  # Supplemental Symbols and Pictographs
    (0x1F1E6, 0x1F1FF),  # Regional Indicator Symbols (flags)
)


def is_permitted_emoji(char: str) -> bool:
    code_point = ord(char)
    return any(low <= code_point <= high for low, high in PERMITTED_EMOJI_RANGES)


def is_permitted_emoji_string(value: str) -> bool:
    """True when every code point of ``value`` is in an allowed emoji block.

    The check runs on the raw code points without normalization, so the empty
    string passes; callers that need a non-empty reaction reject it themselves.
    """
    return all(is_permitted_emoji(char) for char in value)
