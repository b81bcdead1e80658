"""Text normalization utilities for rating title matching."""

import re
import unicodedata

# Screening labels a cinema chain puts around a film title
_PREFIXES = [
    r"^Preview:\s+",
    r"^Sneak Preview:\s+",
    r"^Premiere:\s+",
    r"^Ladies Night:\s+",
    r"^Classic:\s+",
]


def normalise_title(title: str) -> str:
    """
    Normalize a film title for matching.

    Removes common variations to improve matching accuracy:
    - Year suffixes: "Film (2024)" → "Film"
    - Version tags: "Film (OV)", "Film [IMAX]" → "Film"
    - Dash suffixes: "Film - Sing-along" → "Film"
    - Screening prefixes: "Preview: Film" → "Film"
    - Accents, case and extra whitespace

    Args:
        title: Raw film title

    Returns:
        Normalized, lowercase title suitable for matching
    """
    title = title.strip()

    # Dash suffixes first so "Film (1999) - Remastered" can lose its year too.
    # Requires whitespace around the dash to keep titles like "Spider-Man".
    title = re.sub(r"\s+[-–—]\s+\S.*$", "", title)

    # Year suffixes: "Title (2024)"
    title = re.sub(r"\s*\(\d{4}\)\s*$", "", title)

    # Square bracket tags anywhere: "Title [IMAX]"
    title = re.sub(r"\s*\[[^\]]+\]\s*", " ", title)

    # Trailing non-numeric parentheticals: "Title (OV)", "Title (NL)"
    title = re.sub(r"\s*\([^)]*(?<!\d)\)\s*$", "", title)

    for prefix in _PREFIXES:
        title = re.sub(prefix, "", title, flags=re.IGNORECASE)

    # Strip accents: "Amélie" → "Amelie"
    title = unicodedata.normalize("NFKD", title)
    title = "".join(char for char in title if not unicodedata.combining(char))

    title = re.sub(r"\s+", " ", title)

    return title.strip().lower()


def parse_year(value: str | None) -> int | None:
    """
    Extract a four-digit year from a display date.

    Accepts whatever a listing publishes ("2024-03-14", "14 maart 2024").
    Returns None when no year is present.
    """
    if not value:
        return None
    match = re.search(r"\b(1[89]\d{2}|2\d{3})\b", value)
    return int(match.group(1)) if match else None
