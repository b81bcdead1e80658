"""Matches a listed show to the closest rating candidate."""

import logging
from collections.abc import Sequence

from rapidfuzz.distance import Levenshtein

from cinestore.schemas.catalog import Rating, Show
from cinestore.utils.text import normalise_title, parse_year

logger = logging.getLogger(__name__)

YEAR_PENALTY = 0.1  # Added per year of release-year difference


def match_distance(rating: Rating, title: str, year: int | None = None) -> float:
    """
    Distance between a rating and a show title; lower is better.

    The base distance is the normalised Levenshtein distance between the
    normalised titles (0.0 identical, 1.0 nothing in common). When both
    release years are known, each year of difference adds YEAR_PENALTY.
    """
    distance = Levenshtein.normalized_distance(
        normalise_title(title), normalise_title(rating.title)
    )
    if year is not None and rating.release_year is not None:
        distance += YEAR_PENALTY * abs(rating.release_year - year)
    return distance


def best_rating_match(
    candidates: Sequence[Rating],
    title: str,
    year: int | None = None,
) -> tuple[Rating, float] | None:
    """
    Pick the candidate closest to a show.

    Args:
        candidates: Ratings returned by a search for the show title
        title: Show title as listed
        year: Release year of the show, if known

    Returns:
        (rating, distance) for the best candidate, or None without candidates.
        Ties keep the earliest candidate, which is the search engine's ranking.
    """
    if not candidates:
        return None

    scored = [(rating, match_distance(rating, title, year)) for rating in candidates]
    best = min(scored, key=lambda pair: pair[1])
    logger.debug(f"Best rating match for {title!r}: {best[0].slug} ({best[1]:.3f})")
    return best


def match_show(candidates: Sequence[Rating], show: Show) -> Show:
    """
    Link a show to its closest rating candidate.

    The show's release year is read from its release_at display date. Returns
    a copy with rating_slug and rating_match_score set, or the show unchanged
    when there are no candidates.
    """
    match = best_rating_match(candidates, show.title, parse_year(show.release_at))
    if match is None:
        return show
    rating, distance = match
    return show.model_copy(update={"rating_slug": rating.slug, "rating_match_score": distance})
