"""Unit tests for rating matching."""

import pytest

from cinestore.schemas import Rating, Show
from cinestore.services.rating_matcher import (
    YEAR_PENALTY,
    best_rating_match,
    match_distance,
    match_show,
)


def make_rating(slug: str, title: str, release_year: int | None = None) -> Rating:
    return Rating(slug=slug, title=title, release_year=release_year)


class TestMatchDistance:
    def test_identical_title_is_zero(self) -> None:
        assert match_distance(make_rating("dune", "Dune"), "Dune") == 0.0

    def test_ignores_listing_decorations(self) -> None:
        assert match_distance(make_rating("dune", "Dune"), "Dune (OV)") == 0.0

    def test_year_difference_adds_penalty(self) -> None:
        rating = make_rating("dune_1984", "Dune", 1984)
        assert match_distance(rating, "Dune", 2021) == pytest.approx(YEAR_PENALTY * 37)

    def test_year_ignored_when_unknown(self) -> None:
        rating = make_rating("dune", "Dune")
        assert match_distance(rating, "Dune", 2021) == 0.0

    def test_different_titles_score_higher(self) -> None:
        rating = make_rating("barbie", "Barbie")
        assert match_distance(rating, "Oppenheimer") > 0.5


class TestBestRatingMatch:
    def test_returns_none_without_candidates(self) -> None:
        assert best_rating_match([], "Dune") is None

    def test_prefers_matching_year(self) -> None:
        old = make_rating("dune_1984", "Dune", 1984)
        new = make_rating("dune_2021", "Dune", 2021)

        rating, distance = best_rating_match([old, new], "Dune", 2021)

        assert rating is new
        assert distance == 0.0

    def test_prefers_closer_title(self) -> None:
        sequel = make_rating("dune_part_two", "Dune: Part Two", 2024)
        original = make_rating("dune_2021", "Dune", 2021)

        rating, _ = best_rating_match([original, sequel], "Dune: Part Two", 2024)

        assert rating is sequel

    def test_ties_keep_first_candidate(self) -> None:
        first = make_rating("a", "Heat")
        second = make_rating("b", "Heat")

        rating, _ = best_rating_match([first, second], "Heat")

        assert rating is first


class TestMatchShow:
    def make_show(self, title: str, release_at: str | None = None) -> Show:
        return Show(slug="dune", title=title, release_at=release_at, movie_type="movie", duration=155)

    def test_links_best_rating(self) -> None:
        old = make_rating("dune_1984", "Dune", 1984)
        new = make_rating("dune_2021", "Dune", 2021)

        show = match_show([old, new], self.make_show("Dune", "2021-09-16"))

        assert show.rating_slug == "dune_2021"
        assert show.rating_match_score == 0.0

    def test_year_read_from_display_date(self) -> None:
        old = make_rating("dune_1984", "Dune", 1984)
        new = make_rating("dune_2021", "Dune", 2021)

        show = match_show([new, old], self.make_show("Dune", "14 december 1984"))

        assert show.rating_slug == "dune_1984"

    def test_unchanged_without_candidates(self) -> None:
        show = self.make_show("Dune")

        assert match_show([], show) is show
        assert show.rating_slug is None
