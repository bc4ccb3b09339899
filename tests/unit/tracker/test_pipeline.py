"""Tests for list derivation: search, status filter, sort and pagination."""

import random
from datetime import date, timedelta

import pytest

from src.tracker.models import ApplicationStatus
from src.tracker.pipeline import (
    ALL_STATUSES,
    ListQuery,
    SortDirection,
    SortKey,
    clamp_page,
    count_pages,
    derive_page,
    filter_records,
    paginate,
    parse_status_filter,
    sort_records,
)

STATUSES = list(ApplicationStatus)
WORDS = ["Acme", "Globex", "Initech", "remote", "Berlin", "Data", "Dev", "ops"]


@pytest.fixture
def random_applications(make_application):
    """A reproducible mixed set of applications, archived ones included."""
    rng = random.Random(1234)
    return [
        make_application(
            company=f"{rng.choice(WORDS)} {rng.choice(WORDS)}",
            position=rng.choice(WORDS),
            location=rng.choice(WORDS),
            status=rng.choice(STATUSES),
            date_applied=date(2024, 1, 1) + timedelta(days=rng.randint(0, 60)),
        )
        for _ in range(60)
    ]


class TestSearchFilter:
    """Text search over company, position and location."""

    def test_empty_query_keeps_everything_visible(self, make_application):
        apps = [make_application(), make_application(company="Globex")]

        assert filter_records(apps, "") == apps

    @pytest.mark.parametrize("query", ["acme", "ACME", "cm"])
    def test_matches_company_case_insensitively(self, make_application, query):
        acme = make_application(company="Acme Corp")
        other = make_application(company="Globex")

        assert filter_records([acme, other], query) == [acme]

    def test_matches_position_and_location(self, make_application):
        by_position = make_application(company="A", position="Data Engineer")
        by_location = make_application(company="B", position="Dev", location="Berlin")
        neither = make_application(company="C", position="Dev", location="Paris")

        result = filter_records([by_position, by_location, neither], "er")

        assert result == [by_position, by_location]

    def test_search_does_not_look_at_notes(self, make_application):
        app = make_application(notes="python")

        assert filter_records([app], "python") == []

    @pytest.mark.parametrize("query", ["", "a", "DE", "remote", "zzz", "ops"])
    def test_result_partitions_on_the_query(self, random_applications, query):
        """Kept rows contain the query somewhere; dropped visible rows contain it nowhere."""
        result = filter_records(random_applications, query)
        kept_ids = {app.id for app in result}
        needle = query.lower()

        for app in random_applications:
            fields = (app.company.lower(), app.position.lower(), app.location.lower())
            contains = any(needle in value for value in fields)
            if app.id in kept_ids:
                assert contains
            elif not app.status.is_archived:
                assert not contains


class TestStatusFilter:
    """Status filter semantics."""

    def test_all_excludes_archived(self, make_application):
        applied = make_application(status=ApplicationStatus.APPLIED)
        archived = make_application(status=ApplicationStatus.ARCHIVED)

        assert filter_records([applied, archived], status_filter=ALL_STATUSES) == [
            applied
        ]

    def test_archived_filter_shows_only_archived(self, make_application):
        applied = make_application(status=ApplicationStatus.APPLIED)
        archived = make_application(status=ApplicationStatus.ARCHIVED)

        result = filter_records(
            [applied, archived], status_filter=ApplicationStatus.ARCHIVED
        )

        assert result == [archived]

    def test_all_with_empty_query_is_a_permutation_of_visible(
        self, random_applications
    ):
        visible = [a for a in random_applications if not a.status.is_archived]

        page = derive_page(
            random_applications, ListQuery(page_size=len(random_applications))
        )

        assert sorted(a.id for a in page.items) == sorted(a.id for a in visible)

    @pytest.mark.parametrize("status", STATUSES)
    def test_specific_status_is_exact_and_idempotent(
        self, random_applications, status
    ):
        once = filter_records(random_applications, status_filter=status)
        twice = filter_records(once, status_filter=status)

        assert all(app.status == status for app in once)
        assert twice == once

    def test_interview_scenario(self, make_application):
        apps = [
            make_application(status=ApplicationStatus.APPLIED),
            make_application(status=ApplicationStatus.APPLIED),
            make_application(status=ApplicationStatus.INTERVIEW),
            make_application(status=ApplicationStatus.OFFER),
            make_application(status=ApplicationStatus.REJECTED),
        ]

        page = derive_page(
            apps,
            ListQuery(status_filter=ApplicationStatus.INTERVIEW, page_size=12),
        )

        assert page.items == [apps[2]]
        assert page.total_count == 1
        assert page.total_pages == 1


class TestParseStatusFilter:
    """Parsing filter selections from text."""

    @pytest.mark.parametrize("raw", [None, "", "  ", "all", "ALL"])
    def test_all_variants(self, raw):
        assert parse_status_filter(raw) == ALL_STATUSES

    def test_status_value(self):
        assert parse_status_filter("offer") == ApplicationStatus.OFFER

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            parse_status_filter("pending")


class TestSorting:
    """Stable single-field sort."""

    def test_date_sorts_by_calendar_value(self, make_application):
        # Would sort the other way as unpadded strings
        late = make_application(date_applied=date(2024, 10, 2))
        early = make_application(date_applied=date(2024, 9, 30))

        result = sort_records([late, early], SortKey.DATE, SortDirection.ASC)

        assert result == [early, late]

    def test_date_descending_is_exact_reverse_without_ties(self, make_application):
        apps = [
            make_application(date_applied=date(2024, 1, 1) + timedelta(days=d))
            for d in (5, 1, 9, 3, 7)
        ]

        ascending = sort_records(apps, SortKey.DATE, SortDirection.ASC)
        descending = sort_records(apps, SortKey.DATE, SortDirection.DESC)

        assert descending == list(reversed(ascending))

    def test_company_sort_ignores_case(self, make_application):
        apps = [
            make_application(company="beta"),
            make_application(company="Alpha"),
            make_application(company="gamma"),
        ]

        result = sort_records(apps, SortKey.COMPANY, SortDirection.ASC)

        assert [a.company for a in result] == ["Alpha", "beta", "gamma"]

    def test_accented_names_sort_with_their_base_letter(self, make_application):
        apps = [
            make_application(company=name)
            for name in ("Zeta", "Émile", "Alpha", "ebay")
        ]

        ascending = sort_records(apps, SortKey.COMPANY, SortDirection.ASC)
        descending = sort_records(apps, SortKey.COMPANY, SortDirection.DESC)

        assert [a.company for a in ascending] == ["Alpha", "ebay", "Émile", "Zeta"]
        assert [a.company for a in descending] == ["Zeta", "Émile", "ebay", "Alpha"]

    def test_accent_only_differences_are_ordered_consistently(self, make_application):
        plain = make_application(position="Resume Writer")
        accented = make_application(position="Résumé Writer")

        forward = sort_records([plain, accented], SortKey.POSITION, SortDirection.ASC)
        backward = sort_records([accented, plain], SortKey.POSITION, SortDirection.ASC)

        assert forward == backward

    def test_position_and_status_keys(self, make_application):
        a = make_application(position="QA", status=ApplicationStatus.REJECTED)
        b = make_application(position="Dev", status=ApplicationStatus.APPLIED)

        assert sort_records([a, b], SortKey.POSITION, SortDirection.ASC) == [b, a]
        assert sort_records([a, b], SortKey.STATUS, SortDirection.ASC) == [b, a]

    @pytest.mark.parametrize("direction", list(SortDirection))
    def test_ties_keep_input_order(self, make_application, direction):
        first = make_application(company="Same", id="first")
        second = make_application(company="Same", id="second")
        third = make_application(company="Same", id="third")

        result = sort_records([first, second, third], SortKey.COMPANY, direction)

        assert [a.id for a in result] == ["first", "second", "third"]

    def test_sort_does_not_mutate_input(self, make_application):
        apps = [make_application(company="b"), make_application(company="a")]
        snapshot = list(apps)

        sort_records(apps, SortKey.COMPANY, SortDirection.ASC)

        assert apps == snapshot


class TestPagination:
    """Page slicing and page counts."""

    @pytest.mark.parametrize(
        ("count", "size", "pages"),
        [(0, 12, 0), (1, 12, 1), (12, 12, 1), (13, 12, 2), (5, 2, 3), (48, 48, 1)],
    )
    def test_count_pages(self, count, size, pages):
        assert count_pages(count, size) == pages

    def test_page_beyond_last_is_empty(self, make_application):
        apps = [make_application() for _ in range(3)]

        assert paginate(apps, 3, 2) == []

    @pytest.mark.parametrize(
        ("page", "total", "expected"),
        [(0, 5, 1), (-3, 5, 1), (3, 5, 3), (9, 5, 5), (4, 0, 1)],
    )
    def test_clamp_page(self, page, total, expected):
        assert clamp_page(page, total) == expected

    @pytest.mark.parametrize("page_size", [6, 12, 24, 48])
    def test_pages_concatenate_to_full_sequence(self, random_applications, page_size):
        query = ListQuery(sort_key=SortKey.COMPANY, page_size=page_size)
        full = derive_page(
            random_applications, ListQuery(sort_key=SortKey.COMPANY, page_size=1000)
        ).items

        first = derive_page(random_applications, query)
        pages = [
            derive_page(random_applications, ListQuery(
                sort_key=SortKey.COMPANY, page_size=page_size, page=n
            )).items
            for n in range(1, first.total_pages + 1)
        ]
        beyond = derive_page(random_applications, ListQuery(
            sort_key=SortKey.COMPANY,
            page_size=page_size,
            page=first.total_pages + 1,
        ))

        assert [app for page in pages for app in page] == full
        assert beyond.items == []
        assert beyond.total_count == len(full)

    def test_five_records_in_pages_of_two(self, make_application):
        apps = [
            make_application(date_applied=date(2024, 1, day), id=f"d{day}")
            for day in (3, 5, 1, 4, 2)
        ]

        def page(n):
            return derive_page(
                apps,
                ListQuery(
                    sort_key=SortKey.DATE,
                    direction=SortDirection.DESC,
                    page_size=2,
                    page=n,
                ),
            )

        assert [a.id for a in page(1).items] == ["d5", "d4"]
        assert [a.id for a in page(3).items] == ["d1"]
        assert page(4).items == []
        assert page(1).total_pages == 3

    def test_page_flags(self, make_application):
        apps = [make_application() for _ in range(5)]

        first = derive_page(apps, ListQuery(page_size=2, page=1))
        last = derive_page(apps, ListQuery(page_size=2, page=3))

        assert not first.has_previous and first.has_next
        assert last.has_previous and not last.has_next

    def test_empty_input(self):
        page = derive_page([], ListQuery())

        assert page.items == []
        assert page.total_count == 0
        assert page.total_pages == 0
