"""
Tests for audience targeting.
"""

from datetime import date, datetime

import pytest

from services.audience_filter import (
    ANONYMOUS,
    TargetFilter,
    Viewer,
    compute_age,
    filter_for_viewer,
    matches,
)

TODAY = date(2025, 6, 15)


def _viewer(**kwargs) -> Viewer:
    defaults = {
        "state": "Kerala",
        "constituency": "Ernakulam",
        "gender": "Female",
        "birth_date": date(2000, 1, 1),
    }
    defaults.update(kwargs)
    return Viewer(**defaults)


@pytest.mark.unit
class TestComputeAge:
    def test_birthday_already_passed(self) -> None:
        assert compute_age(date(2000, 6, 1), TODAY) == 25

    def test_birthday_later_this_year(self) -> None:
        assert compute_age(date(2000, 6, 16), TODAY) == 24

    def test_birthday_today(self) -> None:
        assert compute_age(date(2007, 6, 15), TODAY) == 18

    def test_viewer_without_birth_date_has_no_age(self) -> None:
        assert Viewer().age(TODAY) is None


@pytest.mark.unit
class TestMatches:
    """Test the audience predicate."""

    @pytest.mark.parametrize(
        "viewer",
        [ANONYMOUS, _viewer(), Viewer(gender="Male"), None],
    )
    def test_absent_filter_matches_everyone(self, viewer) -> None:
        assert matches(viewer, None, TODAY) is True

    @pytest.mark.parametrize("viewer", [ANONYMOUS, _viewer(), None])
    def test_empty_filter_matches_everyone(self, viewer) -> None:
        assert matches(viewer, TargetFilter(), TODAY) is True
        assert matches(viewer, TargetFilter.from_dict({}), TODAY) is True
        assert matches(viewer, TargetFilter.from_dict({"states": [], "genders": []}), TODAY) is True

    def test_state_not_listed_never_matches(self) -> None:
        target = TargetFilter(
            states=frozenset({"Tamil Nadu"}),
            genders=frozenset({"Female"}),
            constituencies=frozenset({"Ernakulam"}),
        )
        assert matches(_viewer(state="Kerala"), target, TODAY) is False

    def test_state_and_gender_scenario(self) -> None:
        target = TargetFilter.from_dict({"states": ["Kerala"], "gender": ["Female"]})

        assert matches(Viewer(state="Kerala", gender="Female"), target, TODAY) is True
        assert matches(Viewer(state="Kerala", gender="Male"), target, TODAY) is False

    def test_any_listed_state_matches(self) -> None:
        target = TargetFilter(states=frozenset({"Lagos", "Kerala"}))
        assert matches(_viewer(state="Lagos"), target, TODAY) is True

    def test_missing_attribute_fails_closed(self) -> None:
        target = TargetFilter(constituencies=frozenset({"Ernakulam"}))
        assert matches(_viewer(constituency=None), target, TODAY) is False

    def test_anonymous_viewer_excluded_by_any_restriction(self) -> None:
        assert matches(ANONYMOUS, TargetFilter(genders=frozenset({"Female"})), TODAY) is False
        assert matches(None, TargetFilter(age_min=18), TODAY) is False

    def test_age_bounds_without_birth_date_fail_closed(self) -> None:
        target = TargetFilter(age_min=18, age_max=30)
        assert matches(_viewer(birth_date=None), target, TODAY) is False

    @pytest.mark.parametrize(
        "birth_date, expected",
        [
            (date(2007, 6, 15), True),  # turns 18 today
            (date(2007, 6, 16), False),  # 17
            (date(1994, 6, 16), True),  # still 30
            (date(1994, 6, 15), False),  # 31 today
        ],
    )
    def test_age_bounds_are_inclusive(self, birth_date, expected) -> None:
        target = TargetFilter(age_min=18, age_max=30)
        assert matches(_viewer(birth_date=birth_date), target, TODAY) is expected

    def test_zero_age_min_is_a_real_bound(self) -> None:
        target = TargetFilter(age_min=0)
        assert matches(_viewer(birth_date=None), target, TODAY) is False
        assert matches(_viewer(), target, TODAY) is True

    def test_inverted_age_range_matches_nobody(self) -> None:
        target = TargetFilter(age_min=40, age_max=20)
        for year in (1970, 1995, 2010):
            assert matches(_viewer(birth_date=date(year, 1, 1)), target, TODAY) is False


@pytest.mark.unit
class TestTargetFilterParsing:
    def test_none_stays_none(self) -> None:
        assert TargetFilter.from_dict(None) is None

    def test_genders_preferred_over_legacy_key(self) -> None:
        target = TargetFilter.from_dict({"genders": ["Male"], "gender": ["Female"]})
        assert target.genders == frozenset({"Male"})

    def test_to_dict_is_sorted(self) -> None:
        target = TargetFilter(states=frozenset({"Lagos", "Abia"}))
        assert target.to_dict()["states"] == ["Abia", "Lagos"]
        assert TargetFilter.from_dict(target.to_dict()) == target


@pytest.mark.unit
class TestViewer:
    def test_from_user_reads_profile_fields(self) -> None:
        class Profile:
            state = "Lagos"
            constituency = None
            gender = "Male"
            date_of_birth = datetime(1999, 2, 3, 10, 0)

        viewer = Viewer.from_user(Profile())
        assert viewer == Viewer(state="Lagos", gender="Male", birth_date=date(1999, 2, 3))


@pytest.mark.unit
class TestFilterForViewer:
    def test_keeps_order_and_drops_non_matching(self) -> None:
        items = [
            {"id": 1, "target_filters": None},
            {"id": 2, "target_filters": {"states": ["Lagos"]}},
            {"id": 3, "target_filters": {"states": ["Kerala"]}},
            {"id": 4, "target_filters": {}},
        ]
        visible = filter_for_viewer(items, _viewer(), get_filters=lambda i: i["target_filters"], today=TODAY)
        assert [i["id"] for i in visible] == [1, 3, 4]

    def test_anonymous_sees_only_untargeted(self) -> None:
        items = [
            {"id": 1, "target_filters": None},
            {"id": 2, "target_filters": {"genders": ["Female"]}},
        ]
        visible = filter_for_viewer(items, None, get_filters=lambda i: i["target_filters"], today=TODAY)
        assert [i["id"] for i in visible] == [1]
