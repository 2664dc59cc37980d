"""
Audience targeting for notifications and polls.

A target filter restricts who sees an item by state, constituency, gender
and age. Every non-empty criterion must hold (AND); inside a list criterion
any listed value matches (OR). A viewer missing the attribute a criterion
needs never matches it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

T = TypeVar("T")


def compute_age(birth_date: date, today: date | None = None) -> int:
    """Whole years elapsed since birth_date (birthday-aware)."""
    today = today or datetime.now(timezone.utc).date()
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


@dataclass(frozen=True)
class Viewer:
    """Demographic attributes of the person looking at an item."""

    state: Optional[str] = None
    constituency: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None

    @classmethod
    def from_user(cls, user: Any) -> "Viewer":
        """Build a viewer from a user profile (model or schema)."""
        birth_date = getattr(user, "date_of_birth", None)
        if isinstance(birth_date, datetime):
            birth_date = birth_date.date()
        return cls(
            state=getattr(user, "state", None),
            constituency=getattr(user, "constituency", None),
            gender=getattr(user, "gender", None),
            birth_date=birth_date,
        )

    def age(self, today: date | None = None) -> int | None:
        """Age in whole years, or None without a birth date."""
        if self.birth_date is None:
            return None
        return compute_age(self.birth_date, today)


ANONYMOUS = Viewer()


@dataclass(frozen=True)
class TargetFilter:
    """Demographic predicate attached to a notification or poll."""

    states: frozenset[str] = field(default_factory=frozenset)
    constituencies: frozenset[str] = field(default_factory=frozenset)
    genders: frozenset[str] = field(default_factory=frozenset)
    age_min: Optional[int] = None
    age_max: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Optional["TargetFilter"]:
        """
        Parse the stored JSON form.

        Accepts the legacy "gender" key alongside "genders".
        Returns None for a missing filter.
        """
        if data is None:
            return None
        genders = data.get("genders")
        if genders is None:
            genders = data.get("gender")
        return cls(
            states=frozenset(data.get("states") or ()),
            constituencies=frozenset(data.get("constituencies") or ()),
            genders=frozenset(genders or ()),
            age_min=data.get("age_min"),
            age_max=data.get("age_max"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the stored JSON form (sorted lists for stable output)."""
        return {
            "states": sorted(self.states),
            "constituencies": sorted(self.constituencies),
            "genders": sorted(self.genders),
            "age_min": self.age_min,
            "age_max": self.age_max,
        }

    @property
    def is_empty(self) -> bool:
        """An empty filter places no restriction on the audience."""
        return (
            not self.states
            and not self.constituencies
            and not self.genders
            and self.age_min is None
            and self.age_max is None
        )


def _in_set(value: Optional[str], allowed: frozenset[str]) -> bool:
    if not allowed:
        return True
    return value is not None and value in allowed


def matches(
    viewer: Viewer | None,
    target: TargetFilter | None,
    today: date | None = None,
) -> bool:
    """
    Decide whether viewer belongs to the target audience.

    An absent or empty filter matches everyone, including anonymous viewers.
    ``age_min > age_max`` is not an error here; it simply matches nobody.
    """
    if target is None or target.is_empty:
        return True

    viewer = viewer or ANONYMOUS

    if not _in_set(viewer.state, target.states):
        return False
    if not _in_set(viewer.constituency, target.constituencies):
        return False
    if not _in_set(viewer.gender, target.genders):
        return False

    if target.age_min is not None or target.age_max is not None:
        age = viewer.age(today)
        if age is None:
            return False
        if target.age_min is not None and age < target.age_min:
            return False
        if target.age_max is not None and age > target.age_max:
            return False

    return True


def filter_for_viewer(
    items: Iterable[T],
    viewer: Viewer | None,
    get_filters: Callable[[T], Mapping[str, Any] | None] = lambda item: getattr(item, "target_filters", None),
    today: date | None = None,
) -> list[T]:
    """Keep the items whose stored target filter matches viewer, preserving order."""
    return [item for item in items if matches(viewer, TargetFilter.from_dict(get_filters(item)), today)]
