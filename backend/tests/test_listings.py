"""Tests for the aggregated property listing."""

from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from realty.core.errors import FetchError
from realty.models import VisitStatus
from realty.services.listings import (
    OUTER_JOIN,
    TWO_STEP,
    aggregate_listings,
    fetch_properties_excluding,
    fetch_properties_with_visits,
    get_listing,
    select_current_visit,
)

NOW = datetime(2026, 3, 10, 9, 0)
STRATEGIES = [OUTER_JOIN, TWO_STEP]


def ids(items) -> list[int]:
    return [item.id for item in items]


@pytest.fixture
def seeded(make_property, make_visit):
    """Four properties, two of them with visits; ``newest`` is created last."""
    oldest = make_property(age=4, city="Olinda")
    visited_old = make_property(age=3, city="Recife")
    visited_new = make_property(age=2, city="Recife", kind="sale")
    newest = make_property(age=1, city="Jaboatão")
    make_visit(visited_old, NOW + timedelta(days=2), client_name="Ana")
    make_visit(visited_new, NOW + timedelta(days=1), client_name="Bruno")
    make_visit(visited_new, NOW + timedelta(days=5), client_name="Carla")
    return SimpleNamespace(oldest=oldest, visited_old=visited_old, visited_new=visited_new, newest=newest)


class TestSelectCurrentVisit:
    def visit(self, id, scheduled_at):
        return SimpleNamespace(id=id, scheduled_at=scheduled_at)

    def test_no_visits(self):
        assert select_current_visit([], NOW) is None

    def test_soonest_upcoming_wins_regardless_of_order(self):
        later = self.visit(1, NOW + timedelta(days=3))
        sooner = self.visit(2, NOW + timedelta(hours=2))
        past = self.visit(3, NOW - timedelta(days=1))
        assert select_current_visit([later, past, sooner], NOW) is sooner

    def test_falls_back_to_most_recent_past_visit(self):
        old = self.visit(1, NOW - timedelta(days=10))
        recent = self.visit(2, NOW - timedelta(days=1))
        assert select_current_visit([recent, old], NOW) is recent

    def test_same_time_breaks_tie_by_id(self):
        a = self.visit(7, NOW + timedelta(days=1))
        b = self.visit(4, NOW + timedelta(days=1))
        assert select_current_visit([a, b], NOW) is b


class TestFetches:
    def test_with_visits_only_returns_visited_properties(self, db, seeded):
        result = fetch_properties_with_visits(db)
        assert ids(result) == [seeded.visited_new.id, seeded.visited_old.id]

    def test_excluding_empty_id_list_returns_everything(self, db, make_property):
        props = [make_property(age=age) for age in (3, 2, 1)]
        assert fetch_properties_with_visits(db) == []
        result = fetch_properties_excluding(db, [])
        assert ids(result) == [p.id for p in reversed(props)]

    def test_excluding_removes_given_ids(self, db, seeded):
        result = fetch_properties_excluding(db, [seeded.visited_old.id, seeded.visited_new.id])
        assert ids(result) == [seeded.newest.id, seeded.oldest.id]


@pytest.mark.parametrize("strategy", STRATEGIES)
class TestAggregateListings:
    def test_visited_first_then_rest_newest_first(self, db, seeded, strategy):
        result = aggregate_listings(db, strategy=strategy, now=NOW)
        assert ids(result) == [
            seeded.visited_new.id,
            seeded.visited_old.id,
            seeded.newest.id,
            seeded.oldest.id,
        ]

    def test_each_property_appears_once(self, db, seeded, strategy):
        result = aggregate_listings(db, strategy=strategy, now=NOW)
        assert len(ids(result)) == len(set(ids(result))) == 4

    def test_attaches_exactly_one_visit_to_visited_properties(self, db, seeded, strategy):
        by_id = {item.id: item for item in aggregate_listings(db, strategy=strategy, now=NOW)}
        assert by_id[seeded.visited_new.id].current_visit.client_name == "Bruno"
        assert by_id[seeded.visited_old.id].current_visit.client_name == "Ana"
        assert by_id[seeded.newest.id].current_visit is None
        assert by_id[seeded.oldest.id].current_visit is None

    def test_no_visits_at_all(self, db, make_property, strategy):
        make_property(age=2)
        make_property(age=1)
        result = aggregate_listings(db, strategy=strategy, now=NOW)
        assert len(result) == 2
        assert all(item.current_visit is None for item in result)

    def test_empty_backend(self, db, strategy):
        assert aggregate_listings(db, strategy=strategy, now=NOW) == []


def test_strategies_agree(db, seeded):
    assert aggregate_listings(db, strategy=OUTER_JOIN, now=NOW) == aggregate_listings(db, strategy=TWO_STEP, now=NOW)


def test_unknown_strategy_is_rejected(db):
    with pytest.raises(ValueError):
        aggregate_listings(db, strategy="three_step")


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_backend_failure_raises_fetch_error(strategy):
    session = MagicMock()
    session.scalars.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))
    with pytest.raises(FetchError) as excinfo:
        aggregate_listings(session, strategy=strategy)
    assert isinstance(excinfo.value.__cause__, OperationalError)


class TestDisplayStatus:
    def test_scheduled_visit_shows_date(self, db, make_property, make_visit):
        prop = make_property()
        make_visit(prop, datetime(2026, 3, 12, 14, 30))
        item = get_listing(db, prop.id, now=NOW)
        assert item.display_status == "Scheduled - 12/03 at 14:30"

    def test_negotiating_visit(self, db, make_property, make_visit):
        prop = make_property()
        make_visit(prop, NOW + timedelta(days=1), status=VisitStatus.negotiating)
        assert get_listing(db, prop.id, now=NOW).display_status == "Negotiating"

    def test_completed_visit_falls_back_to_property_status(self, db, make_property, make_visit):
        prop = make_property(status="reserved")
        make_visit(prop, NOW - timedelta(days=1), status=VisitStatus.completed)
        assert get_listing(db, prop.id, now=NOW).display_status == "reserved"

    def test_missing_property(self, db):
        assert get_listing(db, 999) is None
