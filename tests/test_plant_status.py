"""
Tests for plant status classification, filtering and sorting.
"""

from datetime import timedelta

from greenmate.models import PlantStatus
from greenmate.services.plant_status import (
    PlantFilter,
    SortOrder,
    care_schedule,
    filter_plants,
    sort_plants,
    status_of,
)
from conftest import NOW, make_plant


class TestStatusOf:
    def test_more_urgent_timer_wins(self):
        # Fertilize due in 5 days, water 1 day overdue
        plant = make_plant(water_days_ago=4, fertilize_days_ago=9)
        assert status_of(plant, NOW) is PlantStatus.OVERDUE

    def test_never_cared_for_needs_attention(self):
        assert status_of(make_plant(), NOW) is PlantStatus.NEEDS_ATTENTION

    def test_both_timers_in_future_is_healthy(self):
        plant = make_plant(water_days_ago=1, fertilize_days_ago=1)
        assert status_of(plant, NOW) is PlantStatus.HEALTHY

    def test_care_schedule_reports_both_timers(self):
        plant = make_plant(water_days_ago=3, fertilize_days_ago=4)
        schedule = care_schedule(plant, NOW)
        assert schedule.water_days_remaining == 0
        assert schedule.fertilize_days_remaining == 10
        assert schedule.status is PlantStatus.NEEDS_ATTENTION
        assert schedule.to_dict()["status"] == "needs_attention"

    def test_urgency_order(self):
        assert PlantStatus.OVERDUE.urgency > PlantStatus.NEEDS_ATTENTION.urgency > PlantStatus.HEALTHY.urgency


class TestFilterPlants:
    def setup_method(self):
        self.healthy = make_plant("Aloe", water_days_ago=0, fertilize_days_ago=0, location="Balcony")
        self.due = make_plant("Basil", water_days_ago=3, fertilize_days_ago=0, location="Living Room")
        self.overdue = make_plant("Cactus", water_days_ago=10, fertilize_days_ago=0, location="Garden")
        self.plants = [self.healthy, self.due, self.overdue]

    def test_all_keeps_order(self):
        assert filter_plants(self.plants, NOW) == self.plants

    def test_needs_attention_includes_overdue(self):
        assert filter_plants(self.plants, NOW, PlantFilter.NEEDS_ATTENTION) == [self.due, self.overdue]

    def test_healthy(self):
        assert filter_plants(self.plants, NOW, PlantFilter.HEALTHY) == [self.healthy]

    def test_query_matches_name_or_location(self):
        assert filter_plants(self.plants, NOW, query="bas") == [self.due]
        assert filter_plants(self.plants, NOW, query="GARDEN") == [self.overdue]

    def test_location_is_exact_case_insensitive(self):
        assert filter_plants(self.plants, NOW, location="living room") == [self.due]
        assert filter_plants(self.plants, NOW, location="Living") == []


class TestSortPlants:
    def test_name_ascending_ignores_case(self):
        plants = [make_plant("basil"), make_plant("Aloe"), make_plant("cactus")]
        assert [p.name for p in sort_plants(plants, NOW, SortOrder.NAME_ASC)] == ["Aloe", "basil", "cactus"]

    def test_name_descending(self):
        plants = [make_plant("basil"), make_plant("Aloe"), make_plant("cactus")]
        assert [p.name for p in sort_plants(plants, NOW, SortOrder.NAME_DESC)] == ["cactus", "basil", "Aloe"]

    def test_date_descending_puts_undated_last(self):
        old = make_plant("Old", created_at=NOW - timedelta(days=30))
        new = make_plant("New", created_at=NOW - timedelta(days=1))
        draft = make_plant("Draft")
        assert sort_plants([old, draft, new], NOW, SortOrder.DATE_DESC) == [new, old, draft]

    def test_status_healthy_first_then_name(self):
        healthy = make_plant("Zebra Fern", water_days_ago=0, fertilize_days_ago=0)
        due_b = make_plant("basil", water_days_ago=3, fertilize_days_ago=0)
        due_a = make_plant("Anise", water_days_ago=3, fertilize_days_ago=0)
        overdue = make_plant("Aloe", water_days_ago=9, fertilize_days_ago=0)
        result = sort_plants([overdue, due_b, healthy, due_a], NOW, SortOrder.STATUS)
        assert [p.name for p in result] == ["Zebra Fern", "Anise", "basil", "Aloe"]

    def test_status_overdue_sorts_after_healthy(self):
        overdue = make_plant("Zinnia", water_days_ago=9, fertilize_days_ago=0)
        healthy = make_plant("Aloe", water_days_ago=0, fertilize_days_ago=0)
        assert [p.name for p in sort_plants([overdue, healthy], NOW, SortOrder.STATUS)] == ["Aloe", "Zinnia"]

    def test_default_order_is_name_ascending(self):
        plants = [make_plant("cactus"), make_plant("Aloe")]
        assert [p.name for p in sort_plants(plants, NOW)] == ["Aloe", "cactus"]
