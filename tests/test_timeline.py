"""Tests for the compliance timeline."""
from datetime import date

from calculations import Scenario, assess
from timeline import build_timeline

START = date(2025, 1, 1)
SETTLEMENT = date(2025, 3, 15)


def keys(milestones):
    return [m.key for m in milestones]


class TestBuildTimeline:
    """Milestones for different buyers."""

    def test_foreign_new_dwelling(self):
        """FIRB milestones, settlement and vacancy returns in date order."""
        milestones = build_timeline(
            assess(Scenario("foreign", "newDwelling", 1_500_000, "NSW")), START, SETTLEMENT
        )
        by_key = {m.key: m for m in milestones}
        assert by_key["lodge"].due == START
        assert by_key["decision"].due == date(2025, 3, 2)
        assert by_key["approval_expiry"].due == date(2026, 3, 2)
        assert by_key["notify_settlement"].due == date(2025, 4, 14)
        assert [m.due for m in milestones] == sorted(m.due for m in milestones)
        returns = [m for m in milestones if m.recurring]
        assert [m.due for m in returns] == [date(2026, 3, 15), date(2027, 3, 15), date(2028, 3, 15)]

    def test_citizen_only_settles(self):
        """No FIRB steps for citizens; settlement defaults to ten weeks out."""
        milestones = build_timeline(assess(Scenario("australian", "established", 900_000, "VIC")), START)
        assert keys(milestones) == ["settlement"]
        assert milestones[0].due == date(2025, 3, 12)

    def test_not_allowed_has_no_timeline(self):
        assert build_timeline(assess(Scenario("foreign", "established", 900_000, "VIC")), START) == []

    def test_vacant_land_development_deadline(self):
        """Vacant land adds a construction deadline and no vacancy returns."""
        milestones = build_timeline(
            assess(Scenario("foreign", "vacantLand", 600_000, "QLD")), START, SETTLEMENT
        )
        by_key = {m.key: m for m in milestones}
        assert by_key["development_deadline"].due == date(2029, 3, 15)
        assert not any(m.recurring for m in milestones)

    def test_temporary_resident_sell_by(self):
        """Temporary residents get a sell-by date after visa expiry."""
        scenario = Scenario("temporary", "established", 700_000, "WA", visa_type="skilled")
        milestones = build_timeline(
            assess(scenario), START, SETTLEMENT, visa_expiry=date(2027, 6, 30), vacancy_years=1
        )
        by_key = {m.key: m for m in milestones}
        assert by_key["sell_by"].due == date(2027, 9, 30)
        assert by_key["vacancy_return_1"].due == date(2026, 3, 15)
        assert "vacancy_return_2" not in by_key

    def test_commercial_uses_longer_processing(self):
        """Commercial decisions are expected within 90 days."""
        milestones = build_timeline(
            assess(Scenario("foreign", "commercial", 2_000_000, "SA")), START, SETTLEMENT
        )
        by_key = {m.key: m for m in milestones}
        assert by_key["decision"].due == date(2025, 4, 1)
