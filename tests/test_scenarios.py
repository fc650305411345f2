"""Tests for saved scenarios and comparisons."""
import json
from datetime import datetime

import pytest

import scenarios
from constants import AustralianState, PropertyType
from calculations import Scenario, assess
from errors import ComputationOverflowError, InvalidArgumentError
from scenarios import (
    calculate_savings,
    compare_property_types,
    compare_states,
    default_name,
    delete_scenario,
    find_cheapest_option,
    find_lowest_cost,
    merge_scenarios,
    rename_scenario,
    save_scenario,
    scenarios_from_json,
    scenarios_to_json,
)


@pytest.fixture
def nsw_new():
    return Scenario("foreign", "newDwelling", 1_500_000, "NSW")


@pytest.fixture
def saved_pair(nsw_new):
    saved = save_scenario([], "Sydney", nsw_new)
    return save_scenario(saved, "Darwin", nsw_new.with_changes(state="NT"))


class TestSaveScenario:
    """Adding, naming and limiting saved scenarios."""

    def test_save_returns_new_list(self, nsw_new):
        """The input list is not mutated."""
        saved = []
        result = save_scenario(saved, "First", nsw_new, now=datetime(2025, 1, 1))
        assert saved == []
        assert len(result) == 1
        assert result[0].name == "First"
        assert result[0].created_at == datetime(2025, 1, 1)
        assert result[0].first_year_total == 228_950

    def test_blank_name_gets_default(self, nsw_new):
        """Blank names become 'Scenario N'."""
        result = save_scenario([], "   ", nsw_new)
        assert result[0].name == "Scenario 1"

    def test_duplicate_name_rejected(self, saved_pair, nsw_new):
        """Names must be unique."""
        with pytest.raises(InvalidArgumentError):
            save_scenario(saved_pair, "Sydney", nsw_new)

    def test_limit_of_five(self, nsw_new):
        """At most five scenarios can be saved."""
        saved = []
        for i in range(5):
            saved = save_scenario(saved, f"S{i}", nsw_new)
        with pytest.raises(InvalidArgumentError):
            save_scenario(saved, "One too many", nsw_new)

    def test_ids_are_unique(self, saved_pair):
        assert saved_pair[0].id != saved_pair[1].id

    def test_default_name_reuses_first_free_number(self, nsw_new):
        """After deleting Scenario 1 the next blank save takes its number."""
        saved = save_scenario([], "", nsw_new)
        saved = save_scenario(saved, "", nsw_new)
        assert [s.name for s in saved] == ["Scenario 1", "Scenario 2"]
        saved = delete_scenario(saved, saved[0].id)
        assert default_name(saved) == "Scenario 1"
        saved = save_scenario(saved, "", nsw_new)
        assert [s.name for s in saved] == ["Scenario 2", "Scenario 1"]


class TestManageScenarios:
    """Delete, rename and rank."""

    def test_delete(self, saved_pair):
        """Deleting removes only the matching id."""
        result = delete_scenario(saved_pair, saved_pair[0].id)
        assert [s.name for s in result] == ["Darwin"]
        assert len(saved_pair) == 2

    def test_rename(self, saved_pair):
        """Renaming keeps the id and assessment."""
        target = saved_pair[1]
        result = rename_scenario(saved_pair, target.id, "Top End")
        assert result[1].name == "Top End"
        assert result[1].id == target.id
        assert result[1].assessment == target.assessment

    def test_rename_to_existing_name_rejected(self, saved_pair):
        with pytest.raises(InvalidArgumentError):
            rename_scenario(saved_pair, saved_pair[1].id, "Sydney")

    def test_rename_to_blank_rejected(self, saved_pair):
        with pytest.raises(InvalidArgumentError):
            rename_scenario(saved_pair, saved_pair[1].id, " ")

    def test_lowest_cost(self, saved_pair):
        """NT has no foreign surcharges, so it is cheapest."""
        assert find_lowest_cost(saved_pair).name == "Darwin"
        assert find_lowest_cost([]) is None

    def test_savings_against_most_expensive(self, saved_pair):
        """Savings are measured against the most expensive scenario."""
        sydney, darwin = saved_pair
        assert calculate_savings(sydney, saved_pair) == 0
        assert calculate_savings(darwin, saved_pair) == pytest.approx(
            sydney.first_year_total - darwin.first_year_total
        )
        assert calculate_savings(sydney, [sydney]) == 0


class TestComparisons:
    """Re-invoking the calculator across states and property types."""

    def test_compare_states_sorted(self, nsw_new):
        """Every state appears once, cheapest first."""
        rows = compare_states(nsw_new)
        assert {r.state for r in rows} == set(AustralianState)
        totals = [r.total_cost for r in rows]
        assert totals == sorted(totals)

    def test_compare_states_savings(self, nsw_new):
        """Savings are relative to the scenario's own state."""
        rows = {r.state: r for r in compare_states(nsw_new)}
        assert rows[AustralianState.NSW].savings == 0
        assert rows[AustralianState.NT].savings > 0

    def test_compare_property_types(self, nsw_new):
        """Blocked types are flagged rather than dropped."""
        rows = {r.property_type: r for r in compare_property_types(nsw_new)}
        assert len(rows) == len(PropertyType)
        assert rows[PropertyType.ESTABLISHED].allowed is False
        assert rows[PropertyType.NEW_DWELLING].savings == 0

    def test_compare_property_types_propagates_errors(self, nsw_new, monkeypatch):
        """A calculation error for one type is raised, not hidden."""
        real_assess = scenarios.assess

        def failing_assess(scenario):
            if scenario.property_type is PropertyType.COMMERCIAL:
                raise ComputationOverflowError("overflow", field="purchase_price")
            return real_assess(scenario)

        monkeypatch.setattr(scenarios, "assess", failing_assess)
        with pytest.raises(ComputationOverflowError):
            compare_property_types(nsw_new)

    def test_cheapest_option_is_allowed(self, nsw_new):
        """The cheapest option never points at a blocked purchase."""
        best = find_cheapest_option(nsw_new)
        assert best.eligibility.allowed
        assert best.fees.first_year_total <= assess(nsw_new).fees.first_year_total
        for row in compare_states(nsw_new):
            assert best.fees.first_year_total <= row.total_cost


class TestExportImport:
    """JSON export and import."""

    def test_round_trip(self, saved_pair):
        """Exported scenarios import with the same names and totals."""
        restored = scenarios_from_json(scenarios_to_json(saved_pair))
        assert [s.name for s in restored] == ["Sydney", "Darwin"]
        assert [s.id for s in restored] == [s.id for s in saved_pair]
        assert [s.first_year_total for s in restored] == [s.first_year_total for s in saved_pair]

    def test_fees_recalculated_on_import(self, saved_pair):
        """Tampered totals in the file are ignored."""
        records = json.loads(scenarios_to_json(saved_pair))
        records[0]["fees"]["firstYearTotal"] = 1
        restored = scenarios_from_json(json.dumps(records))
        assert restored[0].first_year_total == 228_950

    def test_invalid_json(self):
        with pytest.raises(InvalidArgumentError):
            scenarios_from_json("{not json")

    def test_not_a_list(self):
        with pytest.raises(InvalidArgumentError):
            scenarios_from_json('{"name": "x"}')

    def test_missing_inputs(self):
        with pytest.raises(InvalidArgumentError):
            scenarios_from_json('[{"name": "x"}]')

    def test_scenario_not_an_object(self):
        """A record whose scenario is not an object is rejected cleanly."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            scenarios_from_json('[{"name": "x", "scenario": "oops"}]')
        assert exc_info.value.field == "payload"

    def test_record_not_an_object(self):
        with pytest.raises(InvalidArgumentError):
            scenarios_from_json('["oops"]')

    def test_bytes_payload(self, saved_pair):
        """Uploaded files arrive as UTF-8 bytes."""
        restored = scenarios_from_json(scenarios_to_json(saved_pair).encode("utf-8"))
        assert [s.name for s in restored] == ["Sydney", "Darwin"]

    def test_non_utf8_bytes_rejected(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            scenarios_from_json(b"\xff\xfe\x00")
        assert exc_info.value.field == "payload"


class TestMergeScenarios:
    """Adding imported scenarios to the saved list."""

    def test_duplicate_names_in_file_are_renamed(self, nsw_new):
        """Two imported records named 'A' do not both stay 'A'."""
        payload = json.dumps([
            {"name": "A", "scenario": nsw_new.to_dict()},
            {"name": "A", "scenario": nsw_new.to_dict()},
        ])
        merged = merge_scenarios([], scenarios_from_json(payload))
        assert [s.name for s in merged] == ["A", "A (2)"]
        assert merged[0].id != merged[1].id

    def test_reimport_gets_new_ids_and_names(self, saved_pair):
        """Importing an export back into the same list keeps everything unique."""
        merged = merge_scenarios(saved_pair, scenarios_from_json(scenarios_to_json(saved_pair)))
        assert [s.name for s in merged] == ["Sydney", "Darwin", "Sydney (2)", "Darwin (2)"]
        assert len({s.id for s in merged}) == 4
        assert merged[:2] == saved_pair

    def test_existing_scenarios_kept(self, saved_pair, nsw_new):
        imported = save_scenario([], "Perth", nsw_new.with_changes(state="WA"))
        merged = merge_scenarios(saved_pair, imported)
        assert [s.name for s in merged] == ["Sydney", "Darwin", "Perth"]
        assert len(saved_pair) == 2

    def test_over_limit_rejected(self, nsw_new):
        """Nothing is dropped: the whole import fails instead."""
        saved = []
        for name in ("One", "Two", "Three"):
            saved = save_scenario(saved, name, nsw_new)
        imported = scenarios_from_json(scenarios_to_json(saved))
        with pytest.raises(InvalidArgumentError):
            merge_scenarios(saved, imported)
        assert [s.name for s in saved] == ["One", "Two", "Three"]
