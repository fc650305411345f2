"""Tests for the cost optimiser."""
import pytest

from constants import AustralianState, PropertyType
from calculations import Scenario
from optimizer import (
    city_for,
    optimize,
    optimize_property_type,
    optimize_state,
    optimize_structure,
    optimize_timing,
)


class TestPropertyType:
    """Established vs new dwelling."""

    def test_foreign_buyer_steered_to_new(self):
        """Foreign buyers cannot buy established, so new is recommended."""
        result = optimize_property_type(Scenario("foreign", "established", 1_000_000, "NSW"))
        assert result.established_allowed is False
        assert result.recommendation is PropertyType.NEW_DWELLING

    def test_equal_costs_keep_established(self):
        """With no saving, established stays the recommendation."""
        scenario = Scenario("temporary", "established", 1_000_000, "NSW", visa_type="student")
        result = optimize_property_type(scenario)
        assert result.established_allowed is True
        assert result.savings == 0
        assert result.recommendation is PropertyType.ESTABLISHED


class TestStateArbitrage:
    """Cheaper states for the same purchase."""

    def test_other_states_by_savings(self):
        """Current state is excluded and rows are ordered by savings."""
        result = optimize_state(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        assert len(result.comparisons) == 7
        assert all(r.state is not AustralianState.NSW for r in result.comparisons)
        savings = [r.savings for r in result.comparisons]
        assert savings == sorted(savings, reverse=True)
        assert result.max_savings == savings[0]
        assert len(result.top3) == 3
        assert result.current_cost == 228_950

    def test_city_names(self):
        assert city_for(AustralianState.WA) == "Perth"


class TestTiming:
    """Waiting for permanent residency."""

    @pytest.mark.parametrize("status", ["australian", "permanent"])
    def test_not_applicable_to_residents(self, status):
        """Citizens and PRs have nothing to wait for."""
        assert optimize_timing(Scenario(status, "established", 1_000_000, "NSW")) is None

    def test_foreign_buyer_savings(self):
        """Buying as a PR avoids every foreign buyer charge."""
        result = optimize_timing(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        assert result.pr_cost == 65_550
        assert result.total_savings == pytest.approx(163_400)

    def test_pathways_ranked_by_monthly_savings(self):
        """The shortest pathway saves the most per month."""
        result = optimize_timing(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        assert result.pathways[0].visa_code == "189-Skilled"
        assert result.pathways[0].worth_it is True
        assert result.pathways[-1].visa_code == "491-Regional"
        assert result.pathways[-1].worth_it is False

    def test_opportunity_costs(self):
        """Three growth scenarios for each of the top three pathways."""
        result = optimize_timing(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        assert len(result.opportunity_costs) == 9
        quick = result.opportunity_costs[0]
        assert quick.months_to_wait == 12
        assert quick.price_increase == pytest.approx(45_000)
        assert quick.still_worth_it is True


class TestStructure:
    """Joint, company and trust ownership."""

    def test_options_ranked_by_savings(self):
        """Joint purchase halves both the dutiable share and the surcharge."""
        result = optimize_structure(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        assert result.current_cost == 211_950
        assert [o.structure for o in result.options] == [
            "Joint Purchase (50/50 with Australian)",
            "Australian Company (with Australian directors)",
            "Discretionary Trust",
        ]
        joint, company, trust = result.options
        assert joint.stamp_duty == pytest.approx(56_960)
        assert joint.surcharge == pytest.approx(60_000)
        assert joint.total_cost == pytest.approx(143_360)
        assert company.total_cost == pytest.approx(156_950)
        assert trust.savings == pytest.approx(-3_000)
        assert result.best_option is joint
        assert result.max_savings == pytest.approx(68_590)

    def test_ongoing_costs_and_advice(self):
        """Every option carries its running cost, risks and a legal advice flag."""
        result = optimize_structure(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        company = result.options[1]
        assert company.setup_cost == 5_000
        assert company.annual_cost == 3_000
        assert all(o.legal_advice_required and o.risks for o in result.options)

    @pytest.mark.parametrize("status,prop", [
        ("australian", "newDwelling"),
        ("permanent", "established"),
        ("foreign", "established"),
    ])
    def test_not_applicable_without_firb(self, status, prop):
        """Nothing to restructure when FIRB approval is not needed or the purchase is blocked."""
        assert optimize_structure(Scenario(status, prop, 1_500_000, "NSW")) is None


class TestOptimize:
    """Full optimisation report."""

    def test_vacant_land_skips_property_type(self):
        """Property type optimisation only covers dwellings."""
        report = optimize(Scenario("foreign", "vacantLand", 800_000, "VIC"))
        assert report.property_type is None

    def test_total_potential_savings(self):
        """Only positive savings are added up."""
        report = optimize(Scenario("foreign", "newDwelling", 1_500_000, "NSW"))
        expected = (
            max(0, report.state_arbitrage.max_savings)
            + max(0, report.property_type.savings)
            + max(0, report.timing.total_savings)
            + max(0, report.structure.max_savings)
        )
        assert report.total_potential_savings == pytest.approx(expected)
        assert report.total_potential_savings > 0
