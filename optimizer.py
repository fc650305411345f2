"""
Australian FIRB Foreign Buyer Calculator - Cost Optimiser

Suggests ways to reduce foreign buyer costs: a different property type, a
different state, waiting for permanent residency, or a different ownership
structure.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from constants import (
    CAPITAL_CITIES,
    GROWTH_SCENARIOS,
    PURCHASE_STRUCTURES,
    VISA_PATHWAYS,
    AustralianState,
    CitizenshipStatus,
    FirbResult,
    PropertyType,
)
from calculations import Assessment, Scenario, assess, lookup_stamp_duty
from scenarios import StateComparison, compare_states

logger = logging.getLogger(__name__)


@dataclass
class PropertyTypeOptimization:
    current_type: PropertyType
    established_cost: float
    new_cost: float
    savings: float  # established - new
    savings_percent: float
    recommendation: PropertyType
    established_allowed: bool


@dataclass
class StateArbitrage:
    current_state: AustralianState
    current_cost: float
    comparisons: list[StateComparison]

    @property
    def best_alternative(self) -> Optional[StateComparison]:
        return self.comparisons[0] if self.comparisons else None

    @property
    def max_savings(self) -> float:
        return self.comparisons[0].savings if self.comparisons else 0.0

    @property
    def top3(self) -> list[StateComparison]:
        return self.comparisons[:3]


@dataclass
class PathwayOption:
    visa_code: str
    description: str
    months_to_wait: int
    total_savings: float
    monthly_savings: float
    worth_it: bool


@dataclass
class OpportunityCost:
    """Fees saved by waiting vs. price growth over the wait."""
    growth_rate: float
    label: str
    pathway: str
    months_to_wait: int
    fees_saved: float
    price_increase: float
    net_position: float

    @property
    def still_worth_it(self) -> bool:
        return self.net_position > 0


@dataclass
class TimingOptimization:
    current_cost: float
    pr_cost: float
    total_savings: float
    savings_percent: float
    pathways: list[PathwayOption] = field(default_factory=list)
    opportunity_costs: list[OpportunityCost] = field(default_factory=list)


@dataclass
class StructureOption:
    structure: str
    description: str
    stamp_duty: float
    surcharge: float
    setup_cost: float
    annual_cost: float
    total_cost: float  # Upfront, comparable to the current grand total
    savings: float
    savings_percent: float
    risks: tuple
    legal_advice_required: bool = True


@dataclass
class StructureOptimization:
    current_cost: float
    options: list[StructureOption]

    @property
    def best_option(self) -> Optional[StructureOption]:
        return self.options[0] if self.options else None

    @property
    def max_savings(self) -> float:
        return self.options[0].savings if self.options else 0.0


@dataclass
class OptimizationReport:
    current: Assessment
    property_type: Optional[PropertyTypeOptimization]
    state_arbitrage: StateArbitrage
    timing: Optional[TimingOptimization]
    structure: Optional[StructureOptimization] = None

    @property
    def total_potential_savings(self) -> float:
        """Best case: every non-negative saving combined."""
        total = max(0.0, self.state_arbitrage.max_savings)
        if self.property_type is not None:
            total += max(0.0, self.property_type.savings)
        if self.timing is not None:
            total += max(0.0, self.timing.total_savings)
        if self.structure is not None:
            total += max(0.0, self.structure.max_savings)
        return total


# =============================================================================
# 1. PROPERTY TYPE
# =============================================================================

def optimize_property_type(scenario: Scenario) -> PropertyTypeOptimization:
    """Compare an established dwelling with a new one at the same price and state."""
    established = assess(scenario.with_changes(property_type=PropertyType.ESTABLISHED))
    new = assess(scenario.with_changes(property_type=PropertyType.NEW_DWELLING))

    established_cost = established.fees.first_year_total
    new_cost = new.fees.first_year_total
    savings = established_cost - new_cost
    established_allowed = established.eligibility.result is not FirbResult.NOT_ALLOWED

    if not established_allowed or savings > 0:
        recommendation = PropertyType.NEW_DWELLING
    else:
        recommendation = PropertyType.ESTABLISHED

    return PropertyTypeOptimization(
        current_type=scenario.property_type,
        established_cost=established_cost,
        new_cost=new_cost,
        savings=savings,
        savings_percent=(savings / established_cost * 100) if established_cost else 0.0,
        recommendation=recommendation,
        established_allowed=established_allowed,
    )


# =============================================================================
# 2. STATE ARBITRAGE
# =============================================================================

def optimize_state(scenario: Scenario) -> StateArbitrage:
    """Every other state, sorted by savings (highest first)."""
    current_cost = assess(scenario).fees.first_year_total
    others = [row for row in compare_states(scenario) if row.state is not scenario.state]
    others.sort(key=lambda row: row.savings, reverse=True)
    return StateArbitrage(
        current_state=scenario.state,
        current_cost=current_cost,
        comparisons=others,
    )


def city_for(state: AustralianState) -> str:
    return CAPITAL_CITIES.get(state, state.value)


# =============================================================================
# 3. TIMING (waiting for permanent residency)
# =============================================================================

def optimize_timing(scenario: Scenario) -> Optional[TimingOptimization]:
    """
    Savings from buying as a permanent resident instead.

    Returns None for buyers who already pay no foreign buyer costs.
    """
    if scenario.citizenship_status in (CitizenshipStatus.AUSTRALIAN, CitizenshipStatus.PERMANENT):
        return None

    current_cost = assess(scenario).fees.first_year_total
    pr_scenario = scenario.with_changes(
        citizenship_status=CitizenshipStatus.PERMANENT,
        visa_type=None,
        is_ordinarily_resident=True,
        vacant_more_than_six_months=False,
    )
    pr_cost = assess(pr_scenario).fees.first_year_total
    total_savings = current_cost - pr_cost

    pathways = []
    for code, (months, description) in VISA_PATHWAYS.items():
        pathways.append(PathwayOption(
            visa_code=code,
            description=description,
            months_to_wait=months,
            total_savings=total_savings,
            monthly_savings=total_savings / months,
            # Reasonable wait if it saves more than $50k within two years
            worth_it=months <= 24 and total_savings > 50_000,
        ))
    pathways.sort(key=lambda p: p.monthly_savings, reverse=True)

    opportunity_costs = []
    for rate, label in GROWTH_SCENARIOS:
        for pathway in pathways[:3]:
            years = pathway.months_to_wait / 12
            future_price = scenario.purchase_price * (1 + rate) ** years
            price_increase = future_price - scenario.purchase_price
            opportunity_costs.append(OpportunityCost(
                growth_rate=rate,
                label=label,
                pathway=pathway.visa_code,
                months_to_wait=pathway.months_to_wait,
                fees_saved=total_savings,
                price_increase=price_increase,
                net_position=total_savings - price_increase,
            ))

    return TimingOptimization(
        current_cost=current_cost,
        pr_cost=pr_cost,
        total_savings=total_savings,
        savings_percent=(total_savings / current_cost * 100) if current_cost else 0.0,
        pathways=pathways,
        opportunity_costs=opportunity_costs,
    )


# =============================================================================
# 4. PURCHASE STRUCTURE
# =============================================================================

def optimize_structure(scenario: Scenario) -> Optional[StructureOptimization]:
    """
    Upfront cost under joint, company and trust ownership, best first.

    Only purchases that need FIRB approval have foreign buyer costs to
    restructure, so every other verdict returns None. Estimates only:
    the surcharge reductions depend on state rules and legal advice.
    """
    current = assess(scenario)
    if not current.eligibility.firb_required:
        return None

    fees = current.fees
    price = scenario.purchase_price
    options = []
    for structure in PURCHASE_STRUCTURES:
        if structure.foreign_share < 1:
            # Each co-owner's share is dutied separately
            stamp_duty = sum(
                lookup_stamp_duty(scenario.state, price * share, scenario.property_type)
                for share in (structure.foreign_share, 1 - structure.foreign_share)
            )
        else:
            stamp_duty = fees.stamp_duty
        surcharge = fees.surcharge_stamp_duty * structure.surcharge_factor
        total_cost = fees.firb_application_fee + structure.setup_cost + stamp_duty + surcharge
        savings = fees.grand_total - total_cost
        options.append(StructureOption(
            structure=structure.name,
            description=structure.description,
            stamp_duty=stamp_duty,
            surcharge=surcharge,
            setup_cost=structure.setup_cost,
            annual_cost=structure.annual_cost,
            total_cost=total_cost,
            savings=savings,
            savings_percent=(savings / fees.grand_total * 100) if fees.grand_total else 0.0,
            risks=structure.risks,
        ))
    options.sort(key=lambda o: o.savings, reverse=True)
    return StructureOptimization(current_cost=fees.grand_total, options=options)


def optimize(scenario: Scenario) -> OptimizationReport:
    """Run every optimisation for a scenario."""
    current = assess(scenario)
    property_type = None
    if scenario.property_type in (PropertyType.ESTABLISHED, PropertyType.NEW_DWELLING):
        property_type = optimize_property_type(scenario)

    report = OptimizationReport(
        current=current,
        property_type=property_type,
        state_arbitrage=optimize_state(scenario),
        timing=optimize_timing(scenario),
        structure=optimize_structure(scenario),
    )
    logger.debug("Potential savings for scenario: %.2f", report.total_potential_savings)
    return report
