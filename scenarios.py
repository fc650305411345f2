"""
Australian FIRB Foreign Buyer Calculator - Scenarios

Saved scenarios and side-by-side comparisons. Lists of saved scenarios are
owned by the caller (the Streamlit session); every function here returns new
values instead of mutating its inputs.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from constants import MAX_SAVED_SCENARIOS, STATE_NAMES, AustralianState, FirbResult, PropertyType
from calculations import Assessment, Scenario, assess
from errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavedScenario:
    id: str
    name: str
    created_at: datetime
    assessment: Assessment

    @property
    def first_year_total(self) -> float:
        return self.assessment.fees.first_year_total

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at.isoformat(),
            **self.assessment.to_dict(),
        }


@dataclass(frozen=True)
class StateComparison:
    """Cost of the same purchase in another state."""
    state: AustralianState
    state_name: str
    assessment: Assessment
    savings: float  # Positive = cheaper than the baseline

    @property
    def total_cost(self) -> float:
        return self.assessment.fees.first_year_total


@dataclass(frozen=True)
class PropertyTypeComparison:
    property_type: PropertyType
    assessment: Assessment
    allowed: bool
    savings: float


# =============================================================================
# SAVED SCENARIOS
# =============================================================================

def default_name(saved: list[SavedScenario]) -> str:
    """First 'Scenario N' not already taken."""
    taken = {s.name for s in saved}
    n = 1
    while f"Scenario {n}" in taken:
        n += 1
    return f"Scenario {n}"


def save_scenario(
    saved: list[SavedScenario],
    name: str,
    scenario: Scenario,
    now: Optional[datetime] = None,
) -> list[SavedScenario]:
    """Assess `scenario` and return a new list with it appended."""
    name = (name or "").strip() or default_name(saved)
    if len(saved) >= MAX_SAVED_SCENARIOS:
        raise InvalidArgumentError(
            f"You can save at most {MAX_SAVED_SCENARIOS} scenarios", field="name"
        )
    if any(s.name == name for s in saved):
        raise InvalidArgumentError(f"A scenario named '{name}' already exists", field="name", value=name)

    entry = SavedScenario(
        id=uuid.uuid4().hex,
        name=name,
        created_at=now or datetime.now(),
        assessment=assess(scenario),
    )
    logger.info("Saved scenario %s (%s)", entry.name, entry.id)
    return [*saved, entry]


def delete_scenario(saved: list[SavedScenario], scenario_id: str) -> list[SavedScenario]:
    return [s for s in saved if s.id != scenario_id]


def rename_scenario(saved: list[SavedScenario], scenario_id: str, new_name: str) -> list[SavedScenario]:
    new_name = (new_name or "").strip()
    if not new_name:
        raise InvalidArgumentError("Scenario name cannot be empty", field="name")
    if any(s.name == new_name and s.id != scenario_id for s in saved):
        raise InvalidArgumentError(f"A scenario named '{new_name}' already exists", field="name")
    return [
        SavedScenario(s.id, new_name, s.created_at, s.assessment) if s.id == scenario_id else s
        for s in saved
    ]


def find_lowest_cost(saved: list[SavedScenario]) -> Optional[SavedScenario]:
    """Saved scenario with the lowest first-year total."""
    if not saved:
        return None
    return min(saved, key=lambda s: s.first_year_total)


def calculate_savings(target: SavedScenario, saved: list[SavedScenario]) -> float:
    """How much `target` saves compared to the most expensive saved scenario."""
    if len(saved) <= 1:
        return 0.0
    most_expensive = max(saved, key=lambda s: s.first_year_total)
    return most_expensive.first_year_total - target.first_year_total


# =============================================================================
# RE-INVOKED COMPARISONS
# =============================================================================

def compare_states(scenario: Scenario) -> list[StateComparison]:
    """Assess the same purchase in every state, cheapest first."""
    baseline = assess(scenario).fees.first_year_total
    rows = []
    for state in AustralianState:
        assessment = assess(scenario.with_changes(state=state))
        rows.append(StateComparison(
            state=state,
            state_name=STATE_NAMES[state],
            assessment=assessment,
            savings=baseline - assessment.fees.first_year_total,
        ))
    rows.sort(key=lambda r: r.total_cost)
    return rows


def compare_property_types(scenario: Scenario) -> list[PropertyTypeComparison]:
    """
    Assess the same price and state for every property type.

    Any calculation error for one type fails the whole comparison.
    """
    baseline = assess(scenario).fees.first_year_total
    rows = []
    for prop in PropertyType:
        assessment = assess(scenario.with_changes(property_type=prop))
        rows.append(PropertyTypeComparison(
            property_type=prop,
            assessment=assessment,
            allowed=assessment.eligibility.result is not FirbResult.NOT_ALLOWED,
            savings=baseline - assessment.fees.first_year_total,
        ))
    return rows


def find_cheapest_option(scenario: Scenario) -> Optional[Assessment]:
    """Lowest first-year cost over every allowed (state, property type) pair."""
    best = None
    for state in AustralianState:
        for prop in PropertyType:
            assessment = assess(scenario.with_changes(state=state, property_type=prop))
            if assessment.eligibility.result is FirbResult.NOT_ALLOWED:
                continue
            if best is None or assessment.fees.first_year_total < best.fees.first_year_total:
                best = assessment
    return best


# =============================================================================
# EXPORT / IMPORT
# =============================================================================

def scenarios_to_json(saved: list[SavedScenario]) -> str:
    return json.dumps([s.to_dict() for s in saved], indent=2)


def scenarios_from_json(payload: Union[str, bytes]) -> list[SavedScenario]:
    """
    Rebuild saved scenarios from an export (text or raw UTF-8 bytes).

    Fees are recalculated from the stored inputs rather than trusted.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidArgumentError("Invalid file: not UTF-8 text", field="payload") from exc
    try:
        records = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise InvalidArgumentError(f"Invalid JSON file: {exc.msg}", field="payload") from exc
    if not isinstance(records, list):
        raise InvalidArgumentError("Invalid format: expected a list of scenarios", field="payload")

    result = []
    for record in records:
        if not isinstance(record, dict) or not isinstance(record.get("scenario"), dict):
            raise InvalidArgumentError("Invalid format: scenario record missing inputs", field="payload")
        try:
            created_at = datetime.fromisoformat(record.get("createdAt", ""))
        except (TypeError, ValueError):
            created_at = datetime.now()
        name = str(record.get("name") or "").strip() or default_name(result)
        result.append(SavedScenario(
            id=str(record.get("id") or uuid.uuid4().hex),
            name=name,
            created_at=created_at,
            assessment=assess(Scenario.from_dict(record["scenario"])),
        ))
    return result


def merge_scenarios(saved: list[SavedScenario], imported: list[SavedScenario]) -> list[SavedScenario]:
    """
    Append imported scenarios to the saved list.

    Clashing names get a ' (2)', ' (3)'... suffix and clashing ids a fresh
    id. Raises InvalidArgumentError instead of dropping anything when the
    result would exceed the saved-scenario limit.
    """
    if len(saved) + len(imported) > MAX_SAVED_SCENARIOS:
        raise InvalidArgumentError(
            f"Importing {len(imported)} scenarios would exceed the limit of "
            f"{MAX_SAVED_SCENARIOS} ({len(saved)} already saved)",
            field="payload",
        )

    merged = list(saved)
    for entry in imported:
        names = {s.name for s in merged}
        ids = {s.id for s in merged}
        name = entry.name
        n = 2
        while name in names:
            name = f"{entry.name} ({n})"
            n += 1
        entry_id = entry.id if entry.id not in ids else uuid.uuid4().hex
        merged.append(SavedScenario(entry_id, name, entry.created_at, entry.assessment))
    logger.info("Imported %d scenarios", len(imported))
    return merged
