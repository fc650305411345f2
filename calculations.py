"""
Australian FIRB Foreign Buyer Calculator - Calculations

Rate-table lookups (stamp duty, foreign surcharges, land tax surcharge, FIRB
fee tiers) and the fee aggregator that combines them with the eligibility
verdict into a complete cost breakdown.
"""

import logging
import math
from dataclasses import dataclass, fields
from numbers import Real
from typing import Optional

from constants import (
    FIRB_FEE_TIERS,
    FIRST_HOME_CONCESSIONS,
    FIRST_HOME_CONCESSIONS_NEW_QLD,
    MAX_SAFE_AMOUNT,
    NEW_TYPES,
    RESIDENTIAL_TYPES,
    STATE_RATES,
    AustralianState,
    CitizenshipStatus,
    EntityType,
    FirbResult,
    PropertyType,
    VisaType,
)
from eligibility import EligibilityResult, check_eligibility, parse_enum
from errors import (
    ComputationOverflowError,
    InvalidArgumentError,
    InvalidValueError,
    UnknownStateError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class Scenario:
    """A single purchase to evaluate."""
    citizenship_status: CitizenshipStatus
    property_type: PropertyType
    purchase_price: float
    state: AustralianState
    entity_type: EntityType = EntityType.INDIVIDUAL
    visa_type: Optional[VisaType] = None
    is_ordinarily_resident: bool = True
    is_first_home_buyer: bool = False
    vacant_more_than_six_months: bool = False

    def __post_init__(self):
        # Normalise raw strings so downstream code only sees enum members
        object.__setattr__(
            self, "citizenship_status",
            parse_enum(CitizenshipStatus, self.citizenship_status, "citizenship_status"),
        )
        object.__setattr__(
            self, "property_type",
            parse_enum(PropertyType, self.property_type, "property_type"),
        )
        object.__setattr__(self, "state", parse_state(self.state))
        object.__setattr__(
            self, "entity_type",
            parse_enum(EntityType, self.entity_type, "entity_type"),
        )
        if self.visa_type is not None and self.visa_type != "":
            object.__setattr__(
                self, "visa_type", parse_enum(VisaType, self.visa_type, "visa_type")
            )
        else:
            object.__setattr__(self, "visa_type", None)
        object.__setattr__(
            self, "purchase_price", validate_amount(self.purchase_price, "purchase_price")
        )
        for name in ("is_ordinarily_resident", "is_first_home_buyer", "vacant_more_than_six_months"):
            object.__setattr__(self, name, parse_flag(getattr(self, name), name))

    @classmethod
    def from_dict(cls, data: dict) -> "Scenario":
        """Build a Scenario from a plain record (camelCase or snake_case keys)."""
        def pick(snake, camel, default=None):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            citizenship_status=pick("citizenship_status", "citizenshipStatus"),
            property_type=pick("property_type", "propertyType"),
            purchase_price=pick("purchase_price", "purchasePrice"),
            state=pick("state", "state"),
            entity_type=pick("entity_type", "entityType", EntityType.INDIVIDUAL),
            visa_type=pick("visa_type", "visaType"),
            is_ordinarily_resident=pick("is_ordinarily_resident", "isOrdinarilyResident", True),
            is_first_home_buyer=pick("is_first_home_buyer", "isFirstHomeBuyer", False),
            vacant_more_than_six_months=pick(
                "vacant_more_than_six_months", "vacantMoreThanSixMonths", False
            ),
        )

    def to_dict(self) -> dict:
        return {
            "citizenshipStatus": self.citizenship_status.value,
            "visaType": self.visa_type.value if self.visa_type else None,
            "propertyType": self.property_type.value,
            "purchasePrice": self.purchase_price,
            "state": self.state.value,
            "entityType": self.entity_type.value,
            "isOrdinarilyResident": self.is_ordinarily_resident,
            "isFirstHomeBuyer": self.is_first_home_buyer,
            "vacantMoreThanSixMonths": self.vacant_more_than_six_months,
        }

    def with_changes(self, **changes) -> "Scenario":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return Scenario(**values)


@dataclass(frozen=True)
class FeeBreakdown:
    """Upfront and annual costs for one scenario."""
    firb_application_fee: float
    stamp_duty: float
    surcharge_stamp_duty: float
    land_tax_surcharge: float  # Annual
    vacancy_fee: float  # Annual
    grand_total: float  # Upfront
    annual_total: float
    first_year_total: float

    def to_dict(self) -> dict:
        return {
            "firbApplicationFee": self.firb_application_fee,
            "stampDuty": self.stamp_duty,
            "surchargeStampDuty": self.surcharge_stamp_duty,
            "landTaxSurcharge": self.land_tax_surcharge,
            "vacancyFee": self.vacancy_fee,
            "grandTotal": self.grand_total,
            "annualTotal": self.annual_total,
            "firstYearTotal": self.first_year_total,
        }


@dataclass(frozen=True)
class Assessment:
    """Eligibility verdict plus fee breakdown for one scenario."""
    scenario: Scenario
    eligibility: EligibilityResult
    fees: FeeBreakdown

    def to_dict(self) -> dict:
        return {
            "scenario": self.scenario.to_dict(),
            "eligibility": self.eligibility.to_dict(),
            "fees": self.fees.to_dict(),
        }


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def parse_state(state) -> AustralianState:
    """Resolve a state code (case-insensitive) or raise UnknownStateError."""
    if isinstance(state, AustralianState):
        return state
    if isinstance(state, str):
        try:
            return AustralianState(state.strip().upper())
        except ValueError:
            pass
    logger.warning("Unknown state code: %r", state)
    raise UnknownStateError(
        f"Unknown state: {state}. Must be one of: "
        + ", ".join(s.value for s in AustralianState),
        field="state",
        value=state,
    )


def validate_amount(value, field_name: str = "property_value") -> float:
    """Return `value` as a float if it is a finite, positive number."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidValueError(f"{field_name} must be a number", field=field_name, value=value)
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        logger.warning("Rejected %s=%r", field_name, value)
        raise InvalidValueError(
            f"{field_name} must be a positive, finite amount", field=field_name, value=value
        )
    return value


def parse_flag(value, field_name: str) -> bool:
    """
    Accept a real bool or the strings 'true'/'false' (any case).

    Anything else, including 0/1 and 'yes', raises InvalidArgumentError.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    logger.warning("Rejected %s=%r", field_name, value)
    raise InvalidArgumentError(
        f"{field_name} must be true or false", field=field_name, value=value
    )


def check_amount(value: float, field_name: str) -> float:
    """Reject NaN, infinite, negative or oversized computed amounts."""
    if math.isnan(value) or math.isinf(value) or value < 0 or value > MAX_SAFE_AMOUNT:
        logger.error("Computation overflow in %s: %r", field_name, value)
        raise ComputationOverflowError(
            f"{field_name} could not be computed safely ({value})",
            field=field_name,
            value=value,
        )
    return round(value, 2)


# =============================================================================
# RATE TABLE LOOKUPS
# =============================================================================

def calculate_bracket_duty(price: float, brackets: tuple) -> float:
    """
    Progressive duty from (upper_bound, rate, base) brackets.

    Duty = base of the bracket containing the price
           + rate * (price - lower bound of that bracket)
    """
    lower = 0.0
    for upper, rate, base in brackets:
        if price <= upper:
            return base + rate * (price - lower)
        lower = upper
    # Brackets always end at infinity, so this is only reachable for NaN
    raise ComputationOverflowError("Price falls outside every duty bracket", field="stamp_duty")


def _first_home_concession(state: AustralianState, property_type: PropertyType) -> Optional[tuple]:
    if property_type not in RESIDENTIAL_TYPES:
        return None
    if state is AustralianState.QLD and property_type in NEW_TYPES:
        return FIRST_HOME_CONCESSIONS_NEW_QLD
    return FIRST_HOME_CONCESSIONS.get(state)


def lookup_stamp_duty(
    state,
    property_value,
    property_type=PropertyType.ESTABLISHED,
    is_first_home_buyer: bool = False,
) -> float:
    """
    Calculate standard transfer (stamp) duty, paid by every buyer.

    First home buyers in NSW, VIC, QLD and WA are exempt below the state's
    exemption cap, with duty phasing back in linearly up to the concession cap.
    """
    state = parse_state(state)
    value = validate_amount(property_value, "property_value")
    prop = parse_enum(PropertyType, property_type, "property_type")

    duty = calculate_bracket_duty(value, STATE_RATES[state].stamp_duty_brackets)

    if is_first_home_buyer:
        concession = _first_home_concession(state, prop)
        if concession is not None:
            exempt_cap, concession_cap = concession
            if value <= exempt_cap:
                return 0.0
            if value <= concession_cap:
                duty *= (value - exempt_cap) / (concession_cap - exempt_cap)

    return duty


def lookup_foreign_surcharge(state, property_value) -> float:
    """Flat foreign purchaser duty surcharge (percentage of price)."""
    state = parse_state(state)
    value = validate_amount(property_value, "property_value")
    return value * STATE_RATES[state].foreign_surcharge_rate


def lookup_land_tax_surcharge(state, property_value) -> float:
    """Annual foreign owner land tax surcharge on the value above the threshold."""
    state = parse_state(state)
    value = validate_amount(property_value, "property_value")
    rates = STATE_RATES[state]
    return max(0.0, value - rates.land_tax_threshold) * rates.land_tax_surcharge_rate


def lookup_firb_fee(property_value, entity_type=EntityType.INDIVIDUAL) -> float:
    """
    FIRB application fee for a residential acquisition.

    Tier bounds are inclusive: a price exactly on a bound pays that tier's fee,
    one cent above pays the next tier.
    """
    value = validate_amount(property_value, "property_value")
    entity = parse_enum(EntityType, entity_type, "entity_type")
    for upper, fee in FIRB_FEE_TIERS[entity]:
        if value <= upper:
            return float(fee)
    raise ComputationOverflowError("Price falls outside every FIRB fee tier", field="firb_application_fee")


# =============================================================================
# FEE AGGREGATION
# =============================================================================

def _charges_for(eligibility: EligibilityResult) -> tuple[bool, bool, bool]:
    """(stamp duty surcharge, land tax surcharge, vacancy fee) applicability."""
    if eligibility.result is FirbResult.NOT_ALLOWED:
        # Blocked purchases are priced as a foreign buyer would pay so that
        # comparisons against allowed options stay meaningful
        return True, True, False
    meta = eligibility.metadata
    return (
        bool(meta.get("stamp_duty_surcharge", False)),
        bool(meta.get("land_tax_surcharge", False)),
        bool(meta.get("vacancy_fee", False)),
    )


def calculate_fees(scenario: Scenario, eligibility: Optional[EligibilityResult] = None) -> FeeBreakdown:
    """
    Calculate all fees for a scenario.

    Upfront: FIRB application fee (when approval is required), stamp duty and
    the foreign purchaser surcharge.
    Annual: foreign owner land tax surcharge and, for dwellings left empty more
    than six months a year, the vacancy fee (equal to the application fee).
    """
    if eligibility is None:
        eligibility = check_eligibility(
            scenario.citizenship_status,
            scenario.visa_type,
            scenario.property_type,
            scenario.is_ordinarily_resident,
        )

    price = scenario.purchase_price
    surcharge_applies, land_tax_applies, vacancy_applies = _charges_for(eligibility)

    firb_fee = lookup_firb_fee(price, scenario.entity_type) if eligibility.firb_required else 0.0
    stamp_duty = lookup_stamp_duty(
        scenario.state, price, scenario.property_type, scenario.is_first_home_buyer
    )
    surcharge = lookup_foreign_surcharge(scenario.state, price) if surcharge_applies else 0.0
    land_tax = lookup_land_tax_surcharge(scenario.state, price) if land_tax_applies else 0.0

    vacancy_fee = 0.0
    if vacancy_applies and scenario.vacant_more_than_six_months:
        vacancy_fee = lookup_firb_fee(price, scenario.entity_type)

    firb_fee = check_amount(firb_fee, "firb_application_fee")
    stamp_duty = check_amount(stamp_duty, "stamp_duty")
    surcharge = check_amount(surcharge, "surcharge_stamp_duty")
    land_tax = check_amount(land_tax, "land_tax_surcharge")
    vacancy_fee = check_amount(vacancy_fee, "vacancy_fee")

    grand_total = check_amount(firb_fee + stamp_duty + surcharge, "grand_total")
    annual_total = check_amount(land_tax + vacancy_fee, "annual_total")
    first_year_total = check_amount(grand_total + annual_total, "first_year_total")

    logger.debug(
        "Fees for %s %s in %s at %.2f: upfront=%.2f annual=%.2f",
        scenario.citizenship_status.value, scenario.property_type.value,
        scenario.state.value, price, grand_total, annual_total,
    )

    return FeeBreakdown(
        firb_application_fee=firb_fee,
        stamp_duty=stamp_duty,
        surcharge_stamp_duty=surcharge,
        land_tax_surcharge=land_tax,
        vacancy_fee=vacancy_fee,
        grand_total=grand_total,
        annual_total=annual_total,
        first_year_total=first_year_total,
    )


def assess(scenario) -> Assessment:
    """
    Run eligibility and fee calculation for one scenario.

    Accepts a Scenario or a plain dict such as
    {"citizenshipStatus": "foreign", "propertyType": "newDwelling",
     "purchasePrice": 1500000, "state": "NSW", "entityType": "individual"}.
    """
    if isinstance(scenario, dict):
        scenario = Scenario.from_dict(scenario)
    elif not isinstance(scenario, Scenario):
        raise InvalidArgumentError("scenario must be a Scenario or dict", field="scenario")

    eligibility = check_eligibility(
        scenario.citizenship_status,
        scenario.visa_type,
        scenario.property_type,
        scenario.is_ordinarily_resident,
    )
    fees = calculate_fees(scenario, eligibility)
    return Assessment(scenario=scenario, eligibility=eligibility, fees=fees)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_currency(amount: float) -> str:
    """Format amount as Australian dollars."""
    if amount >= 0:
        return f"${amount:,.0f}"
    else:
        return f"-${abs(amount):,.0f}"


def format_percent(rate: float) -> str:
    """Format a rate such as 0.075 as '7.5%'."""
    return f"{rate * 100:g}%"
