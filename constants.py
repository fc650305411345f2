"""
Australian FIRB Foreign Buyer Calculator - Constants

Official FIRB fee tiers, state stamp duty brackets, foreign buyer surcharges
and land tax surcharges.
Last updated: January 2025 (2024-25 financial year)
"""

from enum import Enum
from types import MappingProxyType
from typing import NamedTuple, Optional

DATA_VERSION = {
    "version": "2024-25",
    "last_updated": "2025-01-15",
    "financial_year": "2024-25",
    "next_review": "2025-07-01",
}


# =============================================================================
# ENUMERATIONS
# =============================================================================

class CitizenshipStatus(str, Enum):
    AUSTRALIAN = "australian"
    PERMANENT = "permanent"
    TEMPORARY = "temporary"
    FOREIGN = "foreign"


class VisaType(str, Enum):
    STUDENT = "student"      # Subclass 500
    SKILLED = "skilled"      # Subclass 482, 485, 186, 189, 190
    PARTNER = "partner"      # Subclass 309, 820
    BRIDGING = "bridging"
    VISITOR = "visitor"
    OTHER = "other"


class PropertyType(str, Enum):
    NEW_DWELLING = "newDwelling"    # Brand new, never occupied
    ESTABLISHED = "established"     # Previously occupied
    OFF_THE_PLAN = "offThePlan"     # Not yet built
    VACANT_LAND = "vacantLand"
    COMMERCIAL = "commercial"


class EntityType(str, Enum):
    INDIVIDUAL = "individual"
    COMPANY = "company"
    TRUST = "trust"


class AustralianState(str, Enum):
    NSW = "NSW"
    VIC = "VIC"
    QLD = "QLD"
    SA = "SA"
    WA = "WA"
    TAS = "TAS"
    ACT = "ACT"
    NT = "NT"


class FirbResult(str, Enum):
    NOT_REQUIRED = "not_required"
    REQUIRED = "required"
    CONDITIONAL = "conditional"
    NOT_ALLOWED = "not_allowed"


RESIDENTIAL_TYPES = frozenset({
    PropertyType.NEW_DWELLING,
    PropertyType.ESTABLISHED,
    PropertyType.OFF_THE_PLAN,
})

NEW_TYPES = frozenset({PropertyType.NEW_DWELLING, PropertyType.OFF_THE_PLAN})

CITIZENSHIP_LABELS = {
    CitizenshipStatus.AUSTRALIAN: "Australian Citizen",
    CitizenshipStatus.PERMANENT: "Permanent Resident",
    CitizenshipStatus.TEMPORARY: "Temporary Resident",
    CitizenshipStatus.FOREIGN: "Foreign National",
}

PROPERTY_TYPE_LABELS = {
    PropertyType.NEW_DWELLING: "New Dwelling",
    PropertyType.ESTABLISHED: "Established Dwelling",
    PropertyType.OFF_THE_PLAN: "Off-the-Plan",
    PropertyType.VACANT_LAND: "Vacant Land",
    PropertyType.COMMERCIAL: "Commercial Property",
}

STATE_NAMES = {
    AustralianState.NSW: "New South Wales",
    AustralianState.VIC: "Victoria",
    AustralianState.QLD: "Queensland",
    AustralianState.SA: "South Australia",
    AustralianState.WA: "Western Australia",
    AustralianState.TAS: "Tasmania",
    AustralianState.ACT: "Australian Capital Territory",
    AustralianState.NT: "Northern Territory",
}


# =============================================================================
# VISA CAPABILITIES (Temporary residents)
# =============================================================================

class VisaCapability(NamedTuple):
    """What a temporary visa holder may buy, and on what terms."""
    label: str
    can_buy_established: bool
    can_buy_new: bool
    can_buy_vacant: bool
    must_be_residence: bool
    must_sell_on_departure: bool
    condition: str


VISA_CAPABILITIES = MappingProxyType({
    VisaType.STUDENT: VisaCapability(
        label="Student Visa (subclass 500)",
        can_buy_established=True,
        can_buy_new=True,
        can_buy_vacant=True,
        must_be_residence=True,
        must_sell_on_departure=True,
        condition="Must be your principal place of residence",
    ),
    VisaType.SKILLED: VisaCapability(
        label="Skilled Work Visa (subclass 482, 485, 186, 189)",
        can_buy_established=True,
        can_buy_new=True,
        can_buy_vacant=True,
        must_be_residence=True,
        must_sell_on_departure=True,
        condition="Must be your principal place of residence",
    ),
    VisaType.PARTNER: VisaCapability(
        label="Partner Visa (subclass 309, 820)",
        can_buy_established=True,
        can_buy_new=True,
        can_buy_vacant=True,
        must_be_residence=True,
        must_sell_on_departure=True,
        condition="Must be your principal place of residence",
    ),
    VisaType.BRIDGING: VisaCapability(
        label="Bridging Visa",
        can_buy_established=False,
        can_buy_new=True,
        can_buy_vacant=False,
        must_be_residence=True,
        must_sell_on_departure=True,
        condition="Only new dwellings allowed",
    ),
    VisaType.VISITOR: VisaCapability(
        label="Visitor/Tourist Visa",
        can_buy_established=False,
        can_buy_new=True,
        can_buy_vacant=False,
        must_be_residence=False,
        must_sell_on_departure=True,
        condition="Only new dwellings allowed (investment only)",
    ),
    VisaType.OTHER: VisaCapability(
        label="Other Temporary Visa",
        can_buy_established=True,
        can_buy_new=True,
        can_buy_vacant=True,
        must_be_residence=True,
        must_sell_on_departure=True,
        condition="Check specific visa conditions",
    ),
})

ALTERNATIVE_LABELS = {
    PropertyType.NEW_DWELLING: "New dwelling/apartment (brand new)",
    PropertyType.OFF_THE_PLAN: "Off-the-plan property (not yet built)",
    PropertyType.VACANT_LAND: "Vacant land (with development approval)",
}

# Development conditions on vacant land
DEVELOPMENT_TIMEFRAME_YEARS = 4

# Temporary residents must sell within this many months of visa expiry
SELL_AFTER_VISA_EXPIRY_MONTHS = 3


# =============================================================================
# FIRB APPLICATION FEES (Guidance Note 12, indexed 1 July)
# =============================================================================

# Format: (upper_bound_inclusive, fee). A price exactly on a bound uses that tier.
FIRB_FEE_TIERS_INDIVIDUAL = (
    (1_000_000, 13_200),
    (2_000_000, 26_400),
    (3_000_000, 33_000),
    (10_000_000, 66_000),
    (float("inf"), 132_000),
)

# Companies and trusts pay 13/12 of the individual fee
FIRB_FEE_TIERS_ENTITY = (
    (1_000_000, 14_300),
    (2_000_000, 28_600),
    (3_000_000, 35_750),
    (10_000_000, 71_500),
    (float("inf"), 143_000),
)

FIRB_FEE_TIERS = MappingProxyType({
    EntityType.INDIVIDUAL: FIRB_FEE_TIERS_INDIVIDUAL,
    EntityType.COMPANY: FIRB_FEE_TIERS_ENTITY,
    EntityType.TRUST: FIRB_FEE_TIERS_ENTITY,
})

# Results above this are treated as a computation failure (2^53 - 1)
MAX_SAFE_AMOUNT = 9_007_199_254_740_991


# =============================================================================
# STATE RATE TABLES
# =============================================================================

class StateRates(NamedTuple):
    """Static per-state duty and surcharge data."""
    # Format: (upper_bound, marginal_rate, base_amount); lower bound is previous upper
    stamp_duty_brackets: tuple
    foreign_surcharge_rate: float     # Flat % of price, on top of stamp duty
    land_tax_surcharge_rate: float    # Annual % of taxable value above threshold
    land_tax_threshold: float


INF = float("inf")

STATE_RATES = MappingProxyType({
    AustralianState.NSW: StateRates(
        stamp_duty_brackets=(
            (16_000, 0.0125, 0),
            (35_000, 0.015, 200),
            (93_000, 0.0175, 485),
            (351_000, 0.035, 1_500),
            (1_168_000, 0.045, 10_525),
            (INF, 0.055, 47_290),
        ),
        foreign_surcharge_rate=0.08,
        land_tax_surcharge_rate=0.04,
        land_tax_threshold=1_075_000,
    ),
    AustralianState.VIC: StateRates(
        stamp_duty_brackets=(
            (25_000, 0.014, 0),
            (130_000, 0.024, 350),
            (960_000, 0.05, 2_870),
            (INF, 0.06, 44_370),
        ),
        foreign_surcharge_rate=0.08,
        land_tax_surcharge_rate=0.04,
        land_tax_threshold=50_000,
    ),
    AustralianState.QLD: StateRates(
        stamp_duty_brackets=(
            (5_000, 0.0, 0),
            (75_000, 0.015, 0),
            (540_000, 0.035, 1_050),
            (1_000_000, 0.045, 17_325),
            (INF, 0.0575, 38_025),
        ),
        foreign_surcharge_rate=0.08,
        land_tax_surcharge_rate=0.02,
        land_tax_threshold=350_000,
    ),
    AustralianState.SA: StateRates(
        stamp_duty_brackets=(
            (12_000, 0.01, 0),
            (30_000, 0.02, 120),
            (50_000, 0.03, 480),
            (100_000, 0.035, 1_080),
            (200_000, 0.04, 2_830),
            (250_000, 0.0425, 6_830),
            (300_000, 0.045, 8_955),
            (500_000, 0.0475, 11_205),
            (INF, 0.055, 20_705),
        ),
        foreign_surcharge_rate=0.07,
        land_tax_surcharge_rate=0.04,
        land_tax_threshold=450_000,
    ),
    AustralianState.WA: StateRates(
        stamp_duty_brackets=(
            (120_000, 0.019, 0),
            (150_000, 0.029, 2_280),
            (360_000, 0.038, 3_150),
            (725_000, 0.04, 11_130),
            (INF, 0.05, 25_730),
        ),
        foreign_surcharge_rate=0.07,
        land_tax_surcharge_rate=0.04,
        land_tax_threshold=300_000,
    ),
    AustralianState.TAS: StateRates(
        stamp_duty_brackets=(
            (3_000, 0.005, 0),
            (25_000, 0.0175, 15),
            (75_000, 0.025, 400),
            (200_000, 0.035, 1_650),
            (375_000, 0.04, 6_025),
            (725_000, 0.0425, 13_025),
            (INF, 0.045, 27_900),
        ),
        foreign_surcharge_rate=0.08,
        land_tax_surcharge_rate=0.015,
        land_tax_threshold=25_000,
    ),
    AustralianState.ACT: StateRates(
        stamp_duty_brackets=(
            (200_000, 0.0218, 0),
            (300_000, 0.0332, 4_360),
            (500_000, 0.0446, 7_680),
            (750_000, 0.0555, 16_600),
            (1_000_000, 0.06, 30_475),
            (1_455_000, 0.065, 45_475),
            (INF, 0.067, 75_050),
        ),
        # ACT levies no foreign duty surcharge, only the land tax surcharge
        foreign_surcharge_rate=0.0,
        land_tax_surcharge_rate=0.0075,
        land_tax_threshold=0,
    ),
    AustralianState.NT: StateRates(
        stamp_duty_brackets=(
            (525_000, 0.0665, 0),
            (3_000_000, 0.0495, 34_913),
            (5_000_000, 0.0575, 157_388),
            (INF, 0.0595, 272_388),
        ),
        foreign_surcharge_rate=0.0,
        land_tax_surcharge_rate=0.0,
        land_tax_threshold=0,
    ),
})


# =============================================================================
# FIRST HOME BUYER CONCESSIONS
# =============================================================================

# Format: (exempt_up_to, concession_up_to). Duty phases in linearly between the two.
FIRST_HOME_CONCESSIONS = MappingProxyType({
    AustralianState.NSW: (800_000, 1_000_000),
    AustralianState.VIC: (600_000, 750_000),
    AustralianState.QLD: (700_000, 800_000),
    AustralianState.WA: (450_000, 600_000),
})

# QLD treats new builds more generously
FIRST_HOME_CONCESSIONS_NEW_QLD = (800_000, 900_000)


# =============================================================================
# COST OPTIMISER DATA
# =============================================================================

CAPITAL_CITIES = {
    AustralianState.NSW: "Sydney",
    AustralianState.VIC: "Melbourne",
    AustralianState.QLD: "Brisbane",
    AustralianState.WA: "Perth",
    AustralianState.SA: "Adelaide",
    AustralianState.ACT: "Canberra",
    AustralianState.NT: "Darwin",
    AustralianState.TAS: "Hobart",
}

# Approximate months until permanent residency, by pathway
VISA_PATHWAYS = {
    "482-TSS": (36, "Temporary Skill Shortage (TSS) visa pathway"),
    "485-Graduate": (24, "Post-study work visa to skilled migration"),
    "500-Student": (48, "Student visa to skilled migration"),
    "189-Skilled": (12, "Skilled Independent visa (in progress)"),
    "190-StateNominated": (18, "State nominated skilled visa"),
    "491-Regional": (60, "Regional skilled visa (5 years to PR)"),
    "Partner": (24, "Partner visa pathway"),
    "Parent": (48, "Parent visa pathway"),
}

# Annual capital growth assumptions used for the cost of waiting
GROWTH_SCENARIOS = (
    (0.03, "Conservative (3% p.a.)"),
    (0.05, "Moderate (5% p.a.)"),
    (0.07, "Optimistic (7% p.a.)"),
)

class PurchaseStructure(NamedTuple):
    """Alternative ownership structure for a foreign buyer."""
    name: str
    description: str
    setup_cost: float
    annual_cost: float
    foreign_share: float       # Share of the price bought as a foreign person
    surcharge_factor: float    # Share of the foreign surcharge still payable
    risks: tuple


PURCHASE_STRUCTURES = (
    PurchaseStructure(
        name="Joint Purchase (50/50 with Australian)",
        description="Buy a 50% share jointly with an Australian citizen or permanent resident",
        setup_cost=0,
        annual_cost=0,
        foreign_share=0.5,
        surcharge_factor=0.5,
        risks=(
            "Co-ownership disputes",
            "Relationship breakdown implications",
            "Exit strategy complexity",
            "Financing may be more difficult",
        ),
    ),
    PurchaseStructure(
        name="Australian Company (with Australian directors)",
        description="Buy through a company with majority Australian directors and shareholders",
        setup_cost=5_000,
        annual_cost=3_000,
        foreign_share=1.0,
        surcharge_factor=0.5,  # Estimated; depends on state foreign-company rules
        risks=(
            "Complex tax implications",
            "Capital gains tax on sale",
            "May not eliminate all foreign buyer duties",
            "FIRB may still classify the company as foreign",
        ),
    ),
    PurchaseStructure(
        name="Discretionary Trust",
        description="Buy through a discretionary family trust",
        setup_cost=3_000,
        annual_cost=2_000,
        foreign_share=1.0,
        surcharge_factor=1.0,
        risks=(
            "Still subject to foreign buyer surcharges",
            "Complex tax implications",
            "May complicate financing",
        ),
    ),
)

MAX_SAVED_SCENARIOS = 5


# =============================================================================
# INVESTMENT ANALYSIS
# =============================================================================

# (growth adjustment, vacancy adjustment) applied to the expected case
INVESTMENT_CASES = {
    "best": (0.03, -0.02),
    "expected": (0.0, 0.0),
    "worst": (-0.03, 0.04),
}


# =============================================================================
# TIMELINE
# =============================================================================

FIRB_APPROVAL_VALID_MONTHS = 12
SETTLEMENT_NOTIFICATION_DAYS = 30
DEFAULT_SETTLEMENT_WEEKS = 10


def processing_days_upper(estimate: Optional[str]) -> int:
    """Upper bound of an estimate like '30-60' (days). Defaults to 30."""
    if not estimate:
        return 30
    return int(str(estimate).split("-")[-1])


# =============================================================================
# DEFAULT VALUES FOR UI
# =============================================================================

DEFAULTS = {
    "citizenship_status": CitizenshipStatus.FOREIGN,
    "visa_type": VisaType.STUDENT,
    "property_type": PropertyType.NEW_DWELLING,
    "state": AustralianState.NSW,
    "entity_type": EntityType.INDIVIDUAL,
    "purchase_price": 850_000,
    # Investment analysis
    "weekly_rent": 650,
    "capital_growth_rate": 0.05,
    "hold_period_years": 10,
    "vacancy_rate": 0.04,
    "management_fee_rate": 0.07,
    "annual_maintenance": 2_000,
    "annual_insurance": 1_500,
    "council_rates": 2_500,
    "exchange_rate": 0.65,  # Home currency units per AUD
    "home_country_return_rate": 0.07,
}

# Purchase price range for slider
PRICE_MIN = 100_000
PRICE_MAX = 20_000_000
PRICE_STEP = 10_000
