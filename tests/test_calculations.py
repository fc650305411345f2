"""Tests for rate lookups and the fee aggregator."""
import math

import pytest

from constants import AustralianState, CitizenshipStatus, EntityType, PropertyType, VisaType
from calculations import (
    Scenario,
    assess,
    calculate_fees,
    check_amount,
    format_currency,
    format_percent,
    lookup_firb_fee,
    lookup_foreign_surcharge,
    lookup_land_tax_surcharge,
    lookup_stamp_duty,
    parse_flag,
)
from errors import (
    ComputationOverflowError,
    InvalidArgumentError,
    InvalidValueError,
    UnknownStateError,
)


def foreign_new(price=1_500_000, state="NSW", **kwargs):
    return Scenario(
        citizenship_status="foreign",
        property_type="newDwelling",
        purchase_price=price,
        state=state,
        **kwargs,
    )


class TestFirbFee:
    """Application fee tiers."""

    @pytest.mark.parametrize("price,fee", [
        (500_000, 13_200),
        (999_999, 13_200),
        (1_000_000, 13_200),
        (1_000_000.01, 26_400),
        (2_000_000, 26_400),
        (3_000_000, 33_000),
        (10_000_000, 66_000),
        (2_000_000.01, 33_000),
        (3_000_000.01, 66_000),
        (10_000_001, 132_000),
    ])
    def test_individual_tiers(self, price, fee):
        """Tier bounds are inclusive."""
        assert lookup_firb_fee(price) == fee

    @pytest.mark.parametrize("entity,fee", [
        (EntityType.COMPANY, 28_600),
        (EntityType.TRUST, 28_600),
        ("individual", 26_400),
    ])
    def test_entity_fees(self, entity, fee):
        """Companies and trusts pay the higher schedule."""
        assert lookup_firb_fee(1_500_000, entity) == fee

    @pytest.mark.parametrize("price,fee", [
        (1_000_000, 14_300),
        (1_000_000.01, 28_600),
        (2_000_000, 28_600),
        (2_000_000.01, 35_750),
        (3_000_000, 35_750),
        (3_000_000.01, 71_500),
        (10_000_000, 71_500),
        (10_000_000.01, 143_000),
    ])
    def test_entity_tiers(self, price, fee):
        """Company and trust bounds are inclusive too."""
        assert lookup_firb_fee(price, EntityType.COMPANY) == fee
        assert lookup_firb_fee(price, EntityType.TRUST) == fee


class TestStampDuty:
    """Progressive bracket duty."""

    @pytest.mark.parametrize("state,price,expected", [
        ("NSW", 1_500_000, 65_550),
        ("NSW", 500_000, 17_230),
        ("VIC", 1_000_000, 46_770),
        ("QLD", 500_000, 15_925),
        ("QLD", 3_000, 0),
        ("NT", 600_000, 38_625.5),
    ])
    def test_bracket_duty(self, state, price, expected):
        """Duty is base plus marginal rate above the bracket floor."""
        assert lookup_stamp_duty(state, price) == pytest.approx(expected)

    def test_state_code_case_insensitive(self):
        """Lower-case state codes are accepted."""
        assert lookup_stamp_duty("nsw", 500_000) == lookup_stamp_duty("NSW", 500_000)

    @pytest.mark.parametrize("state", list(AustralianState))
    def test_monotonic_in_price(self, state):
        """Duty never decreases as the price goes up."""
        prices = [50_000 * i for i in range(1, 120)]
        duties = [lookup_stamp_duty(state, p) for p in prices]
        assert all(a <= b + 1e-6 for a, b in zip(duties, duties[1:]))


class TestFirstHomeBuyer:
    """Concessions for first home buyers."""

    def test_exempt_below_cap(self):
        """NSW first home buyers pay nothing up to $800k."""
        assert lookup_stamp_duty("NSW", 700_000, "established", is_first_home_buyer=True) == 0

    def test_phased_between_caps(self):
        """Duty phases in linearly between the exempt and concession caps."""
        duty = lookup_stamp_duty("NSW", 900_000, "established", is_first_home_buyer=True)
        assert duty == pytest.approx(17_615)

    def test_commercial_gets_no_concession(self):
        """Only residential property qualifies."""
        duty = lookup_stamp_duty("NSW", 700_000, "commercial", is_first_home_buyer=True)
        assert duty == pytest.approx(26_230)

    def test_qld_new_build_cap(self):
        """QLD applies a higher cap to new builds."""
        new = lookup_stamp_duty("QLD", 850_000, "newDwelling", is_first_home_buyer=True)
        established = lookup_stamp_duty("QLD", 850_000, "established", is_first_home_buyer=True)
        assert new == pytest.approx(15_637.5)
        assert established == pytest.approx(31_275)

    def test_no_concession_in_sa(self):
        """States without a scheme charge full duty."""
        assert lookup_stamp_duty("SA", 400_000, is_first_home_buyer=True) == lookup_stamp_duty("SA", 400_000)


class TestSurcharges:
    """Foreign purchaser duty and land tax surcharges."""

    @pytest.mark.parametrize("state,expected", [
        ("NSW", 80_000),
        ("SA", 70_000),
        ("ACT", 0),
        ("NT", 0),
    ])
    def test_foreign_duty_surcharge(self, state, expected):
        """Flat percentage of the price."""
        assert lookup_foreign_surcharge(state, 1_000_000) == pytest.approx(expected)

    @pytest.mark.parametrize("state,price,expected", [
        ("NSW", 1_500_000, 17_000),
        ("NSW", 1_000_000, 0),
        ("ACT", 1_000_000, 7_500),
        ("NT", 1_000_000, 0),
    ])
    def test_land_tax_surcharge(self, state, price, expected):
        """Rate applies only to value above the threshold."""
        assert lookup_land_tax_surcharge(state, price) == pytest.approx(expected)


class TestFeeAggregation:
    """End-to-end fee breakdowns."""

    def test_foreign_new_dwelling_nsw(self):
        """Reference case: foreign buyer, new dwelling, $1.5M in NSW."""
        fees = assess(foreign_new()).fees
        assert fees.firb_application_fee == 26_400
        assert fees.stamp_duty == 65_550
        assert fees.surcharge_stamp_duty == 120_000
        assert fees.grand_total == 211_950
        assert fees.land_tax_surcharge == 17_000
        assert fees.vacancy_fee == 0
        assert fees.annual_total == 17_000
        assert fees.first_year_total == 228_950

    def test_vacancy_fee_when_vacant(self):
        """Vacant dwellings pay a vacancy fee equal to the application fee."""
        fees = assess(foreign_new(vacant_more_than_six_months=True)).fees
        assert fees.vacancy_fee == 26_400
        assert fees.annual_total == 43_400

    def test_citizen_pays_only_stamp_duty(self):
        """No FIRB fee or surcharges for citizens."""
        fees = assess(Scenario("australian", "established", 1_500_000, "NSW")).fees
        assert fees.firb_application_fee == 0
        assert fees.surcharge_stamp_duty == 0
        assert fees.grand_total == fees.stamp_duty
        assert fees.annual_total == 0

    def test_not_allowed_priced_as_foreign(self):
        """Blocked purchases show surcharges but no FIRB or vacancy fee."""
        scenario = Scenario("foreign", "established", 1_000_000, "NSW", vacant_more_than_six_months=True)
        fees = assess(scenario).fees
        assert fees.firb_application_fee == 0
        assert fees.stamp_duty == pytest.approx(39_730)
        assert fees.surcharge_stamp_duty == 80_000
        assert fees.vacancy_fee == 0

    def test_company_pays_entity_fee(self):
        """The entity type selects the fee schedule."""
        fees = assess(foreign_new(entity_type="company")).fees
        assert fees.firb_application_fee == 28_600

    def test_temporary_resident(self):
        """Temporary residents pay the foreign buyer charges."""
        scenario = Scenario("temporary", "established", 800_000, "VIC", visa_type=VisaType.STUDENT)
        fees = assess(scenario).fees
        assert fees.firb_application_fee == 13_200
        assert fees.surcharge_stamp_duty == 64_000
        assert fees.land_tax_surcharge == pytest.approx(30_000)

    def test_calculate_fees_without_eligibility(self):
        """Eligibility is computed when not supplied."""
        assert calculate_fees(foreign_new()) == assess(foreign_new()).fees

    @pytest.mark.parametrize("status,visa", [
        ("australian", None),
        ("permanent", None),
        ("foreign", None),
        ("temporary", "student"),
        ("temporary", "bridging"),
    ])
    @pytest.mark.parametrize("prop", list(PropertyType))
    @pytest.mark.parametrize("state", ["NSW", "QLD", "ACT"])
    def test_totals_are_consistent(self, status, visa, prop, state):
        """Totals equal the sum of their components and FIRB fee follows the verdict."""
        result = assess(Scenario(status, prop, 1_250_000, state, visa_type=visa))
        fees = result.fees
        assert fees.grand_total == pytest.approx(
            fees.firb_application_fee + fees.stamp_duty + fees.surcharge_stamp_duty
        )
        assert fees.annual_total == pytest.approx(fees.land_tax_surcharge + fees.vacancy_fee)
        assert fees.first_year_total == pytest.approx(fees.grand_total + fees.annual_total)
        assert (fees.firb_application_fee > 0) == result.eligibility.firb_required
        for value in fees.to_dict().values():
            assert value >= 0

    def test_deterministic(self):
        """Identical scenarios give identical breakdowns."""
        assert assess(foreign_new()).to_dict() == assess(foreign_new()).to_dict()


class TestValidation:
    """Bad inputs and unsafe results."""

    @pytest.mark.parametrize("price", [0, -1, math.nan, math.inf, "100000", True, None])
    def test_invalid_price(self, price):
        """Non-positive, non-finite and non-numeric prices are rejected."""
        with pytest.raises(InvalidValueError):
            foreign_new(price=price)

    def test_unknown_state(self):
        """Unknown state codes raise UnknownStateError."""
        with pytest.raises(UnknownStateError) as exc_info:
            foreign_new(state="XX")
        assert exc_info.value.field == "state"

    def test_unknown_state_in_lookup(self):
        """Lookups validate the state too."""
        with pytest.raises(UnknownStateError):
            lookup_land_tax_surcharge("Tasmania", 500_000)

    def test_overflow_detected(self):
        """Absurd prices overflow the safe range instead of returning garbage."""
        with pytest.raises(ComputationOverflowError) as exc_info:
            assess(foreign_new(price=1e300))
        assert exc_info.value.field == "stamp_duty"

    @pytest.mark.parametrize("value", [math.nan, math.inf, -0.01, 1e16])
    def test_check_amount_rejects_unsafe(self, value):
        """NaN, infinity, negatives and huge values are overflow errors."""
        with pytest.raises(ComputationOverflowError):
            check_amount(value, "test")

    def test_check_amount_rounds_to_cents(self):
        """Amounts are rounded to cents."""
        assert check_amount(10.005001, "test") == 10.01

    def test_assess_rejects_other_types(self):
        """assess accepts only a Scenario or dict."""
        with pytest.raises(InvalidArgumentError):
            assess(["foreign", "newDwelling"])


class TestScenario:
    """Scenario construction and conversion."""

    def test_from_dict_camel_case(self):
        """Plain records with camelCase keys are accepted."""
        scenario = Scenario.from_dict({
            "citizenshipStatus": "foreign",
            "propertyType": "newDwelling",
            "purchasePrice": 1_500_000,
            "state": "nsw",
            "entityType": "individual",
            "vacantMoreThanSixMonths": True,
        })
        assert scenario.citizenship_status is CitizenshipStatus.FOREIGN
        assert scenario.state is AustralianState.NSW
        assert scenario.vacant_more_than_six_months is True

    def test_assess_dict(self):
        """assess builds the scenario from a dict."""
        result = assess({
            "citizenshipStatus": "foreign",
            "propertyType": "newDwelling",
            "purchasePrice": 1_500_000,
            "state": "NSW",
        })
        assert result.fees.first_year_total == 228_950

    def test_to_dict_round_trip(self):
        """to_dict output rebuilds an equal scenario."""
        scenario = foreign_new(entity_type="trust")
        assert Scenario.from_dict(scenario.to_dict()) == scenario

    def test_with_changes(self):
        """with_changes returns a new, revalidated scenario."""
        scenario = foreign_new()
        moved = scenario.with_changes(state="vic")
        assert moved.state is AustralianState.VIC
        assert scenario.state is AustralianState.NSW

    def test_blank_visa_is_none(self):
        """An empty visa string means no visa."""
        assert foreign_new(visa_type="").visa_type is None

    def test_from_dict_string_flags(self):
        """"true" and "false" strings are read as booleans."""
        scenario = Scenario.from_dict({
            "citizenshipStatus": "permanent",
            "propertyType": "established",
            "purchasePrice": 900_000,
            "state": "VIC",
            "isOrdinarilyResident": "false",
            "isFirstHomeBuyer": "TRUE",
        })
        assert scenario.is_ordinarily_resident is False
        assert scenario.is_first_home_buyer is True
        assert assess(scenario).eligibility.firb_required

    @pytest.mark.parametrize("value", ["yes", "", 1, 0, None])
    def test_invalid_flag_rejected(self, value):
        with pytest.raises(InvalidArgumentError) as exc_info:
            foreign_new(is_first_home_buyer=value)
        assert exc_info.value.field == "is_first_home_buyer"

    def test_parse_flag(self):
        assert parse_flag(True, "flag") is True
        assert parse_flag(" False ", "flag") is False


class TestFormatting:
    """Display helpers."""

    def test_format_currency(self):
        assert format_currency(1_234_567) == "$1,234,567"
        assert format_currency(-500) == "-$500"

    def test_format_percent(self):
        assert format_percent(0.075) == "7.5%"
        assert format_percent(0.08) == "8%"
