"""
Australian FIRB Foreign Buyer Calculator - Eligibility

Decides whether a buyer needs FIRB approval for a given property type, may buy
it only under conditions, or may not buy it at all.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from constants import (
    ALTERNATIVE_LABELS,
    CITIZENSHIP_LABELS,
    DEVELOPMENT_TIMEFRAME_YEARS,
    NEW_TYPES,
    PROPERTY_TYPE_LABELS,
    SELL_AFTER_VISA_EXPIRY_MONTHS,
    VISA_CAPABILITIES,
    CitizenshipStatus,
    FirbResult,
    PropertyType,
    VisaType,
)
from errors import InvalidArgumentError, UnhandledRuleCombinationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityResult:
    """Verdict for one (citizenship, visa, property type) query."""
    result: FirbResult
    firb_required: bool
    reason: str
    citizenship_status: CitizenshipStatus
    property_type: PropertyType
    visa_type: Optional[VisaType] = None
    conditions: Optional[str] = None
    alternatives: tuple = ()
    metadata: Mapping = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        expected = self.result in (FirbResult.REQUIRED, FirbResult.CONDITIONAL)
        if self.firb_required != expected:
            raise UnhandledRuleCombinationError(
                f"firb_required={self.firb_required} contradicts result {self.result.value}",
                field="result",
                value=self.result,
            )

    @property
    def allowed(self) -> bool:
        return self.result is not FirbResult.NOT_ALLOWED

    @property
    def citizenship_label(self) -> str:
        return get_citizenship_label(self.citizenship_status)

    @property
    def property_type_label(self) -> str:
        return get_property_type_label(self.property_type)

    def to_dict(self) -> dict:
        return {
            "result": self.result.value,
            "firbRequired": self.firb_required,
            "reason": self.reason,
            "conditions": self.conditions,
            "alternatives": list(self.alternatives),
            "metadata": dict(self.metadata),
            "citizenshipStatus": self.citizenship_status.value,
            "visaType": self.visa_type.value if self.visa_type else None,
            "propertyType": self.property_type.value,
            "citizenshipLabel": self.citizenship_label,
            "propertyTypeLabel": self.property_type_label,
        }


# =============================================================================
# INPUT PARSING
# =============================================================================

def parse_enum(enum_cls, value, field_name: str):
    """
    Coerce a raw value (member or its string value) into `enum_cls`.

    Raises InvalidArgumentError when the value is missing or not recognised.
    """
    if value is None or value == "":
        logger.warning("Missing required field %s", field_name)
        raise InvalidArgumentError(f"{field_name} is required", field=field_name)
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        logger.warning("Invalid %s: %r", field_name, value)
        raise InvalidArgumentError(
            f"Invalid {field_name}: {value}. Must be one of: {valid}",
            field=field_name,
            value=value,
        ) from None


def get_citizenship_label(citizenship_status) -> str:
    """Human-readable citizenship label, e.g. 'Temporary Resident'."""
    try:
        return CITIZENSHIP_LABELS[CitizenshipStatus(citizenship_status)]
    except ValueError:
        return "Unknown Status"


def get_property_type_label(property_type) -> str:
    """Human-readable property type label, e.g. 'Established Dwelling'."""
    try:
        return PROPERTY_TYPE_LABELS[PropertyType(property_type)]
    except ValueError:
        return "Unknown Property Type"


def is_foreign_person(citizenship_status, is_ordinarily_resident: bool = True) -> bool:
    """Whether the buyer is treated as a foreign person for FIRB purposes."""
    status = parse_enum(CitizenshipStatus, citizenship_status, "citizenship_status")
    if status is CitizenshipStatus.AUSTRALIAN:
        return False
    if status is CitizenshipStatus.PERMANENT:
        return not is_ordinarily_resident
    return True


# =============================================================================
# RULE ENGINE
# =============================================================================

def _metadata(**values) -> Mapping:
    return MappingProxyType(values)


def check_eligibility(
    citizenship_status,
    visa_type=None,
    property_type=None,
    is_ordinarily_resident: bool = True,
) -> EligibilityResult:
    """
    Check if FIRB approval is required for a property purchase.

    Args:
        citizenship_status: CitizenshipStatus member or value
        visa_type: VisaType member or value, required for temporary residents
        property_type: PropertyType member or value
        is_ordinarily_resident: Only relevant to permanent residents

    Returns:
        EligibilityResult with verdict, reason, conditions and metadata

    Raises:
        InvalidArgumentError: missing/unknown citizenship, property or visa type
        UnhandledRuleCombinationError: no rule covers the combination
    """
    status = parse_enum(CitizenshipStatus, citizenship_status, "citizenship_status")
    prop = parse_enum(PropertyType, property_type, "property_type")

    visa = None
    if status is CitizenshipStatus.TEMPORARY:
        if visa_type is None or visa_type == "":
            logger.warning("visa_type is required for temporary residents")
            raise InvalidArgumentError(
                "visa_type is required for temporary residents", field="visa_type"
            )
    if visa_type is not None and visa_type != "":
        visa = parse_enum(VisaType, visa_type, "visa_type")

    logger.debug(
        "Checking eligibility: status=%s visa=%s property=%s ordinarily_resident=%s",
        status.value, visa.value if visa else None, prop.value, is_ordinarily_resident,
    )

    base = {"citizenship_status": status, "property_type": prop, "visa_type": visa}

    if status is CitizenshipStatus.AUSTRALIAN:
        return EligibilityResult(
            result=FirbResult.NOT_REQUIRED,
            firb_required=False,
            reason="Australian citizens do not require FIRB approval for residential property purchases",
            metadata=_metadata(
                exemption_type="citizenship",
                stamp_duty_surcharge=False,
                land_tax_surcharge=False,
                vacancy_fee=False,
            ),
            **base,
        )

    if status is CitizenshipStatus.PERMANENT:
        return _check_permanent_resident(is_ordinarily_resident, base)

    if status is CitizenshipStatus.FOREIGN:
        return _check_foreign_national(prop, base)

    return _check_temporary_resident(prop, visa, base)


def _check_permanent_resident(is_ordinarily_resident: bool, base: dict) -> EligibilityResult:
    if is_ordinarily_resident:
        return EligibilityResult(
            result=FirbResult.NOT_REQUIRED,
            firb_required=False,
            reason="Permanent residents ordinarily resident in Australia do not require FIRB approval",
            conditions="You must be ordinarily resident in Australia (spending majority of time in Australia)",
            metadata=_metadata(
                exemption_type="permanent_residency",
                stamp_duty_surcharge=False,
                land_tax_surcharge=False,
                vacancy_fee=False,
                ordinarily_resident_required=True,
            ),
            **base,
        )
    return EligibilityResult(
        result=FirbResult.REQUIRED,
        firb_required=True,
        reason="Permanent residents who are NOT ordinarily resident in Australia require FIRB approval",
        conditions="You are treated as a foreign person if you spend most of your time overseas",
        metadata=_metadata(
            exemption_type="none",
            stamp_duty_surcharge=True,
            land_tax_surcharge=True,
            vacancy_fee=True,
            ordinarily_resident_required=True,
        ),
        **base,
    )


def _check_foreign_national(prop: PropertyType, base: dict) -> EligibilityResult:
    if prop in NEW_TYPES:
        return EligibilityResult(
            result=FirbResult.REQUIRED,
            firb_required=True,
            reason="Foreign nationals can purchase new dwellings and off-the-plan properties with FIRB approval",
            conditions="Property must be brand new and never previously occupied",
            metadata=_metadata(
                allowed=True,
                stamp_duty_surcharge=True,
                land_tax_surcharge=True,
                vacancy_fee=True,
                estimated_processing_days="30-60",
            ),
            **base,
        )

    if prop is PropertyType.ESTABLISHED:
        return EligibilityResult(
            result=FirbResult.NOT_ALLOWED,
            firb_required=False,
            reason="Foreign nationals are NOT permitted to purchase established dwellings",
            conditions=(
                "Established properties are reserved for Australian citizens, "
                "permanent residents, and temporary residents"
            ),
            alternatives=(
                ALTERNATIVE_LABELS[PropertyType.NEW_DWELLING],
                ALTERNATIVE_LABELS[PropertyType.OFF_THE_PLAN],
                ALTERNATIVE_LABELS[PropertyType.VACANT_LAND],
            ),
            metadata=_metadata(
                allowed=False,
                prohibition="Foreign nationals cannot buy established residential property",
            ),
            **base,
        )

    if prop is PropertyType.VACANT_LAND:
        return EligibilityResult(
            result=FirbResult.CONDITIONAL,
            firb_required=True,
            reason="Foreign nationals can purchase vacant land with FIRB approval and development conditions",
            conditions=(
                "You must: (1) Obtain FIRB approval, "
                f"(2) Commence continuous construction within {DEVELOPMENT_TIMEFRAME_YEARS} years, "
                f"(3) Complete construction within {DEVELOPMENT_TIMEFRAME_YEARS} years of commencement"
            ),
            metadata=_metadata(
                allowed=True,
                stamp_duty_surcharge=True,
                land_tax_surcharge=True,
                vacancy_fee=False,
                development_required=True,
                timeframe_years=DEVELOPMENT_TIMEFRAME_YEARS,
                estimated_processing_days="30-60",
            ),
            **base,
        )

    if prop is PropertyType.COMMERCIAL:
        return EligibilityResult(
            result=FirbResult.REQUIRED,
            firb_required=True,
            reason="Foreign nationals can purchase commercial property with FIRB approval under different rules",
            conditions=(
                "Commercial property acquisitions have different thresholds and requirements. "
                "Consult FIRB for commercial property guidelines."
            ),
            metadata=_metadata(
                allowed=True,
                different_rules=True,
                threshold_based=True,
                estimated_processing_days="40-90",
            ),
            **base,
        )

    raise UnhandledRuleCombinationError(
        f"Unhandled property type for foreign national: {prop.value}",
        field="property_type",
        value=prop,
    )


def _visa_alternatives(capability) -> tuple:
    alternatives = []
    if capability.can_buy_new:
        alternatives.append(ALTERNATIVE_LABELS[PropertyType.NEW_DWELLING])
        alternatives.append(ALTERNATIVE_LABELS[PropertyType.OFF_THE_PLAN])
    if capability.can_buy_vacant:
        alternatives.append(ALTERNATIVE_LABELS[PropertyType.VACANT_LAND])
    return tuple(alternatives)


def _check_temporary_resident(
    prop: PropertyType, visa: VisaType, base: dict
) -> EligibilityResult:
    capability = VISA_CAPABILITIES.get(visa)
    if capability is None:
        raise InvalidArgumentError(f"Unknown visa type: {visa}", field="visa_type", value=visa)

    sell_months = SELL_AFTER_VISA_EXPIRY_MONTHS

    if prop in NEW_TYPES and capability.can_buy_new:
        return EligibilityResult(
            result=FirbResult.REQUIRED,
            firb_required=True,
            reason="Temporary residents can purchase new dwellings with FIRB approval",
            conditions=(
                f"{capability.condition}. You must sell the property within {sell_months} months "
                "of your visa expiring or leaving Australia permanently."
            ),
            metadata=_metadata(
                allowed=True,
                visa_type=visa.value,
                stamp_duty_surcharge=True,
                land_tax_surcharge=True,
                vacancy_fee=True,
                must_be_residence=capability.must_be_residence,
                must_sell_on_departure=capability.must_sell_on_departure,
                estimated_processing_days="30-60",
            ),
            **base,
        )

    if prop is PropertyType.ESTABLISHED:
        if capability.can_buy_established:
            return EligibilityResult(
                result=FirbResult.CONDITIONAL,
                firb_required=True,
                reason=(
                    "Temporary residents can purchase established dwellings with FIRB "
                    "approval under specific conditions"
                ),
                conditions=(
                    f"STRICT CONDITIONS APPLY: (1) {capability.condition}, "
                    "(2) Maximum ONE established dwelling at a time, "
                    f"(3) Must sell within {sell_months} months of visa expiry or departure, "
                    "(4) Cannot rent out the property, "
                    "(5) Must live in the property as your main residence"
                ),
                metadata=_metadata(
                    allowed=True,
                    visa_type=visa.value,
                    stamp_duty_surcharge=True,
                    land_tax_surcharge=True,
                    vacancy_fee=True,
                    must_be_residence=True,
                    must_sell_on_departure=True,
                    cannot_rent_out=True,
                    maximum_properties=1,
                    estimated_processing_days="30-60",
                ),
                **base,
            )
        return EligibilityResult(
            result=FirbResult.NOT_ALLOWED,
            firb_required=False,
            reason=f"Your visa type ({visa.value}) does not permit purchasing established dwellings",
            conditions=capability.condition,
            alternatives=_visa_alternatives(capability),
            metadata=_metadata(
                allowed=False,
                visa_type=visa.value,
                prohibition=f"{visa.value} visa holders cannot buy established dwellings",
            ),
            **base,
        )

    if prop is PropertyType.VACANT_LAND:
        if capability.can_buy_vacant:
            years = DEVELOPMENT_TIMEFRAME_YEARS
            return EligibilityResult(
                result=FirbResult.CONDITIONAL,
                firb_required=True,
                reason=(
                    "Temporary residents can purchase vacant land with FIRB approval "
                    "and development conditions"
                ),
                conditions=(
                    f"{capability.condition}. You must: (1) Commence continuous construction "
                    f"within {years} years, (2) Complete within {years} years of commencement, "
                    f"(3) Property must be your residence, (4) Sell within {sell_months} months "
                    "of visa expiry"
                ),
                metadata=_metadata(
                    allowed=True,
                    visa_type=visa.value,
                    stamp_duty_surcharge=True,
                    land_tax_surcharge=True,
                    vacancy_fee=False,
                    development_required=True,
                    timeframe_years=years,
                    must_be_residence=True,
                    must_sell_on_departure=True,
                    estimated_processing_days="30-60",
                ),
                **base,
            )
        return EligibilityResult(
            result=FirbResult.NOT_ALLOWED,
            firb_required=False,
            reason=f"Your visa type ({visa.value}) does not permit purchasing vacant land",
            conditions=capability.condition,
            alternatives=_visa_alternatives(capability),
            metadata=_metadata(
                allowed=False,
                visa_type=visa.value,
                prohibition=f"{visa.value} visa holders cannot buy vacant land",
            ),
            **base,
        )

    if prop is PropertyType.COMMERCIAL:
        return EligibilityResult(
            result=FirbResult.REQUIRED,
            firb_required=True,
            reason="Temporary residents can purchase commercial property with FIRB approval",
            conditions=(
                "Commercial property acquisitions have different rules. "
                "Consult FIRB for specific requirements."
            ),
            metadata=_metadata(
                allowed=True,
                visa_type=visa.value,
                different_rules=True,
                estimated_processing_days="40-90",
            ),
            **base,
        )

    logger.error("Unhandled rule for temporary resident: visa=%s property=%s", visa.value, prop.value)
    raise UnhandledRuleCombinationError(
        f"Unhandled property type for temporary resident ({visa.value}): {prop.value}",
        field="property_type",
        value=prop,
    )


def build_eligibility_matrix(
    citizenship_status,
    visa_type=None,
    is_ordinarily_resident: bool = True,
) -> list[EligibilityResult]:
    """Check every property type for one buyer profile."""
    return [
        check_eligibility(citizenship_status, visa_type, prop, is_ordinarily_resident)
        for prop in PropertyType
    ]
