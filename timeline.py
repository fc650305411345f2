"""
Australian FIRB Foreign Buyer Calculator - Compliance Timeline

Key dates from FIRB lodgement through settlement and the ongoing obligations
attached to an approval.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from constants import (
    DEFAULT_SETTLEMENT_WEEKS,
    DEVELOPMENT_TIMEFRAME_YEARS,
    FIRB_APPROVAL_VALID_MONTHS,
    SELL_AFTER_VISA_EXPIRY_MONTHS,
    SETTLEMENT_NOTIFICATION_DAYS,
    CitizenshipStatus,
    FirbResult,
    processing_days_upper,
)
from calculations import Assessment


@dataclass(frozen=True)
class Milestone:
    key: str
    title: str
    due: date
    description: str
    recurring: bool = False


def build_timeline(
    assessment: Assessment,
    start_date: date,
    settlement_date: Optional[date] = None,
    visa_expiry: Optional[date] = None,
    vacancy_years: int = 3,
) -> list[Milestone]:
    """
    Milestones for an assessed purchase, sorted by due date.

    Purchases that do not need FIRB approval only get settlement. Blocked
    purchases get no timeline at all.
    """
    eligibility = assessment.eligibility
    if eligibility.result is FirbResult.NOT_ALLOWED:
        return []

    meta = eligibility.metadata
    milestones = []

    if settlement_date is None:
        settlement_date = start_date + relativedelta(weeks=DEFAULT_SETTLEMENT_WEEKS)

    if eligibility.firb_required:
        processing_days = processing_days_upper(meta.get("estimated_processing_days"))
        milestones.append(Milestone(
            "lodge", "Lodge FIRB application", start_date,
            f"Pay the {assessment.fees.firb_application_fee:,.0f} application fee when lodging",
        ))
        decision = start_date + relativedelta(days=processing_days)
        milestones.append(Milestone(
            "decision", "Expected FIRB decision", decision,
            f"Statutory processing is up to {processing_days} days; sign the contract only after approval",
        ))
        milestones.append(Milestone(
            "approval_expiry", "Approval expires if unused",
            decision + relativedelta(months=FIRB_APPROVAL_VALID_MONTHS),
            f"Approvals are typically valid for {FIRB_APPROVAL_VALID_MONTHS} months",
        ))

    milestones.append(Milestone(
        "settlement", "Settlement", settlement_date,
        "Stamp duty and any foreign purchaser surcharge are due around settlement",
    ))

    if eligibility.firb_required:
        milestones.append(Milestone(
            "notify_settlement", "Notify FIRB of settlement",
            settlement_date + relativedelta(days=SETTLEMENT_NOTIFICATION_DAYS),
            f"Foreign buyers must notify FIRB within {SETTLEMENT_NOTIFICATION_DAYS} days of settlement",
        ))

    if meta.get("vacancy_fee"):
        for year in range(1, vacancy_years + 1):
            milestones.append(Milestone(
                f"vacancy_return_{year}", f"Vacancy fee return (year {year})",
                settlement_date + relativedelta(years=year),
                "Declare occupancy; the vacancy fee applies if vacant for more than 183 days",
                recurring=True,
            ))

    if meta.get("development_required"):
        years = meta.get("timeframe_years", DEVELOPMENT_TIMEFRAME_YEARS)
        milestones.append(Milestone(
            "development_deadline", "Construction must have commenced",
            settlement_date + relativedelta(years=years),
            f"Continuous construction must start within {years} years of acquisition",
        ))

    if (
        eligibility.citizenship_status is CitizenshipStatus.TEMPORARY
        and meta.get("must_sell_on_departure")
        and visa_expiry is not None
    ):
        milestones.append(Milestone(
            "sell_by", "Sell the property",
            visa_expiry + relativedelta(months=SELL_AFTER_VISA_EXPIRY_MONTHS),
            f"Temporary residents must sell within {SELL_AFTER_VISA_EXPIRY_MONTHS} months of visa expiry",
        ))

    milestones.sort(key=lambda m: m.due)
    return milestones
