"""
Australian FIRB Foreign Buyer Calculator - Document Checklist

Personalised list of documents a buyer needs, based on their scenario.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from constants import NEW_TYPES, CitizenshipStatus, EntityType, VisaType
from calculations import Scenario


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    title: str
    category: str
    description: str
    tooltip: str
    required_for: tuple
    link: Optional[str] = None


def _doc(id, title, category, description, tooltip, required_for, link=None):
    return ChecklistItem(id, title, category, description, tooltip, tuple(required_for), link)


DOCUMENTS = (
    # FIRB application
    _doc("firb_form", "Completed FIRB Application Form", "FIRB Application",
         "Official application form for foreign investment approval",
         "Submit online through the FIRB portal. Processing time typically 30 days.",
         ["firb"], "https://firb.gov.au/apply-for-approval"),
    _doc("passport", "Copy of Passport (Certified)", "FIRB Application",
         "Certified copy of your passport identification pages",
         "Must be certified by a Justice of the Peace, police officer, or similar authority",
         ["all"], "https://www.servicesaustralia.gov.au/certified-copies"),
    _doc("visa_proof", "Proof of Visa Status", "FIRB Application",
         "Evidence of your current Australian visa",
         "VEVO (Visa Entitlement Verification Online) printout or visa grant letter",
         ["temporary", "bridging"],
         "https://immi.homeaffairs.gov.au/visas/already-have-a-visa/check-visa-details-and-conditions"),
    _doc("company_incorporation", "Certificate of Incorporation", "FIRB Application",
         "Company registration certificate",
         "Required if purchasing through a company structure",
         ["company"], "https://asic.gov.au/"),
    _doc("trust_deed", "Trust Deed", "FIRB Application",
         "Executed trust deed naming trustees and beneficiaries",
         "Required if purchasing through a trust",
         ["trust"]),
    _doc("ownership_structure", "Ownership Structure Diagram", "FIRB Application",
         "Chart showing company ownership and beneficial owners",
         "Must show all shareholders with >10% ownership and ultimate beneficial owners",
         ["company", "trust"], "https://firb.gov.au/guidance-resources/guidance-notes"),
    _doc("property_details", "Property Details", "FIRB Application",
         "Contract of sale or property address details",
         "Include property address, purchase price, and settlement date",
         ["all"]),
    _doc("proof_of_funds", "Proof of Funds / Finance Pre-Approval", "FIRB Application",
         "Bank statements or loan pre-approval letter",
         "Show you have sufficient funds for deposit and purchase costs",
         ["all"]),
    _doc("developer_certificate", "Developer's Foreign Investment Certificate", "FIRB Application",
         "Certificate from developer confirming FIRB compliance",
         "Required for off-the-plan purchases. Developer should provide this.",
         ["offThePlan", "newDwelling"]),
    _doc("development_plan", "Development Plan and Council Approval", "FIRB Application",
         "Evidence you intend to build within the development timeframe",
         "Vacant land approvals require construction to start within 4 years",
         ["vacantLand"]),
    _doc("identity_proof", "Additional Proof of Identity", "FIRB Application",
         "Driver license, birth certificate, or other ID",
         "May be required in addition to passport",
         ["all"]),

    # State-specific
    _doc("nsw_id_verification", "Additional ID Verification (NSW)", "State-Specific",
         "Extra identification documents for NSW purchases",
         "May include driver license, Medicare card, or utility bills",
         ["NSW"], "https://www.revenue.nsw.gov.au/"),
    _doc("vic_first_home_owner", "First Home Owner Declaration (VIC)", "State-Specific",
         "Declaration if claiming first home owner benefits",
         "Only applicable if eligible for First Home Owner Grant",
         ["VIC-firstHome"], "https://www.sro.vic.gov.au/first-home-owner"),
    *(
        _doc(f"transfer_of_land_{code.lower()}", f"Transfer of Land Form ({code})", "State-Specific",
             f"{code} property transfer documentation",
             "Prepared by your conveyancer or solicitor",
             [code])
        for code in ("NSW", "VIC", "QLD", "SA", "WA", "TAS", "ACT", "NT")
    ),

    # Post-approval
    _doc("firb_approval", "FIRB Approval Certificate", "Post-Approval",
         "Your official FIRB approval notification",
         "Keep this certificate. You'll need it at settlement and for future reference.",
         ["firb"]),
    _doc("contract_of_sale", "Signed Contract of Sale", "Post-Approval",
         "Executed purchase contract",
         "Only sign after receiving FIRB approval",
         ["all"]),
    _doc("building_inspection", "Building Inspection Report", "Post-Approval",
         "Professional building inspection",
         "Highly recommended for established properties. Not applicable for off-the-plan.",
         ["established", "vacantLand"]),
    _doc("pest_inspection", "Pest Inspection Report", "Post-Approval",
         "Professional pest and termite inspection",
         "Highly recommended for established properties, especially in humid climates.",
         ["established"]),
    _doc("vacancy_fee_return", "Annual Vacancy Fee Return", "Post-Approval",
         "Yearly return declaring how long the dwelling was occupied or rented",
         "Lodge within 30 days of each anniversary of settlement",
         ["vacancyReturn"], "https://www.ato.gov.au/"),

    # Financial / professional
    _doc("tax_file_number", "Tax File Number (if applicable)", "Financial",
         "Australian Tax File Number",
         "Required for property income tax purposes",
         ["all"], "https://www.ato.gov.au/individuals-and-families/tax-file-number"),
    _doc("solicitor_details", "Conveyancer/Solicitor Details", "Professional Services",
         "Details of your legal representative",
         "Engage before signing any contracts",
         ["all"]),
)


def scenario_tags(scenario: Scenario, firb_required: bool = True, vacancy_fee: bool = False) -> set:
    """Tags that select which documents apply to this buyer."""
    tags = {"all", scenario.property_type.value, scenario.state.value}

    if firb_required:
        tags.add("firb")
    if vacancy_fee:
        tags.add("vacancyReturn")
    if scenario.citizenship_status is CitizenshipStatus.TEMPORARY:
        tags.add("temporary")
        if scenario.visa_type is VisaType.BRIDGING:
            tags.add("bridging")
    if scenario.entity_type is EntityType.COMPANY:
        tags.add("company")
    elif scenario.entity_type is EntityType.TRUST:
        tags.add("trust")
    if scenario.property_type in NEW_TYPES:
        tags.update(t.value for t in NEW_TYPES)
    if scenario.is_first_home_buyer:
        tags.add(f"{scenario.state.value}-firstHome")
    return tags


def generate_checklist(
    scenario: Scenario,
    firb_required: bool = True,
    vacancy_fee: bool = False,
) -> dict[str, list[ChecklistItem]]:
    """Documents for this scenario, grouped by category in database order."""
    tags = scenario_tags(scenario, firb_required, vacancy_fee)
    grouped: dict[str, list[ChecklistItem]] = {}
    for doc in DOCUMENTS:
        if tags.intersection(doc.required_for):
            grouped.setdefault(doc.category, []).append(doc)
    return grouped


def checklist_progress(
    grouped: dict[str, list[ChecklistItem]],
    completed_ids: Iterable[str],
) -> tuple[int, int, float]:
    """(completed, total, percent complete). Unknown ids are ignored."""
    ids = {item.id for items in grouped.values() for item in items}
    done = len(ids.intersection(completed_ids))
    total = len(ids)
    percent = (done / total * 100) if total else 0.0
    return done, total, percent
