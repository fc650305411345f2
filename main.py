"""
Australian FIRB Foreign Buyer Calculator

A Streamlit app to help foreign buyers estimate FIRB application fees,
stamp duty surcharges and ongoing land tax obligations in every state.

Features:
- Eligibility wizard (citizenship, visa and property type rules)
- Upfront and annual fee breakdown
- State and property type comparison
- Saved scenarios with JSON export/import
- Cost optimiser (property type, state, timing, structure), document checklist and compliance timeline
- Investment analysis

Run with: streamlit run main.py
"""

import logging

import streamlit as st
from datetime import date
from dateutil.relativedelta import relativedelta
import pandas as pd

from constants import (
    DATA_VERSION,
    DEFAULTS,
    PRICE_MIN,
    PRICE_MAX,
    PRICE_STEP,
    STATE_NAMES,
    STATE_RATES,
    VISA_CAPABILITIES,
    AustralianState,
    CitizenshipStatus,
    EntityType,
    FirbResult,
    PropertyType,
    VisaType,
)
from eligibility import (
    build_eligibility_matrix,
    get_citizenship_label,
    get_property_type_label,
)
from calculations import (
    Scenario,
    assess,
    format_currency,
    format_percent,
)
from errors import FIRBCalculatorError
from scenarios import (
    calculate_savings,
    compare_property_types,
    compare_states,
    default_name,
    delete_scenario,
    find_cheapest_option,
    find_lowest_cost,
    merge_scenarios,
    save_scenario,
    scenarios_from_json,
    scenarios_to_json,
)
from optimizer import city_for, optimize
from checklist import checklist_progress, generate_checklist
from timeline import build_timeline
from investment import InvestmentInputs, analyze_cases
from charts import (
    create_fee_breakdown_chart,
    create_investment_projection_chart,
    create_property_type_chart,
    create_scenario_comparison_chart,
    create_state_comparison_chart,
    create_state_table_data,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s – %(levelname)s – %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="FIRB Foreign Buyer Calculator",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)

VERDICT_DISPLAY = {
    FirbResult.NOT_REQUIRED: ("✅ FIRB approval not required", st.success),
    FirbResult.REQUIRED: ("📋 FIRB approval required", st.info),
    FirbResult.CONDITIONAL: ("⚠️ Allowed with conditions (FIRB approval required)", st.warning),
    FirbResult.NOT_ALLOWED: ("❌ Purchase not allowed", st.error),
}


# =============================================================================
# SIDEBAR - CONFIGURATION
# =============================================================================

def render_sidebar() -> Scenario:
    """Render the configuration sidebar and return the current scenario."""
    st.sidebar.title("🏠 FIRB Calculator")
    st.sidebar.markdown("---")

    # =========================================================================
    # Section 1: Buyer
    # =========================================================================
    st.sidebar.header("👤 Buyer")

    statuses = list(CitizenshipStatus)
    citizenship = st.sidebar.selectbox(
        "Citizenship / Residency",
        statuses,
        index=statuses.index(DEFAULTS["citizenship_status"]),
        format_func=get_citizenship_label,
    )

    visa_type = None
    if citizenship is CitizenshipStatus.TEMPORARY:
        visas = list(VisaType)
        visa_type = st.sidebar.selectbox(
            "Visa Type",
            visas,
            index=visas.index(DEFAULTS["visa_type"]),
            format_func=lambda v: VISA_CAPABILITIES[v].label,
        )

    is_ordinarily_resident = True
    if citizenship is CitizenshipStatus.PERMANENT:
        is_ordinarily_resident = st.sidebar.checkbox(
            "Ordinarily resident in Australia",
            value=True,
            help="Spent more than 200 days in Australia in the last 12 months",
        )

    entities = list(EntityType)
    entity_type = st.sidebar.selectbox(
        "Purchasing As",
        entities,
        index=entities.index(DEFAULTS["entity_type"]),
        format_func=lambda e: e.value.title(),
        help="Companies and trusts pay higher FIRB application fees",
    )

    # =========================================================================
    # Section 2: Property
    # =========================================================================
    st.sidebar.markdown("---")
    st.sidebar.header("🏢 Property")

    property_types = list(PropertyType)
    property_type = st.sidebar.selectbox(
        "Property Type",
        property_types,
        index=property_types.index(DEFAULTS["property_type"]),
        format_func=get_property_type_label,
    )

    states = list(AustralianState)
    state = st.sidebar.selectbox(
        "State / Territory",
        states,
        index=states.index(DEFAULTS["state"]),
        format_func=lambda s: f"{s.value} – {STATE_NAMES[s]}",
    )

    # Initialize session state for price sync
    if "price_slider" not in st.session_state:
        st.session_state.price_slider = DEFAULTS["purchase_price"]
    if "price_input" not in st.session_state:
        st.session_state.price_input = DEFAULTS["purchase_price"]

    def sync_price_from_slider():
        st.session_state.price_input = st.session_state.price_slider

    def sync_price_from_input():
        st.session_state.price_slider = st.session_state.price_input

    st.sidebar.slider(
        "Purchase Price",
        min_value=PRICE_MIN,
        max_value=PRICE_MAX,
        step=PRICE_STEP,
        format="$%d",
        key="price_slider",
        on_change=sync_price_from_slider,
    )
    st.sidebar.number_input(
        "Exact Price",
        min_value=PRICE_MIN,
        max_value=PRICE_MAX,
        step=PRICE_STEP,
        key="price_input",
        on_change=sync_price_from_input,
    )

    is_first_home_buyer = st.sidebar.checkbox(
        "First home buyer",
        value=False,
        help="Concessions apply in NSW, VIC, QLD and WA for residential property",
    )
    vacant = st.sidebar.checkbox(
        "Property will be vacant more than 6 months a year",
        value=False,
        help="Foreign owners pay an annual vacancy fee on dwellings left empty",
    )

    return Scenario(
        citizenship_status=citizenship,
        visa_type=visa_type,
        property_type=property_type,
        purchase_price=st.session_state.price_slider,
        state=state,
        entity_type=entity_type,
        is_ordinarily_resident=is_ordinarily_resident,
        is_first_home_buyer=is_first_home_buyer,
        vacant_more_than_six_months=vacant,
    )


# =============================================================================
# MAIN CONTENT - TABS
# =============================================================================

def render_eligibility_tab(scenario: Scenario, assessment):
    """Tab 1: Eligibility Wizard"""
    st.header("🧭 Eligibility")

    eligibility = assessment.eligibility
    message, show = VERDICT_DISPLAY[eligibility.result]
    show(f"**{message}** – {eligibility.reason}")

    if eligibility.conditions:
        st.markdown(f"**Conditions:** {eligibility.conditions}")

    if eligibility.alternatives:
        st.markdown("**You could consider instead:**")
        for alternative in eligibility.alternatives:
            st.write(f"- {alternative}")

    processing = eligibility.metadata.get("estimated_processing_days")
    if processing:
        st.caption(f"Estimated FIRB processing time: {processing} days")

    st.markdown("---")
    st.subheader("What can you buy?")
    matrix = build_eligibility_matrix(
        scenario.citizenship_status, scenario.visa_type, scenario.is_ordinarily_resident
    )
    st.dataframe(
        pd.DataFrame([
            {
                "Property Type": r.property_type_label,
                "Verdict": VERDICT_DISPLAY[r.result][0],
                "FIRB Required": "Yes" if r.firb_required else "No",
            }
            for r in matrix
        ]),
        hide_index=True,
        use_container_width=True,
    )


def render_fees_tab(assessment):
    """Tab 2: Fee Breakdown"""
    st.header("💰 Fees")

    fees = assessment.fees
    scenario = assessment.scenario

    if assessment.eligibility.result is FirbResult.NOT_ALLOWED:
        st.warning(
            "⚠️ This purchase is not allowed. Costs are shown as a foreign buyer would pay "
            "them, for comparison only."
        )

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Upfront Costs", format_currency(fees.grand_total))
    with col2:
        st.metric("Annual Costs", format_currency(fees.annual_total))
    with col3:
        st.metric("First Year Total", format_currency(fees.first_year_total))

    col1, col2 = st.columns(2)
    with col1:
        with st.expander("📝 Calculation Details", expanded=True):
            rates = STATE_RATES[scenario.state]
            st.markdown("**Upfront**")
            st.write(f"- FIRB Application Fee: {format_currency(fees.firb_application_fee)}")
            st.write(f"- Stamp Duty: {format_currency(fees.stamp_duty)}")
            st.write(
                f"- Foreign Surcharge ({format_percent(rates.foreign_surcharge_rate)}): "
                f"{format_currency(fees.surcharge_stamp_duty)}"
            )
            st.markdown("**Annual**")
            st.write(
                f"- Land Tax Surcharge ({format_percent(rates.land_tax_surcharge_rate)}): "
                f"{format_currency(fees.land_tax_surcharge)}"
            )
            st.write(f"- Vacancy Fee: {format_currency(fees.vacancy_fee)}")
    with col2:
        if fees.first_year_total > 0:
            st.plotly_chart(create_fee_breakdown_chart(fees), use_container_width=True)


def render_comparison_tab(scenario: Scenario):
    """Tab 3: State and Property Type Comparison"""
    st.header("🗺️ Compare")

    rows = compare_states(scenario)
    st.plotly_chart(create_state_comparison_chart(rows, scenario.state), use_container_width=True)
    st.dataframe(pd.DataFrame(create_state_table_data(rows)), hide_index=True, use_container_width=True)

    st.subheader("By Property Type")
    st.plotly_chart(create_property_type_chart(compare_property_types(scenario)), use_container_width=True)

    cheapest = find_cheapest_option(scenario)
    if cheapest is not None:
        st.success(
            f"Cheapest allowed option: **{cheapest.eligibility.property_type_label}** in "
            f"**{cheapest.scenario.state.value}** at {format_currency(cheapest.fees.first_year_total)} "
            "in the first year"
        )


def render_scenarios_tab(scenario: Scenario):
    """Tab 4: Saved Scenarios"""
    st.header("📁 Scenarios")

    if "saved_scenarios" not in st.session_state:
        st.session_state.saved_scenarios = []
    saved = st.session_state.saved_scenarios

    col1, col2 = st.columns([3, 1])
    with col1:
        name = st.text_input("Scenario name", placeholder=default_name(saved))
    with col2:
        st.write("")
        if st.button("💾 Save current", use_container_width=True):
            try:
                st.session_state.saved_scenarios = save_scenario(saved, name, scenario)
                st.rerun()
            except FIRBCalculatorError as exc:
                st.error(f"❌ {exc}")

    if not saved:
        st.info("No saved scenarios yet. Configure a purchase in the sidebar and save it here.")
    else:
        lowest = find_lowest_cost(saved)
        st.plotly_chart(create_scenario_comparison_chart(saved), use_container_width=True)
        st.dataframe(
            pd.DataFrame([
                {
                    "Name": ("⭐ " if s is lowest else "") + s.name,
                    "State": s.assessment.scenario.state.value,
                    "Property": s.assessment.eligibility.property_type_label,
                    "Price": format_currency(s.assessment.scenario.purchase_price),
                    "Upfront": format_currency(s.assessment.fees.grand_total),
                    "Annual": format_currency(s.assessment.fees.annual_total),
                    "First Year": format_currency(s.first_year_total),
                    "Saves vs Most Expensive": format_currency(calculate_savings(s, saved)),
                }
                for s in saved
            ]),
            hide_index=True,
            use_container_width=True,
        )

        names = {s.id: s.name for s in saved}
        to_delete = st.selectbox("Delete scenario", [None] + list(names),
                                 format_func=lambda sid: "-" if sid is None else names[sid])
        if to_delete is not None and st.button("🗑️ Delete"):
            st.session_state.saved_scenarios = delete_scenario(saved, to_delete)
            st.rerun()

        st.download_button(
            "⬇️ Export JSON",
            data=scenarios_to_json(saved),
            file_name="firb-scenarios.json",
            mime="application/json",
        )

    uploaded = st.file_uploader("Import scenarios", type="json")
    # The uploader keeps its file across reruns, so only import each file once
    if uploaded is not None and st.session_state.get("imported_file") != (uploaded.name, uploaded.size):
        st.session_state.imported_file = (uploaded.name, uploaded.size)
        try:
            imported = scenarios_from_json(uploaded.getvalue())
            st.session_state.saved_scenarios = merge_scenarios(saved, imported)
        except FIRBCalculatorError as exc:
            st.error(f"❌ {exc}")
        else:
            st.success(f"Imported {len(imported)} scenarios")


def render_optimizer_tab(scenario: Scenario):
    """Tab 5: Cost Optimiser"""
    st.header("💡 Cost Optimiser")

    report = optimize(scenario)
    st.metric("Total Potential Savings", format_currency(report.total_potential_savings))

    if report.property_type is not None:
        pt = report.property_type
        st.subheader("Property Type")
        if not pt.established_allowed:
            st.info("Established dwellings are not available to you; new dwellings are the only option.")
        else:
            st.write(
                f"Established: {format_currency(pt.established_cost)} vs "
                f"New: {format_currency(pt.new_cost)} "
                f"(recommendation: **{get_property_type_label(pt.recommendation)}**)"
            )

    st.subheader("Other States")
    for row in report.state_arbitrage.top3:
        st.write(
            f"- **{row.state.value}** ({city_for(row.state)}): "
            f"{format_currency(row.total_cost)} – saves {format_currency(row.savings)}"
        )

    if report.timing is not None:
        timing = report.timing
        st.subheader("Waiting for Permanent Residency")
        st.write(
            f"Buying as a permanent resident would cost {format_currency(timing.pr_cost)}, "
            f"saving {format_currency(timing.total_savings)} ({timing.savings_percent:.0f}%)."
        )
        st.dataframe(
            pd.DataFrame([
                {
                    "Growth": oc.label,
                    "Pathway": oc.pathway,
                    "Months": oc.months_to_wait,
                    "Fees Saved": format_currency(oc.fees_saved),
                    "Price Increase": format_currency(oc.price_increase),
                    "Worth Waiting": "✅" if oc.still_worth_it else "❌",
                }
                for oc in timing.opportunity_costs
            ]),
            hide_index=True,
            use_container_width=True,
        )

    if report.structure is not None:
        st.subheader("Ownership Structure")
        st.warning("⚠️ Estimates only. Get legal and tax advice before changing how you buy.")
        for option in report.structure.options:
            with st.expander(f"{option.structure}: saves {format_currency(option.savings)}"):
                st.write(option.description)
                st.write(
                    f"Upfront cost {format_currency(option.total_cost)} "
                    f"(setup {format_currency(option.setup_cost)}, "
                    f"then {format_currency(option.annual_cost)} a year)"
                )
                st.markdown("**Risks:** " + "; ".join(option.risks))


def render_checklist_tab(assessment):
    """Tab 6: Document Checklist and Timeline"""
    st.header("✅ Checklist & Timeline")

    eligibility = assessment.eligibility
    if eligibility.result is FirbResult.NOT_ALLOWED:
        st.error("❌ This purchase is not allowed, so there is nothing to prepare.")
        return

    grouped = generate_checklist(
        assessment.scenario,
        firb_required=eligibility.firb_required,
        vacancy_fee=bool(eligibility.metadata.get("vacancy_fee")),
    )

    if "checklist_done" not in st.session_state:
        st.session_state.checklist_done = set()

    for category, items in grouped.items():
        st.subheader(category)
        for item in items:
            checked = st.checkbox(item.title, value=item.id in st.session_state.checklist_done,
                                  key=f"doc_{item.id}", help=item.tooltip)
            if checked:
                st.session_state.checklist_done.add(item.id)
            else:
                st.session_state.checklist_done.discard(item.id)

    done, total, percent = checklist_progress(grouped, st.session_state.checklist_done)
    st.progress(percent / 100, text=f"{done} of {total} documents ready")

    st.markdown("---")
    st.subheader("📅 Timeline")
    today = date.today()
    settlement = st.date_input(
        "Expected Settlement Date",
        value=today + relativedelta(weeks=10),
        min_value=today,
        max_value=today + relativedelta(years=5),
    )
    visa_expiry = None
    if assessment.scenario.citizenship_status is CitizenshipStatus.TEMPORARY:
        visa_expiry = st.date_input(
            "Visa Expiry Date",
            value=today + relativedelta(years=2),
            min_value=today,
        )

    milestones = build_timeline(assessment, today, settlement, visa_expiry)
    st.dataframe(
        pd.DataFrame([
            {"Date": m.due.strftime("%d %b %Y"), "Milestone": m.title, "Details": m.description}
            for m in milestones
        ]),
        hide_index=True,
        use_container_width=True,
    )


def render_investment_tab(assessment):
    """Tab 7: Investment Analysis"""
    st.header("📈 Investment Analysis")

    col1, col2, col3 = st.columns(3)
    with col1:
        weekly_rent = st.number_input("Weekly Rent", min_value=0, value=DEFAULTS["weekly_rent"], step=10)
        hold_period = st.slider("Hold Period (years)", 1, 30, DEFAULTS["hold_period_years"])
    with col2:
        growth = st.slider("Capital Growth (% p.a.)", 0.0, 10.0, DEFAULTS["capital_growth_rate"] * 100, 0.5)
        vacancy = st.slider("Vacancy Rate (%)", 0.0, 20.0, DEFAULTS["vacancy_rate"] * 100, 0.5)
    with col3:
        management = st.slider("Management Fee (%)", 0.0, 15.0, DEFAULTS["management_fee_rate"] * 100, 0.5)
        council = st.number_input("Council Rates (annual)", min_value=0, value=DEFAULTS["council_rates"], step=100)

    with st.expander("🌏 Home Country Comparison"):
        exchange_rate = st.number_input(
            "Exchange Rate (home currency per AUD)", min_value=0.0001,
            value=DEFAULTS["exchange_rate"], step=0.01, format="%.4f",
        )
        home_return = st.slider(
            "Home Country Return (% p.a.)", 0.0, 15.0, DEFAULTS["home_country_return_rate"] * 100, 0.5
        )

    inputs = InvestmentInputs(
        purchase_price=assessment.scenario.purchase_price,
        weekly_rent=weekly_rent,
        capital_growth_rate=growth / 100,
        hold_period_years=hold_period,
        vacancy_rate=vacancy / 100,
        management_fee_rate=management / 100,
        annual_maintenance=DEFAULTS["annual_maintenance"],
        annual_insurance=DEFAULTS["annual_insurance"],
        council_rates=council,
        exchange_rate=exchange_rate,
        home_country_return_rate=home_return / 100,
    )

    try:
        cases = analyze_cases(inputs, assessment.fees)
    except FIRBCalculatorError as exc:
        st.error(f"❌ {exc}")
        return
    analysis = cases["expected"]

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Gross Yield", f"{analysis.gross_rental_yield:.2f}%")
    with col2:
        st.metric("Net Yield", f"{analysis.net_rental_yield:.2f}%")
    with col3:
        st.metric("Total Return", format_currency(analysis.total_return))
    with col4:
        st.metric("Annualised Return", f"{analysis.annualized_return:.2f}%")

    st.plotly_chart(create_investment_projection_chart(analysis), use_container_width=True)

    if analysis.break_even_year is not None:
        st.success(f"Foreign buyer costs are recovered in year {analysis.break_even_year}")
    else:
        st.warning(f"Foreign buyer costs are not recovered within {inputs.hold_period_years} years")

    st.subheader("Best / Expected / Worst Case")
    st.dataframe(
        pd.DataFrame([
            {
                "Case": name.title(),
                "Final Value": format_currency(case.final_property_value),
                "Total Return": format_currency(case.total_return),
                "ROI": f"{case.roi:.1f}%",
            }
            for name, case in cases.items()
        ]),
        hide_index=True,
        use_container_width=True,
    )

    home = analysis.home_country
    st.subheader("Versus Investing at Home")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Property Return (home currency)", f"{home.property_return:,.0f}")
    with col2:
        st.metric("Home Investment Gain", f"{home.alternative_gain:,.0f}")
    with col3:
        st.metric("Difference", f"{home.difference:,.0f}",
                  help="Positive means the Australian property does better")


# =============================================================================
# MAIN APP
# =============================================================================

def main():
    """Main application entry point."""

    scenario = render_sidebar()

    st.title("🏠 Australian FIRB Foreign Buyer Calculator")
    st.caption(
        "Estimate FIRB application fees, stamp duty surcharges and ongoing land tax "
        "for foreign property buyers in every Australian state and territory."
    )

    try:
        assessment = assess(scenario)
    except FIRBCalculatorError as exc:
        logger.error("Calculation failed on %s: %s", exc.field, exc)
        st.error(f"❌ Calculation error: {exc}")
        return

    tabs = st.tabs([
        "🧭 Eligibility",
        "💰 Fees",
        "🗺️ Compare",
        "📁 Scenarios",
        "💡 Optimiser",
        "✅ Checklist & Timeline",
        "📈 Investment",
    ])

    with tabs[0]:
        render_eligibility_tab(scenario, assessment)

    with tabs[1]:
        render_fees_tab(assessment)

    with tabs[2]:
        render_comparison_tab(scenario)

    with tabs[3]:
        render_scenarios_tab(scenario)

    with tabs[4]:
        render_optimizer_tab(scenario)

    with tabs[5]:
        render_checklist_tab(assessment)

    with tabs[6]:
        render_investment_tab(assessment)

    # Footer
    st.markdown("---")
    st.caption(
        "**Disclaimer:** This calculator provides estimates only and should not be considered legal, "
        "tax or financial advice. Confirm fees with FIRB and your state revenue office before purchasing."
    )
    st.caption(f"Rates: {DATA_VERSION['financial_year']} | Last updated: {DATA_VERSION['last_updated']}")


if __name__ == "__main__":
    main()
