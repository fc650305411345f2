"""
Australian FIRB Foreign Buyer Calculator - Charts

Plotly chart generators for fee breakdowns, state comparisons, saved
scenarios and investment projections.
"""

import plotly.graph_objects as go

from calculations import FeeBreakdown, format_currency
from constants import PROPERTY_TYPE_LABELS
from investment import InvestmentAnalysis
from scenarios import PropertyTypeComparison, SavedScenario, StateComparison


# =============================================================================
# COLOR SCHEME
# =============================================================================

COLORS = {
    "primary": "#1f77b4",      # Blue
    "secondary": "#ff7f0e",    # Orange
    "success": "#2ca02c",      # Green
    "danger": "#d62728",       # Red
    "warning": "#ffbb33",      # Yellow
    "info": "#17becf",         # Cyan
    "firb": "#9467bd",         # Purple (for FIRB fee)
    "duty": "#1f77b4",         # Blue (for stamp duty)
    "surcharge": "#d62728",    # Red (for foreign surcharge)
    "land_tax": "#ff7f0e",     # Orange (for land tax surcharge)
    "vacancy": "#ffbb33",      # Yellow (for vacancy fee)
    "blocked": "rgba(214, 39, 40, 0.3)",
}


# =============================================================================
# FEE BREAKDOWN CHART
# =============================================================================

def create_fee_breakdown_chart(fees: FeeBreakdown) -> go.Figure:
    """
    Donut chart of first-year costs.

    Zero components are left out so the legend only lists what you pay.
    """
    components = [
        ("FIRB Application Fee", fees.firb_application_fee, COLORS["firb"]),
        ("Stamp Duty", fees.stamp_duty, COLORS["duty"]),
        ("Foreign Surcharge", fees.surcharge_stamp_duty, COLORS["surcharge"]),
        ("Land Tax Surcharge (annual)", fees.land_tax_surcharge, COLORS["land_tax"]),
        ("Vacancy Fee (annual)", fees.vacancy_fee, COLORS["vacancy"]),
    ]
    components = [c for c in components if c[1] > 0]

    fig = go.Figure(go.Pie(
        labels=[c[0] for c in components],
        values=[c[1] for c in components],
        marker=dict(colors=[c[2] for c in components]),
        hole=0.45,
        hovertemplate="%{label}<br>$%{value:,.0f}<br>%{percent}<extra></extra>",
    ))

    fig.update_layout(
        title="First-Year Cost Breakdown",
        annotations=[dict(
            text=format_currency(fees.first_year_total),
            x=0.5, y=0.5, font_size=18, showarrow=False,
        )],
        height=400,
    )

    return fig


# =============================================================================
# STATE COMPARISON CHART
# =============================================================================

def create_state_comparison_chart(rows: list[StateComparison], current_state=None) -> go.Figure:
    """Stacked bars of upfront and annual costs for every state."""
    states = [row.state.value for row in rows]

    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=states,
        y=[row.assessment.fees.stamp_duty for row in rows],
        name="Stamp Duty",
        marker_color=COLORS["duty"],
        hovertemplate="%{x}<br>Stamp Duty: $%{y:,.0f}<extra></extra>",
    ))

    fig.add_trace(go.Bar(
        x=states,
        y=[row.assessment.fees.surcharge_stamp_duty for row in rows],
        name="Foreign Surcharge",
        marker_color=COLORS["surcharge"],
        hovertemplate="%{x}<br>Surcharge: $%{y:,.0f}<extra></extra>",
    ))

    fig.add_trace(go.Bar(
        x=states,
        y=[row.assessment.fees.firb_application_fee for row in rows],
        name="FIRB Fee",
        marker_color=COLORS["firb"],
        hovertemplate="%{x}<br>FIRB Fee: $%{y:,.0f}<extra></extra>",
    ))

    fig.add_trace(go.Bar(
        x=states,
        y=[row.assessment.fees.annual_total for row in rows],
        name="Annual Costs",
        marker_color=COLORS["land_tax"],
        hovertemplate="%{x}<br>Annual: $%{y:,.0f}<extra></extra>",
    ))

    if current_state is not None:
        fig.add_vline(
            x=states.index(current_state.value) if current_state.value in states else 0,
            line=dict(color=COLORS["secondary"], width=2, dash="dot"),
            annotation_text="Current",
            annotation_position="top",
        )

    fig.update_layout(
        title="First-Year Cost by State",
        barmode="stack",
        xaxis_title="State",
        yaxis_title="Amount ($)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        height=420,
    )

    fig.update_yaxes(tickformat="$,.0f")

    return fig


def create_state_table_data(rows: list[StateComparison]) -> list[dict]:
    """
    Generate data for the state comparison table.

    Returns list of dicts with one row per state.
    """
    table_data = []
    for row in rows:
        fees = row.assessment.fees
        table_data.append({
            "State": row.state.value,
            "Name": row.state_name,
            "Stamp Duty": format_currency(fees.stamp_duty),
            "Foreign Surcharge": format_currency(fees.surcharge_stamp_duty),
            "Land Tax Surcharge": format_currency(fees.land_tax_surcharge),
            "First Year Total": format_currency(fees.first_year_total),
            "Savings": format_currency(row.savings),
        })
    return table_data


# =============================================================================
# PROPERTY TYPE COMPARISON CHART
# =============================================================================

def create_property_type_chart(rows: list[PropertyTypeComparison]) -> go.Figure:
    """First-year cost per property type; blocked types are drawn faded."""
    fig = go.Figure(go.Bar(
        x=[PROPERTY_TYPE_LABELS[row.property_type] for row in rows],
        y=[row.assessment.fees.first_year_total for row in rows],
        marker_color=[COLORS["primary"] if row.allowed else COLORS["blocked"] for row in rows],
        text=[format_currency(row.assessment.fees.first_year_total) if row.allowed else "Not allowed"
              for row in rows],
        textposition="outside",
        hovertemplate="%{x}<br>$%{y:,.0f}<extra></extra>",
    ))

    fig.update_layout(
        title="First-Year Cost by Property Type",
        yaxis_title="Amount ($)",
        height=380,
    )

    fig.update_yaxes(tickformat="$,.0f")

    return fig


# =============================================================================
# SAVED SCENARIO COMPARISON CHART
# =============================================================================

def create_scenario_comparison_chart(saved: list[SavedScenario]) -> go.Figure:
    """Grouped bars of upfront vs annual costs per saved scenario."""
    names = [s.name for s in saved]

    fig = go.Figure()

    fig.add_trace(go.Bar(
        x=names,
        y=[s.assessment.fees.grand_total for s in saved],
        name="Upfront",
        marker_color=COLORS["primary"],
        hovertemplate="%{x}<br>Upfront: $%{y:,.0f}<extra></extra>",
    ))

    fig.add_trace(go.Bar(
        x=names,
        y=[s.assessment.fees.annual_total for s in saved],
        name="Annual",
        marker_color=COLORS["secondary"],
        hovertemplate="%{x}<br>Annual: $%{y:,.0f}<extra></extra>",
    ))

    fig.update_layout(
        title="Saved Scenarios",
        barmode="group",
        yaxis_title="Amount ($)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        height=380,
    )

    fig.update_yaxes(tickformat="$,.0f")

    return fig


# =============================================================================
# INVESTMENT PROJECTION CHART
# =============================================================================

def create_investment_projection_chart(analysis: InvestmentAnalysis) -> go.Figure:
    """Property value and cumulative cash flow over the hold period."""
    years = [p.year for p in analysis.projections]

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=years,
        y=[p.property_value for p in analysis.projections],
        name="Property Value",
        line=dict(color=COLORS["primary"], width=3),
        hovertemplate="Year %{x}<br>Value: $%{y:,.0f}<extra></extra>",
    ))

    fig.add_trace(go.Scatter(
        x=years,
        y=[p.cumulative_cash_flow for p in analysis.projections],
        name="Cumulative Cash Flow",
        line=dict(color=COLORS["success"], width=2),
        yaxis="y2",
        hovertemplate="Year %{x}<br>Cash Flow: $%{y:,.0f}<extra></extra>",
    ))

    fig.add_hline(
        y=analysis.total_investment,
        line=dict(color=COLORS["danger"], width=2, dash="dash"),
        annotation_text=f"Total Investment: {format_currency(analysis.total_investment)}",
        annotation_position="right",
    )

    fig.update_layout(
        title="Investment Projection",
        xaxis_title="Year",
        yaxis=dict(title="Property Value ($)", tickformat="$,.0f"),
        yaxis2=dict(title="Cumulative Cash Flow ($)", tickformat="$,.0f", overlaying="y", side="right"),
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        height=400,
    )

    return fig
