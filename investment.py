"""
Australian FIRB Foreign Buyer Calculator - Investment Analysis

Rental yield and return projections that include the foreign buyer costs,
best/expected/worst cases, the break-even year and a comparison with
investing the same money at home.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from constants import DEFAULTS, INVESTMENT_CASES
from calculations import FeeBreakdown, validate_amount
from errors import InvalidValueError


@dataclass
class InvestmentInputs:
    purchase_price: float
    weekly_rent: float
    capital_growth_rate: float = 0.05
    hold_period_years: int = 10
    vacancy_rate: float = 0.04
    management_fee_rate: float = 0.07
    annual_maintenance: float = 2_000
    annual_insurance: float = 1_500
    council_rates: float = 2_500
    exchange_rate: float = DEFAULTS["exchange_rate"]  # Home currency per AUD
    home_country_return_rate: float = DEFAULTS["home_country_return_rate"]


@dataclass
class YearProjection:
    year: int
    property_value: float
    rental_income: float  # Net of vacancy and management
    expenses: float
    cash_flow: float
    cumulative_cash_flow: float


@dataclass
class HomeCountryComparison:
    """Property return vs. the same money invested at home, in home currency."""
    exchange_rate: float
    investment: float
    property_return: float
    alternative_gain: float

    @property
    def difference(self) -> float:
        return self.property_return - self.alternative_gain

    @property
    def property_wins(self) -> bool:
        return self.difference > 0


@dataclass
class InvestmentAnalysis:
    total_investment: float  # Purchase price + upfront foreign buyer costs
    annual_rent_gross: float
    annual_cash_flow: float
    gross_rental_yield: float  # % of price
    net_rental_yield: float  # % of total investment
    final_property_value: float
    capital_gain: float
    total_cash_flow: float
    total_return: float
    roi: float  # % over the hold period
    annualized_return: float  # % p.a.
    break_even_year: Optional[int]
    home_country: HomeCountryComparison
    projections: list[YearProjection] = field(default_factory=list)


def _year_figures(inputs: InvestmentInputs, fees: FeeBreakdown, year: int) -> tuple[float, float]:
    """(net rent, expenses) for a given year; rent grows with capital growth."""
    rent_gross = inputs.weekly_rent * 52 * (1 + inputs.capital_growth_rate) ** (year - 1)
    vacancy_loss = rent_gross * inputs.vacancy_rate
    management = (rent_gross - vacancy_loss) * inputs.management_fee_rate
    rent_net = rent_gross - vacancy_loss - management

    expenses = (
        inputs.annual_maintenance
        + inputs.annual_insurance
        + inputs.council_rates
        + fees.land_tax_surcharge
        + fees.vacancy_fee
    )
    return rent_net, expenses


def analyze_investment(inputs: InvestmentInputs, fees: FeeBreakdown) -> InvestmentAnalysis:
    """
    Project rental income, costs and capital growth over the hold period.

    Management fees are netted off rent; the land tax surcharge and any
    vacancy fee are charged every year as expenses. The break-even year is
    the first year in which capital gain plus cumulative cash flow covers
    the upfront foreign buyer costs (None if that never happens).
    """
    price = validate_amount(inputs.purchase_price, "purchase_price")
    if inputs.weekly_rent < 0:
        raise InvalidValueError("weekly_rent cannot be negative", field="weekly_rent")
    if inputs.hold_period_years < 1:
        raise InvalidValueError("hold_period_years must be at least 1", field="hold_period_years")
    if inputs.exchange_rate <= 0:
        raise InvalidValueError("exchange_rate must be positive", field="exchange_rate")

    total_investment = price + fees.grand_total
    annual_rent_gross = inputs.weekly_rent * 52

    first_rent, first_expenses = _year_figures(inputs, fees, 1)
    annual_cash_flow = first_rent - first_expenses

    projections = []
    property_value = price
    cumulative = 0.0
    break_even_year = None
    for year in range(1, inputs.hold_period_years + 1):
        property_value *= 1 + inputs.capital_growth_rate
        rent_net, expenses = _year_figures(inputs, fees, year)
        cash_flow = rent_net - expenses
        cumulative += cash_flow
        if break_even_year is None and (property_value - price) + cumulative >= fees.grand_total:
            break_even_year = year
        projections.append(YearProjection(
            year=year,
            property_value=property_value,
            rental_income=rent_net,
            expenses=expenses,
            cash_flow=cash_flow,
            cumulative_cash_flow=cumulative,
        ))

    capital_gain = property_value - price
    total_return = capital_gain + cumulative - fees.grand_total
    roi = total_return / total_investment * 100
    growth_multiple = (total_investment + total_return) / total_investment
    if growth_multiple > 0:
        annualized = (growth_multiple ** (1 / inputs.hold_period_years) - 1) * 100
    else:
        annualized = -100.0

    home_investment = total_investment * inputs.exchange_rate
    home_country = HomeCountryComparison(
        exchange_rate=inputs.exchange_rate,
        investment=home_investment,
        property_return=total_return * inputs.exchange_rate,
        alternative_gain=home_investment * ((1 + inputs.home_country_return_rate) ** inputs.hold_period_years - 1),
    )

    return InvestmentAnalysis(
        total_investment=total_investment,
        annual_rent_gross=annual_rent_gross,
        annual_cash_flow=annual_cash_flow,
        gross_rental_yield=annual_rent_gross / price * 100,
        net_rental_yield=annual_cash_flow / total_investment * 100,
        final_property_value=property_value,
        capital_gain=capital_gain,
        total_cash_flow=cumulative,
        total_return=total_return,
        roi=roi,
        annualized_return=annualized,
        break_even_year=break_even_year,
        home_country=home_country,
        projections=projections,
    )


def analyze_cases(inputs: InvestmentInputs, fees: FeeBreakdown) -> dict[str, InvestmentAnalysis]:
    """
    Best, expected and worst cases.

    Growth moves 3 points either way; vacancy drops 2 points in the best
    case and rises 4 in the worst. Growth is floored at 0 and vacancy kept
    within 0-100%.
    """
    cases = {}
    for name, (growth_delta, vacancy_delta) in INVESTMENT_CASES.items():
        adjusted = replace(
            inputs,
            capital_growth_rate=max(0.0, inputs.capital_growth_rate + growth_delta),
            vacancy_rate=min(1.0, max(0.0, inputs.vacancy_rate + vacancy_delta)),
        )
        cases[name] = analyze_investment(adjusted, fees)
    return cases
