"""
Amortization Engine

Pure functions deriving a mortgage position from purchase-time
assumptions and elapsed time:

- Monthly payment (standard annuity formula, linear at zero rate)
- Remaining balance after p payments, clamped to [0, principal]
- Principal and interest paid to date
- Default down payment and assumption resolution
- Cash-out refinance scenario and net equity

Rates are annual percentages (5.0 means 5%).
"""

from datetime import date
from typing import Optional

from .models import MortgageAssumptions, MortgageState, RefinanceScenario
from .tables import get_historical_rate


# =============================================================================
# Policy Constants
# =============================================================================

DEFAULT_AMORTIZATION_YEARS = 25
VALID_AMORTIZATION_YEARS = (15, 20, 25, 30)

# Purchases at or above this price need 20% down
HIGH_RATIO_THRESHOLD = 1_000_000
DEFAULT_DOWN_PAYMENT_PERCENT_HIGH = 20.0
DEFAULT_DOWN_PAYMENT_PERCENT_STANDARD = 10.0


# =============================================================================
# Core Formulas
# =============================================================================


def calculate_monthly_payment(
    principal: float,
    annual_rate_percent: float,
    amortization_years: int,
) -> float:
    """
    Monthly payment using the standard annuity formula.

        M = P * r(1+r)^n / ((1+r)^n - 1)

    Args:
        principal: Loan amount
        annual_rate_percent: Annual interest rate (e.g. 5.0)
        amortization_years: Amortization period in years

    Returns:
        Monthly payment (0 when there is no loan)
    """
    if principal <= 0:
        return 0.0

    total_months = amortization_years * 12
    if annual_rate_percent <= 0:
        return principal / total_months

    monthly_rate = annual_rate_percent / 1200
    compound = (1 + monthly_rate) ** total_months
    return principal * monthly_rate * compound / (compound - 1)


def calculate_remaining_balance(
    principal: float,
    annual_rate_percent: float,
    amortization_years: int,
    months_paid: int,
) -> float:
    """
    Outstanding balance after a number of monthly payments.

        B = P * ((1+r)^n - (1+r)^p) / ((1+r)^n - 1)

    Exactly the principal before the first payment and exactly zero once
    the schedule is complete.
    """
    if principal <= 0:
        return 0.0
    if months_paid <= 0:
        return principal

    total_months = amortization_years * 12
    if months_paid >= total_months:
        return 0.0

    if annual_rate_percent <= 0:
        balance = principal - (principal / total_months) * months_paid
    else:
        monthly_rate = annual_rate_percent / 1200
        compound_total = (1 + monthly_rate) ** total_months
        compound_paid = (1 + monthly_rate) ** months_paid
        balance = principal * (compound_total - compound_paid) / (compound_total - 1)

    return min(principal, max(0.0, balance))


def calculate_months_elapsed(
    purchase_year: int,
    purchase_month: int,
    reference_date: date = None,
) -> int:
    """
    Whole calendar months between a purchase and a reference date.

    Args:
        purchase_year: Year of purchase
        purchase_month: Month of purchase (1-12)
        reference_date: Date to measure to (default: today)

    Returns:
        Elapsed months, never negative
    """
    today = reference_date or date.today()
    return max(0, (today.year - purchase_year) * 12 + (today.month - purchase_month))


def compute_mortgage_state(
    price: float,
    down_payment: float,
    annual_rate_percent: float,
    amortization_years: int,
    months_elapsed: int,
) -> MortgageState:
    """
    Mortgage position after a number of elapsed months.

    Args:
        price: Purchase price
        down_payment: Down payment amount
        annual_rate_percent: Annual interest rate
        amortization_years: Amortization period in years
        months_elapsed: Months since purchase

    Returns:
        MortgageState
    """
    principal = max(0.0, price - down_payment)
    total_months = amortization_years * 12

    monthly_payment = calculate_monthly_payment(principal, annual_rate_percent, amortization_years)
    remaining = calculate_remaining_balance(
        principal, annual_rate_percent, amortization_years, months_elapsed
    )

    principal_paid = principal - remaining
    payments_made = min(max(months_elapsed, 0), total_months)
    interest_paid = max(0.0, monthly_payment * payments_made - principal_paid)

    percent_paid_off = (principal_paid / principal) * 100 if principal > 0 else 100.0

    total_payments_over_life = monthly_payment * total_months

    return MortgageState(
        original_loan_amount=principal,
        monthly_payment=monthly_payment,
        remaining_balance=remaining,
        principal_paid_to_date=principal_paid,
        interest_paid_to_date=interest_paid,
        percent_paid_off=percent_paid_off,
        months_elapsed=max(months_elapsed, 0),
        years_elapsed=max(months_elapsed, 0) // 12,
        amortization_years=amortization_years,
        total_payments_over_life=total_payments_over_life,
        total_interest_over_life=max(0.0, total_payments_over_life - principal),
    )


# =============================================================================
# Assumptions
# =============================================================================


def calculate_default_down_payment(price: float) -> tuple[float, float]:
    """
    Default down payment for a purchase price.

    Returns:
        (amount, percent): 20% at or above 1,000,000, otherwise 10%
    """
    if price >= HIGH_RATIO_THRESHOLD:
        percent = DEFAULT_DOWN_PAYMENT_PERCENT_HIGH
    else:
        percent = DEFAULT_DOWN_PAYMENT_PERCENT_STANDARD
    return price * percent / 100, percent


def resolve_assumptions(
    price: float,
    purchase_year: int,
    down_payment_amount: Optional[float] = None,
    down_payment_percent: Optional[float] = None,
    interest_rate: Optional[float] = None,
    amortization_years: Optional[int] = None,
) -> MortgageAssumptions:
    """
    Apply defaults to user-supplied mortgage assumptions.

    An explicit amount wins over a percent, which wins over the default.
    The rate defaults to the historical 5-year fixed rate for the
    purchase year.
    """
    if down_payment_amount is not None:
        amount = down_payment_amount
        percent = (down_payment_amount / price) * 100 if price > 0 else 0.0
    elif down_payment_percent is not None:
        percent = down_payment_percent
        amount = price * down_payment_percent / 100
    else:
        amount, percent = calculate_default_down_payment(price)

    rate_is_default = interest_rate is None
    rate = get_historical_rate(purchase_year) if rate_is_default else interest_rate

    return MortgageAssumptions(
        down_payment_amount=amount,
        down_payment_percent=percent,
        interest_rate=rate,
        amortization_years=amortization_years or DEFAULT_AMORTIZATION_YEARS,
        rate_is_default=rate_is_default,
    )


# =============================================================================
# Refinance and Net Equity
# =============================================================================


def calculate_refinance_scenario(
    current_remaining_balance: float,
    additional_loan_amount: float,
    new_rate: float,
    new_term_years: int,
) -> RefinanceScenario:
    """
    Cash-out refinance on top of the current balance.

    The equity impact is the cash taken out, undiscounted.
    """
    total_new_debt = current_remaining_balance + additional_loan_amount
    return RefinanceScenario(
        additional_loan_amount=additional_loan_amount,
        interest_rate=new_rate,
        term_years=new_term_years,
        new_monthly_payment=calculate_monthly_payment(total_new_debt, new_rate, new_term_years),
        total_new_debt=total_new_debt,
        impact_on_equity=-additional_loan_amount,
    )


def calculate_net_equity(estimated_value: float, remaining_balance: float) -> float:
    """Estimated value less the outstanding mortgage."""
    return estimated_value - remaining_balance
