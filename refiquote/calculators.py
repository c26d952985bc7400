from __future__ import annotations

import math
import re

import pandas as pd

from refiquote.presets import (
    ARM_FIRST_ADJUST_PCT,
    ARM_YEARS,
    BG_TIER_BANDS,
    BUYDOWN_STEPS,
    COMP_BPS,
    CONV_MI_LTV_THRESHOLD,
    GOV_FEE_TABLE,
    TOTAL_POINTS_ALERT,
)

_NUMBER_JUNK = re.compile(r"[^0-9.\-eE+]")


def nz(x, default=0.0):
    """Return a float for ``x`` or a fallback value.

    Quote fields arrive from text inputs where an empty box is ``""`` and a
    cleared field may be ``None`` or ``NaN``.  This helper mirrors the
    spreadsheet ``NZ()`` function so a blank never reaches the pricing math.
    Formatted strings such as ``"$1,250.00"`` are read as numbers.
    """

    if x is None:
        return default
    if isinstance(x, str):
        x = _NUMBER_JUNK.sub("", x)
        if x in ("", "-", ".", "-."):
            return default
    try:
        val = float(x)
    except (TypeError, ValueError):
        return default
    if math.isnan(val) or math.isinf(val):
        return default
    return val


def monthly_payment(principal, annual_rate_pct, term_years):
    """Calculate the fully amortizing monthly principal & interest payment.

    ``annual_rate_pct`` is the nominal yearly rate (``6.5`` for 6.5%).  A
    negative rate is treated as zero and the number of payments never drops
    below one, so a zero rate or zero term falls back to straight-line
    repayment instead of dividing by zero.
    """

    L = nz(principal)
    r = max(0.0, nz(annual_rate_pct)) / 100 / 12
    n = max(1.0, nz(term_years) * 12)
    if r == 0:
        return L / n
    return (L * r) / (1 - (1 + r) ** (-n))


def remaining_balance(principal, annual_rate_pct, term_years, months_paid):
    """Unpaid principal after ``months_paid`` scheduled payments."""

    L = nz(principal)
    r = max(0.0, nz(annual_rate_pct)) / 100 / 12
    n = max(1.0, nz(term_years) * 12)
    pmt = monthly_payment(L, annual_rate_pct, term_years)
    k = min(nz(months_paid), n)
    if r == 0:
        return L - pmt * k
    growth = (1 + r) ** k
    return L * growth - pmt * ((growth - 1) / r)


def amortization_schedule(principal, annual_rate_pct, term_years) -> pd.DataFrame:
    """Month-by-month amortization table for a fixed-rate loan.

    Columns are ``Month``, ``Payment``, ``Interest``, ``Principal`` and
    ``Balance``.  The final row absorbs rounding so the balance ends at zero.
    """

    L = nz(principal)
    r = max(0.0, nz(annual_rate_pct)) / 100 / 12
    n = int(max(1, round(nz(term_years) * 12)))
    pmt = monthly_payment(L, annual_rate_pct, n / 12)
    rows = []
    bal = L
    for month in range(1, n + 1):
        interest = bal * r
        princ = pmt - interest
        if month == n:
            princ = bal
        bal = bal - princ
        rows.append(
            {
                "Month": month,
                "Payment": interest + princ,
                "Interest": interest,
                "Principal": princ,
                "Balance": bal,
            }
        )
    return pd.DataFrame(rows, columns=["Month", "Payment", "Interest", "Principal", "Balance"])


def escrow_cost(monthly_escrow, escrow_months):
    """Prepaid escrow collected at closing."""

    return nz(monthly_escrow) * nz(escrow_months)


def government_fee_pct(program, funding_fee_exempt=False, table=GOV_FEE_TABLE):
    """Upfront government fee percentage for the loan program.

    VA and VA IRRRL funding fees are waived for exempt veterans.  FHA UFMIP is
    always charged; the exemption does not apply to it.
    """

    if program == "FHA":
        return table.get("fha_ufmip_pct", 1.75)
    if program == "VA":
        return 0.0 if funding_fee_exempt else table.get("va_funding_fee_pct", 3.3)
    if program == "VA IRRRL":
        return 0.0 if funding_fee_exempt else table.get("va_irrrl_funding_fee_pct", 0.5)
    return 0.0


def government_fee_label(program):
    return "UFMIP" if program == "FHA" else "Funding Fee"


def loan_amounts(
    program,
    current_balance,
    effective_cash_out,
    bank_fee,
    title_fee,
    escrow_prepaid,
    lender_points_pct,
    branch_gen_points_pct,
    funding_fee_exempt=False,
    table=GOV_FEE_TABLE,
):
    """Roll closing costs, government fee and points into the new loan.

    Points are priced against the fee-inclusive base loan.  The returned
    ``final_loan_pre_buydown`` does not yet include any temporary buydown
    subsidy.
    """

    base_before = (
        nz(current_balance)
        + nz(bank_fee)
        + nz(title_fee)
        + nz(escrow_prepaid)
        + nz(effective_cash_out)
    )
    gov_fee = base_before * government_fee_pct(program, funding_fee_exempt, table) / 100
    base_with = base_before + gov_fee
    total_points = nz(lender_points_pct) + nz(branch_gen_points_pct)
    points_cost = base_with * total_points / 100
    total_costs = nz(bank_fee) + nz(title_fee) + nz(escrow_prepaid) + points_cost + gov_fee
    return {
        "base_loan_before_gov_fee": base_before,
        "government_fee": gov_fee,
        "base_loan_with_gov_fee": base_with,
        "total_points_pct": total_points,
        "points_too_high": total_points > TOTAL_POINTS_ALERT,
        "points_cost": points_cost,
        "total_costs": total_costs,
        "final_loan_pre_buydown": nz(current_balance) + nz(effective_cash_out) + total_costs,
    }


def compute_ltv(appraised_value, loan_amount):
    """Compute loan-to-value percentage; ``0`` when there is no appraisal."""

    if nz(appraised_value) <= 0:
        return 0.0
    return 100.0 * nz(loan_amount) / nz(appraised_value)


def monthly_mortgage_insurance(program, loan_amount, ltv, mi_annual_pct, table=GOV_FEE_TABLE):
    """Return ``(mip, mi)`` monthly premiums.

    FHA always carries annual MIP.  Conventional loans carry private MI only
    above 80% LTV.  VA programs have no recurring insurance.
    """

    L = nz(loan_amount)
    mip = 0.0
    mi = 0.0
    if program == "FHA":
        mip = L * table.get("fha_annual_mip_pct", 0.55) / 100 / 12
    elif program == "Conventional" and nz(ltv) > CONV_MI_LTV_THRESHOLD:
        mi = L * nz(mi_annual_pct) / 100 / 12
    return mip, mi


def piti_components(
    program,
    loan_amount,
    rate_pct,
    term_years,
    monthly_escrow,
    appraised_value,
    mi_annual_pct,
    table=GOV_FEE_TABLE,
):
    """Break the new monthly payment into P&I, escrow and insurance."""

    ltv = compute_ltv(appraised_value, loan_amount)
    pi = monthly_payment(loan_amount, rate_pct, term_years)
    mip, mi = monthly_mortgage_insurance(program, loan_amount, ltv, mi_annual_pct, table)
    escrow = nz(monthly_escrow)
    return {
        "pi": pi,
        "escrow": escrow,
        "mip": mip,
        "mi": mi,
        "total": pi + escrow + mip + mi,
        "ltv": ltv,
    }


def buydown_rates(note_rate_pct, buydown):
    """Reduced rates for each subsidized year of a temporary buydown.

    ``"2/1"`` gives ``(note - 2, note - 1)`` and ``"1/0"`` gives
    ``(note - 1,)``.  Any other selection has no reduced years.
    """

    steps = BUYDOWN_STEPS.get(getattr(buydown, "value", buydown), ())
    return tuple(nz(note_rate_pct) - s for s in steps)


def buydown_subsidy(pre_buydown_loan, note_rate_pct, term_years, buydown, pre_buydown_piti):
    """Size the financed subsidy for a temporary buydown.

    The subsidy is twelve months of the payment difference for each reduced
    year, measured on the pre-buydown loan so the subsidy does not feed back
    into its own size.  ``pre_buydown_piti`` is the output of
    :func:`piti_components` for that loan; escrow and insurance are held
    constant across years.
    """

    rates = buydown_rates(note_rate_pct, buydown)
    base_pi = pre_buydown_piti["pi"]
    other = pre_buydown_piti["total"] - base_pi
    diffs = []
    for rate in rates:
        year_piti = monthly_payment(pre_buydown_loan, rate, term_years) + other
        diffs.append(max(0.0, pre_buydown_piti["total"] - year_piti))
    return {
        "rates": rates,
        "diff_year1": diffs[0] if diffs else 0.0,
        "diff_year2": diffs[1] if len(diffs) > 1 else 0.0,
        "subsidy_cost": sum(d * 12 for d in diffs),
    }


def consolidation_split(
    effective_cash_out,
    debt_paid_off,
    debt_monthly_payments,
    previous_piti,
    new_piti,
    pure_cash_out=False,
):
    """Split cash-out between debts paid at closing and cash to the borrower.

    A scenario consolidates debt only when there is cash-out, the loan officer
    has not marked it as pure cash-out and at least one debt figure is
    entered.  Savings compare the new PITI to the old PITI plus the debt
    payments that go away, floored at zero.
    """

    cash_out = nz(effective_cash_out)
    paid = nz(debt_paid_off)
    debt_monthly = nz(debt_monthly_payments)
    consolidating = cash_out > 0 and not pure_cash_out and (paid > 0 or debt_monthly > 0)
    applied = min(cash_out, paid) if consolidating else 0.0
    cash_to_borrower = max(0.0, cash_out - applied) if consolidating else cash_out
    outflow = nz(previous_piti) + debt_monthly if consolidating else 0.0
    savings = max(0.0, outflow - nz(new_piti)) if consolidating else 0.0
    return {
        "is_consolidating": consolidating,
        "debt_paid_off_applied": applied,
        "cash_to_borrower": cash_to_borrower,
        "debt_monthly_payments": debt_monthly if consolidating else 0.0,
        "total_previous_monthly_outflow": outflow,
        "total_monthly_savings": savings,
        "ambiguous_cash_out": cash_out > 0 and not pure_cash_out and paid == 0 and debt_monthly == 0,
    }


def savings_vs_previous(previous_piti, new_piti):
    return max(0.0, nz(previous_piti) - nz(new_piti))


def quick_price_out(piti, previous_piti, monthly_debt, no_cash_out=False):
    """Short-form savings estimate from already-priced figures.

    Used when the loan officer has a PITI from the pricing engine and only
    wants the payment change and the net monthly effect of paying off debts.
    Missing figures yield ``None`` rather than a misleading zero.
    """

    if no_cash_out or piti is None or previous_piti is None:
        return {"pi_increase": None, "est_monthly_savings": None}
    pi_increase = nz(piti) - nz(previous_piti)
    est = None if monthly_debt is None else nz(monthly_debt) - pi_increase
    return {"pi_increase": pi_increase, "est_monthly_savings": est}


def pricing_tier(branch_gen_points_pct, bands=BG_TIER_BANDS):
    """Infer the pricing tier from branch-generated points.

    Bands are checked in order; points of zero, negative, above the top band,
    or in the gap between 0.74 and 0.75 map to ``"None"``.
    """

    p = nz(branch_gen_points_pct)
    for tier, low, high, low_inc, high_inc in bands:
        above = p >= low if low_inc else p > low
        below = p <= high if high_inc else p < high
        if above and below:
            return tier
    return "None"


def compensation(final_loan_amount, tier, table=COMP_BPS):
    """Loan officer and associate compensation in basis points of the loan."""

    key = getattr(tier, "value", tier)
    lo_bps = table.get("loan_officer", {}).get(key, 0)
    loa_bps = table.get("associate", {}).get(key, 0)
    L = nz(final_loan_amount)
    return {
        "loan_officer_bps": lo_bps,
        "associate_bps": loa_bps,
        "loan_officer_compensation": L * lo_bps / 10000,
        "associate_compensation": L * loa_bps / 10000,
    }


def arm_adjustment(program, arm_type, final_loan_amount, rate_pct, term_years, monthly_escrow, table=GOV_FEE_TABLE):
    """Illustrate the payment after the first ARM adjustment.

    Assumes the rate rises by the first-adjustment cap once the fixed period
    ends and the remaining balance re-amortizes over the remaining term.
    Taxes and insurance are held unchanged.  Returns ``None`` for a fixed
    loan.
    """

    years = ARM_YEARS.get(getattr(arm_type, "value", arm_type), 0)
    if years <= 0:
        return None
    principal = remaining_balance(final_loan_amount, rate_pct, term_years, years * 12)
    adj_rate = nz(rate_pct) + ARM_FIRST_ADJUST_PCT
    adj_pi = monthly_payment(principal, adj_rate, max(1.0, nz(term_years) - years))
    adj_mip = principal * table.get("fha_annual_mip_pct", 0.55) / 100 / 12 if program == "FHA" else 0.0
    return {
        "fixed_years": years,
        "principal_at_adjust": principal,
        "adjusted_rate_pct": adj_rate,
        "adjusted_principal_and_interest": adj_pi,
        "adjusted_mip": adj_mip,
        "adjusted_piti": adj_pi + nz(monthly_escrow) + adj_mip,
    }
