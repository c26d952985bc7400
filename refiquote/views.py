"""Read-only views over a priced scenario for quote screens.

Nothing here changes a number; the views only choose which figures a given
audience sees and in what order.
"""
from __future__ import annotations

import pandas as pd

from refiquote.models import ArmType, LoanProgram, ScenarioInput, ScenarioResult

# Internal pricing details a borrower-facing quote leaves out.
BORROWER_HIDDEN_FIELDS = {
    "base_loan_with_gov_fee",
    "total_points_pct",
    "points_too_high",
    "compensation",
}


def borrower_view(result: ScenarioResult) -> dict:
    """Result as a dict without compensation and internal pricing figures."""

    return result.model_dump(exclude=BORROWER_HIDDEN_FIELDS)


def cost_breakdown(result: ScenarioResult, for_borrower: bool = False) -> pd.DataFrame:
    """Ordered loan & cost breakdown as ``Item`` / ``Amount`` rows.

    The government fee row appears only for government programs with a
    non-zero fee, the buydown row only when a subsidy was financed and the
    LTV row only when an appraised value was entered.
    """

    rows = []
    if not for_borrower:
        rows.append(("Base Loan (Before Points)", result.base_loan_with_gov_fee))
    if result.loan_program != LoanProgram.CONVENTIONAL and result.government_fee > 0:
        rows.append((result.government_fee_label, result.government_fee))
    if not for_borrower:
        rows.append(("Total Points (%)", result.total_points_pct))
    rows.append(("Lender Cost", result.points_cost))
    rows.append(("Escrow Prepaid", result.escrow_cost))
    rows.append(("Underwriting", result.bank_fee))
    rows.append(("Title Fee", result.title_fee))
    if result.buydown is not None:
        rows.append(("Temp Buydown Subsidy (financed)", result.buydown_subsidy_cost))
    rows.append(("Total Costs", result.total_costs))
    rows.append(("Final Loan Amount", result.final_loan_amount))
    if result.loan_to_value_pct > 0:
        rows.append(("LTV (%)", result.loan_to_value_pct))
    return pd.DataFrame(rows, columns=["Item", "Amount"])


def _rate_label(rate_pct: float) -> str:
    return f"{rate_pct:.3f}".rstrip("0").rstrip(".")


def loan_type_label(inputs: ScenarioInput) -> str:
    """Headline such as ``"FHA 5/1 ARM — 30 year — 6.25%"``."""

    term = f"{inputs.term_years:g} year"
    rate = f" — {_rate_label(inputs.interest_rate_pct)}%" if inputs.interest_rate_pct else ""
    program = inputs.loan_program
    if program != LoanProgram.CONVENTIONAL and inputs.arm_type != ArmType.NONE:
        return f"{program.value} {inputs.arm_type.value} ARM — {term}{rate}"
    return f"{program.value} Fixed — {term}{rate}"
