from __future__ import annotations
from typing import Literal, List, Dict, Any
from pydantic import BaseModel, Field

from refiquote.models import ScenarioResult
from refiquote.presets import TOTAL_POINTS_ALERT


class RuleResult(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def evaluate_rules(result: ScenarioResult) -> List[RuleResult]:
    """Translate a priced scenario's advisory flags into displayable rules.

    The scenario is always priced; these records only tell the caller which
    warnings to surface next to the numbers.
    """

    res: List[RuleResult] = []
    ltv = round(result.loan_to_value_pct, 2)

    if result.points_too_high:
        res.append(
            RuleResult(
                code="POINTS_OVER_ALERT",
                severity="warn",
                message=f"Total points exceed {TOTAL_POINTS_ALERT}%. Reduce Cost From Lender or Branch Gen.",
                context={"total_points_pct": result.total_points_pct, "limit": TOTAL_POINTS_ALERT},
            )
        )

    if result.fha_ltv_impossible:
        res.append(
            RuleResult(
                code="FHA_LTV_OVER_80",
                severity="critical",
                message="FHA LTV exceeds 80%; this scenario isn't possible under FHA guidelines.",
                context={"ltv": ltv, "limit": 80.0},
            )
        )

    if result.conv_rate_term_over_96:
        res.append(
            RuleResult(
                code="CONV_RT_OVER_96",
                severity="critical",
                message="Conventional rate/term refinance isn't allowed above 96% LTV.",
                context={"ltv": ltv, "limit": 96.0},
            )
        )

    if result.conv_cash_out_over_80:
        res.append(
            RuleResult(
                code="CONV_CASHOUT_OVER_80",
                severity="critical",
                message="Conventional cash-out isn't allowed above 80% LTV.",
                context={"ltv": ltv, "limit": 80.0},
            )
        )

    if result.conv_mi_required:
        res.append(
            RuleResult(
                code="CONV_MI_REQUIRED",
                severity="warn",
                message="Conventional LTV over 80%; mortgage insurance will be added.",
                context={"ltv": ltv, "monthly_mi": result.monthly_mi},
            )
        )

    if result.buydown_ignored:
        res.append(
            RuleResult(
                code="BUYDOWN_DISABLED_CASH_OUT",
                severity="info",
                message="Temporary buydowns aren't available with cash-out; the buydown was not applied.",
            )
        )

    if result.ambiguous_cash_out:
        res.append(
            RuleResult(
                code="CASH_OUT_INTENT_UNCLEAR",
                severity="info",
                message="Cash-out entered without debts to pay off. Mark it as pure cash-out or enter the debts.",
                context={"cash_out": result.effective_cash_out},
            )
        )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)
