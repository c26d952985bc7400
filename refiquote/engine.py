"""Refinance scenario pricing.

``compute_scenario`` is the single entry point shared by every quote screen.
It first derives an :class:`~refiquote.models.EffectiveInput` with program
rules applied, then runs the pricing stages in order: closing costs and
government fee, points, pre-buydown payment, buydown subsidy, final payment,
debt consolidation, compensation and the ARM illustration.
"""
from __future__ import annotations

import logging
from typing import Mapping, Union

from refiquote.calculators import (
    arm_adjustment,
    buydown_subsidy,
    compensation,
    consolidation_split,
    escrow_cost,
    government_fee_label,
    loan_amounts,
    monthly_payment,
    piti_components,
    pricing_tier,
    savings_vs_previous,
)
from refiquote.models import (
    ArmBreakdown,
    ArmType,
    BuydownResult,
    CompensationResult,
    ConsolidationResult,
    EffectiveInput,
    LoanProgram,
    PricingTier,
    ScenarioInput,
    ScenarioResult,
    TemporaryBuydown,
)
from refiquote.presets import (
    COMP_BPS,
    CONV_MI_LTV_THRESHOLD,
    CONV_RATE_TERM_MAX_LTV,
    FHA_MAX_LTV,
    GOV_FEE_TABLE,
)

logger = logging.getLogger(__name__)

_VA_PROGRAMS = (LoanProgram.VA, LoanProgram.VA_IRRRL)


def normalize_inputs(inputs: Union[ScenarioInput, Mapping]) -> EffectiveInput:
    """Apply program rules to raw inputs.

    * VA IRRRL never carries cash-out.
    * Temporary buydowns exist only for Conventional rate/term refinances.
    * ARMs are offered only on FHA and VA programs.
    * The funding fee exemption only applies to VA programs.
    """

    raw = _as_input(inputs)
    program = raw.loan_program

    cash_out = raw.cash_out_amount
    if program == LoanProgram.VA_IRRRL and cash_out:
        logger.info("Ignoring cash-out of %.2f on a VA IRRRL", cash_out)
        cash_out = 0.0

    buydown = raw.temporary_buydown
    buydown_ignored = False
    if buydown != TemporaryBuydown.NONE:
        if program != LoanProgram.CONVENTIONAL:
            logger.info("Dropping %s buydown: not available on %s", buydown.value, program.value)
            buydown = TemporaryBuydown.NONE
        elif cash_out > 0:
            logger.info("Dropping %s buydown: not available with cash-out", buydown.value)
            buydown = TemporaryBuydown.NONE
            buydown_ignored = True

    arm = raw.arm_type
    if program == LoanProgram.CONVENTIONAL and arm != ArmType.NONE:
        logger.info("Dropping %s ARM: not available on Conventional", arm.value)
        arm = ArmType.NONE

    return EffectiveInput(
        loan_program=program,
        appraised_value=raw.appraised_value,
        current_balance=raw.current_balance,
        effective_cash_out=cash_out,
        monthly_escrow=raw.monthly_escrow,
        escrow_months=raw.escrow_months,
        bank_fee=raw.bank_fee,
        title_fee=raw.title_fee,
        funding_fee_exempt=raw.is_funding_fee_exempt and program in _VA_PROGRAMS,
        mortgage_insurance_annual_rate_pct=raw.mortgage_insurance_annual_rate_pct,
        lender_points_pct=raw.lender_points_pct,
        branch_gen_points_pct=raw.branch_gen_points_pct,
        interest_rate_pct=raw.interest_rate_pct,
        term_years=raw.term_years,
        temporary_buydown=buydown,
        arm_type=arm,
        debt_paid_off=raw.debt_paid_off,
        debt_monthly_payments=raw.debt_monthly_payments,
        previous_monthly_piti=raw.previous_monthly_piti,
        pure_cash_out_no_consolidation=raw.pure_cash_out_no_consolidation,
        buydown_ignored=buydown_ignored,
    )


def compute_scenario(
    inputs: Union[ScenarioInput, Mapping],
    fee_table: Mapping = GOV_FEE_TABLE,
    comp_table: Mapping = COMP_BPS,
) -> ScenarioResult:
    """Price a refinance scenario.

    ``inputs`` may be a :class:`ScenarioInput` or a mapping of its fields.
    ``fee_table`` and ``comp_table`` override the government fee and
    compensation presets; missing keys fall back to the standard values.
    The result is a fresh object on every call and the function has no side
    effects, so repeated calls with the same inputs return equal results.
    """

    eff = normalize_inputs(inputs)
    program = eff.loan_program

    escrow = escrow_cost(eff.monthly_escrow, eff.escrow_months)
    amounts = loan_amounts(
        program,
        eff.current_balance,
        eff.effective_cash_out,
        eff.bank_fee,
        eff.title_fee,
        escrow,
        eff.lender_points_pct,
        eff.branch_gen_points_pct,
        eff.funding_fee_exempt,
        fee_table,
    )
    pre_loan = amounts["final_loan_pre_buydown"]
    logger.debug(
        "%s base loan %.2f, government fee %.2f, points %.3f%% (%.2f), pre-buydown loan %.2f",
        program.value,
        amounts["base_loan_before_gov_fee"],
        amounts["government_fee"],
        amounts["total_points_pct"],
        amounts["points_cost"],
        pre_loan,
    )

    pre_piti = piti_components(
        program,
        pre_loan,
        eff.interest_rate_pct,
        eff.term_years,
        eff.monthly_escrow,
        eff.appraised_value,
        eff.mortgage_insurance_annual_rate_pct,
        fee_table,
    )

    subsidy = None
    subsidy_cost = 0.0
    if eff.temporary_buydown != TemporaryBuydown.NONE:
        subsidy = buydown_subsidy(
            pre_loan, eff.interest_rate_pct, eff.term_years, eff.temporary_buydown, pre_piti
        )
        subsidy_cost = subsidy["subsidy_cost"]
        logger.debug("%s buydown subsidy %.2f", eff.temporary_buydown.value, subsidy_cost)

    final_loan = pre_loan + subsidy_cost
    piti = piti_components(
        program,
        final_loan,
        eff.interest_rate_pct,
        eff.term_years,
        eff.monthly_escrow,
        eff.appraised_value,
        eff.mortgage_insurance_annual_rate_pct,
        fee_table,
    )
    ltv = piti["ltv"]
    logger.debug("Final loan %.2f, LTV %.2f%%, PITI %.2f", final_loan, ltv, piti["total"])

    buydown = None
    if subsidy is not None:
        buydown = _buydown_result(eff, subsidy, final_loan, piti)

    split = consolidation_split(
        eff.effective_cash_out,
        eff.debt_paid_off,
        eff.debt_monthly_payments,
        eff.previous_monthly_piti,
        piti["total"],
        eff.pure_cash_out_no_consolidation,
    )

    tier = PricingTier(pricing_tier(eff.branch_gen_points_pct))
    comp = compensation(final_loan, tier, comp_table)

    arm = None
    arm_calc = arm_adjustment(
        program,
        eff.arm_type,
        final_loan,
        eff.interest_rate_pct,
        eff.term_years,
        eff.monthly_escrow,
        fee_table,
    )
    if arm_calc is not None:
        arm = ArmBreakdown(arm_type=eff.arm_type, start_piti=piti["total"], **arm_calc)

    is_conv = program == LoanProgram.CONVENTIONAL
    cash_out_over_80 = is_conv and eff.effective_cash_out > 0 and ltv > CONV_MI_LTV_THRESHOLD

    return ScenarioResult(
        loan_program=program,
        effective_cash_out=eff.effective_cash_out,
        bank_fee=eff.bank_fee,
        title_fee=eff.title_fee,
        escrow_cost=escrow,
        base_loan_before_gov_fee=amounts["base_loan_before_gov_fee"],
        government_fee=amounts["government_fee"],
        government_fee_label=government_fee_label(program),
        base_loan_with_gov_fee=amounts["base_loan_with_gov_fee"],
        total_points_pct=amounts["total_points_pct"],
        points_cost=amounts["points_cost"],
        total_costs_pre_buydown=amounts["total_costs"],
        total_costs=amounts["total_costs"] + subsidy_cost,
        final_loan_pre_buydown=pre_loan,
        buydown_subsidy_cost=subsidy_cost,
        final_loan_amount=final_loan,
        loan_to_value_pct=ltv,
        monthly_principal_and_interest=piti["pi"],
        monthly_escrow=piti["escrow"],
        monthly_mip=piti["mip"],
        monthly_mi=piti["mi"],
        total_monthly_piti=piti["total"],
        previous_monthly_piti=eff.previous_monthly_piti,
        savings_vs_previous=savings_vs_previous(eff.previous_monthly_piti, piti["total"]),
        buydown=buydown,
        consolidation=ConsolidationResult(
            **{k: v for k, v in split.items() if k != "ambiguous_cash_out"}
        ),
        compensation=CompensationResult(inferred_pricing_tier=tier, **comp),
        arm=arm,
        points_too_high=amounts["points_too_high"],
        fha_ltv_impossible=program == LoanProgram.FHA and ltv > FHA_MAX_LTV,
        conv_rate_term_over_96=is_conv and eff.effective_cash_out == 0 and ltv > CONV_RATE_TERM_MAX_LTV,
        conv_cash_out_over_80=cash_out_over_80,
        conv_mi_required=is_conv and ltv > CONV_MI_LTV_THRESHOLD and not cash_out_over_80,
        ambiguous_cash_out=split["ambiguous_cash_out"],
        buydown_ignored=eff.buydown_ignored,
    )


def _as_input(inputs) -> ScenarioInput:
    if isinstance(inputs, ScenarioInput):
        return inputs
    return ScenarioInput.model_validate(dict(inputs or {}))


def _buydown_result(eff: EffectiveInput, subsidy: dict, final_loan: float, piti: dict) -> BuydownResult:
    """Reduced-rate payments on the final (subsidy-inclusive) loan."""

    other = piti["total"] - piti["pi"]
    years = []
    for rate in subsidy["rates"]:
        year_piti = monthly_payment(final_loan, rate, eff.term_years) + other
        years.append((rate, year_piti, savings_vs_previous(eff.previous_monthly_piti, year_piti)))

    extra = {}
    if len(years) > 1:
        extra = {
            "year2_rate_pct": years[1][0],
            "year2_piti": years[1][1],
            "year2_savings_vs_previous": years[1][2],
        }
    return BuydownResult(
        buydown_type=eff.temporary_buydown,
        subsidy_cost=subsidy["subsidy_cost"],
        diff_year1=subsidy["diff_year1"],
        diff_year2=subsidy["diff_year2"],
        year1_rate_pct=years[0][0],
        year1_piti=years[0][1],
        year1_savings_vs_previous=years[0][2],
        **extra,
    )
