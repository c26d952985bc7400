from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from refiquote.calculators import nz
from refiquote.presets import QUOTE_DEFAULTS


class LoanProgram(str, Enum):
    CONVENTIONAL = "Conventional"
    VA = "VA"
    FHA = "FHA"
    VA_IRRRL = "VA IRRRL"


class TemporaryBuydown(str, Enum):
    NONE = "None"
    TWO_ONE = "2/1"
    ONE_ZERO = "1/0"


class ArmType(str, Enum):
    NONE = "None"
    THREE_ONE = "3/1"
    FIVE_ONE = "5/1"


class PricingTier(str, Enum):
    TIER1 = "Tier1"
    TIER2 = "Tier2"
    TIER3 = "Tier3"
    TIER4 = "Tier4"
    NONE = "None"


_PROGRAM_ALIASES = {
    "conventional": LoanProgram.CONVENTIONAL,
    "conv": LoanProgram.CONVENTIONAL,
    "va": LoanProgram.VA,
    "fha": LoanProgram.FHA,
    "va irrrl": LoanProgram.VA_IRRRL,
    "va_irrrl": LoanProgram.VA_IRRRL,
    "vairrrl": LoanProgram.VA_IRRRL,
    "irrrl": LoanProgram.VA_IRRRL,
}

_BUYDOWN_ALIASES = {
    "": TemporaryBuydown.NONE,
    "none": TemporaryBuydown.NONE,
    "2/1": TemporaryBuydown.TWO_ONE,
    "2-1": TemporaryBuydown.TWO_ONE,
    "twoone": TemporaryBuydown.TWO_ONE,
    "two_one": TemporaryBuydown.TWO_ONE,
    "1/0": TemporaryBuydown.ONE_ZERO,
    "1-0": TemporaryBuydown.ONE_ZERO,
    "onezero": TemporaryBuydown.ONE_ZERO,
    "one_zero": TemporaryBuydown.ONE_ZERO,
}

_ARM_ALIASES = {
    "": ArmType.NONE,
    "none": ArmType.NONE,
    "3/1": ArmType.THREE_ONE,
    "5/1": ArmType.FIVE_ONE,
}

_NUMERIC_FIELDS = (
    "appraised_value",
    "current_balance",
    "cash_out_amount",
    "monthly_escrow",
    "escrow_months",
    "bank_fee",
    "title_fee",
    "mortgage_insurance_annual_rate_pct",
    "lender_points_pct",
    "branch_gen_points_pct",
    "interest_rate_pct",
    "term_years",
    "debt_paid_off",
    "debt_monthly_payments",
    "previous_monthly_piti",
)


_TRUE_STRINGS = {"true", "yes", "y", "1", "on", "x"}


def _lookup_alias(value, aliases):
    if value is None:
        return value
    if isinstance(value, Enum):
        return value
    key = str(value).strip().lower()
    return aliases.get(key, value)


class ScenarioInput(BaseModel):
    """Raw quote inputs as entered by the loan officer.

    Numeric fields accept blanks, ``None``, ``NaN`` and formatted strings such
    as ``"$1,250"``; anything that cannot be read as a number becomes ``0``.
    Rates and points are percentages (``6.625`` means 6.625%).
    """

    loan_program: LoanProgram = LoanProgram.CONVENTIONAL
    appraised_value: float = 0.0
    current_balance: float = 0.0
    cash_out_amount: float = 0.0
    monthly_escrow: float = 0.0
    escrow_months: float = 0.0
    bank_fee: float = 0.0
    title_fee: float = 0.0
    is_funding_fee_exempt: bool = False
    mortgage_insurance_annual_rate_pct: float = QUOTE_DEFAULTS["mortgage_insurance_annual_rate_pct"]
    lender_points_pct: float = 0.0
    branch_gen_points_pct: float = 0.0
    interest_rate_pct: float = 0.0
    term_years: float = QUOTE_DEFAULTS["term_years"]
    temporary_buydown: TemporaryBuydown = TemporaryBuydown.NONE
    arm_type: ArmType = ArmType.NONE
    debt_paid_off: float = 0.0
    debt_monthly_payments: float = 0.0
    previous_monthly_piti: float = 0.0
    pure_cash_out_no_consolidation: bool = False

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _blank_to_zero(cls, v):
        return nz(v)

    @field_validator("loan_program", mode="before")
    @classmethod
    def _program_alias(cls, v):
        return _lookup_alias(v, _PROGRAM_ALIASES)

    @field_validator("temporary_buydown", mode="before")
    @classmethod
    def _buydown_alias(cls, v):
        if v is None:
            return TemporaryBuydown.NONE
        return _lookup_alias(v, _BUYDOWN_ALIASES)

    @field_validator("arm_type", mode="before")
    @classmethod
    def _arm_alias(cls, v):
        if v is None:
            return ArmType.NONE
        return _lookup_alias(v, _ARM_ALIASES)

    @field_validator("is_funding_fee_exempt", "pure_cash_out_no_consolidation", mode="before")
    @classmethod
    def _to_bool(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_STRINGS
        if isinstance(v, (int, float)):
            return nz(v) != 0
        return False

    @classmethod
    def for_program(cls, program, **fields) -> "ScenarioInput":
        """Build an input pre-filled with the quote screen defaults.

        The underwriting (bank) fee defaults to $2,350, or $1,500 for a VA
        IRRRL, and escrow is prepaid for two months.  Explicit ``fields``
        always win, including explicit zeros.
        """

        prog = _lookup_alias(program, _PROGRAM_ALIASES)
        irrrl = prog == LoanProgram.VA_IRRRL
        defaults = {
            "bank_fee": QUOTE_DEFAULTS["bank_fee_va_irrrl"] if irrrl else QUOTE_DEFAULTS["bank_fee"],
            "escrow_months": QUOTE_DEFAULTS["escrow_months"],
            "term_years": QUOTE_DEFAULTS["term_years"],
        }
        defaults.update(fields)
        return cls(loan_program=prog, **defaults)


class EffectiveInput(BaseModel):
    """Internally consistent inputs after program rules are applied."""

    model_config = ConfigDict(frozen=True)

    loan_program: LoanProgram
    appraised_value: float
    current_balance: float
    effective_cash_out: float
    monthly_escrow: float
    escrow_months: float
    bank_fee: float
    title_fee: float
    funding_fee_exempt: bool
    mortgage_insurance_annual_rate_pct: float
    lender_points_pct: float
    branch_gen_points_pct: float
    interest_rate_pct: float
    term_years: float
    temporary_buydown: TemporaryBuydown
    arm_type: ArmType
    debt_paid_off: float
    debt_monthly_payments: float
    previous_monthly_piti: float
    pure_cash_out_no_consolidation: bool
    buydown_ignored: bool = False


class BuydownResult(BaseModel):
    buydown_type: TemporaryBuydown
    subsidy_cost: float = 0.0
    diff_year1: float = 0.0
    diff_year2: float = 0.0
    year1_rate_pct: float = 0.0
    year1_piti: float = 0.0
    year1_savings_vs_previous: float = 0.0
    year2_rate_pct: Optional[float] = None
    year2_piti: Optional[float] = None
    year2_savings_vs_previous: Optional[float] = None


class ConsolidationResult(BaseModel):
    is_consolidating: bool = False
    debt_paid_off_applied: float = 0.0
    cash_to_borrower: float = 0.0
    debt_monthly_payments: float = 0.0
    total_previous_monthly_outflow: float = 0.0
    total_monthly_savings: float = 0.0


class CompensationResult(BaseModel):
    inferred_pricing_tier: PricingTier = PricingTier.NONE
    loan_officer_bps: int = 0
    associate_bps: int = 0
    loan_officer_compensation: float = 0.0
    associate_compensation: float = 0.0


class ArmBreakdown(BaseModel):
    arm_type: ArmType
    fixed_years: int
    start_piti: float
    principal_at_adjust: float
    adjusted_rate_pct: float
    adjusted_principal_and_interest: float
    adjusted_mip: float
    adjusted_piti: float


class ScenarioResult(BaseModel):
    loan_program: LoanProgram
    effective_cash_out: float = 0.0

    # Fees and loan amount
    bank_fee: float = 0.0
    title_fee: float = 0.0
    escrow_cost: float = 0.0
    base_loan_before_gov_fee: float = 0.0
    government_fee: float = 0.0
    government_fee_label: str = "Funding Fee"
    base_loan_with_gov_fee: float = 0.0
    total_points_pct: float = 0.0
    points_cost: float = 0.0
    total_costs_pre_buydown: float = 0.0
    total_costs: float = 0.0
    final_loan_pre_buydown: float = 0.0
    buydown_subsidy_cost: float = 0.0
    final_loan_amount: float = 0.0
    loan_to_value_pct: float = 0.0

    # Monthly payment
    monthly_principal_and_interest: float = 0.0
    monthly_escrow: float = 0.0
    monthly_mip: float = 0.0
    monthly_mi: float = 0.0
    total_monthly_piti: float = 0.0

    previous_monthly_piti: float = 0.0
    savings_vs_previous: float = 0.0

    buydown: Optional[BuydownResult] = None
    consolidation: ConsolidationResult = Field(default_factory=ConsolidationResult)
    compensation: CompensationResult = Field(default_factory=CompensationResult)
    arm: Optional[ArmBreakdown] = None

    # Advisory flags
    points_too_high: bool = False
    fha_ltv_impossible: bool = False
    conv_rate_term_over_96: bool = False
    conv_cash_out_over_80: bool = False
    conv_mi_required: bool = False
    ambiguous_cash_out: bool = False
    buydown_ignored: bool = False

    @property
    def cash_to_borrower(self) -> float:
        return self.consolidation.cash_to_borrower

    @property
    def inferred_pricing_tier(self) -> PricingTier:
        return self.compensation.inferred_pricing_tier
