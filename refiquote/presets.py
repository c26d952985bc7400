# Upfront and recurring government fees, in percent of the base loan.
GOV_FEE_TABLE = {
    "va_funding_fee_pct": 3.3,
    "va_irrrl_funding_fee_pct": 0.5,
    "fha_ufmip_pct": 1.75,
    "fha_annual_mip_pct": 0.55,
}

TOTAL_POINTS_ALERT = 4.75
CONV_MI_LTV_THRESHOLD = 80.0
CONV_RATE_TERM_MAX_LTV = 96.0
FHA_MAX_LTV = 80.0

# Temporary buydown rate reductions by year, in percentage points.
BUYDOWN_STEPS = {"2/1": (2.0, 1.0), "1/0": (1.0,)}

ARM_YEARS = {"3/1": 3, "5/1": 5}
ARM_FIRST_ADJUST_PCT = 1.0

# Branch-gen points bands: (tier, low, high, low inclusive, high inclusive)
BG_TIER_BANDS = [
    ("Tier1", 2.25, 3.00, True, True),
    ("Tier2", 1.50, 2.25, True, False),
    ("Tier3", 0.75, 1.50, True, False),
    ("Tier4", 0.00, 0.74, False, True),
]

COMP_BPS = {
    "loan_officer": {"Tier1": 100, "Tier2": 75, "Tier3": 50, "Tier4": 25},
    "associate": {"Tier1": 80, "Tier2": 60, "Tier3": 50, "Tier4": 25},
}

# Defaults the quote screen starts from.
QUOTE_DEFAULTS = {
    "bank_fee": 2350.0,
    "bank_fee_va_irrrl": 1500.0,
    "escrow_months": 2.0,
    "term_years": 30.0,
    "mortgage_insurance_annual_rate_pct": 0.6,
}
