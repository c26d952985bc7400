import math

from refiquote.calculators import (
    amortization_schedule,
    buydown_rates,
    buydown_subsidy,
    compute_ltv,
    consolidation_split,
    escrow_cost,
    government_fee_pct,
    loan_amounts,
    monthly_mortgage_insurance,
    monthly_payment,
    nz,
    piti_components,
    quick_price_out,
    remaining_balance,
)


def test_nz_blank_and_invalid_values():
    assert nz(None) == 0.0
    assert nz("") == 0.0
    assert nz(float("nan")) == 0.0
    assert nz(float("inf")) == 0.0
    assert nz("abc") == 0.0
    assert nz("-") == 0.0
    assert nz(None, default=12) == 12


def test_nz_reads_formatted_strings():
    assert nz("7") == 7.0
    assert nz("$1,250.50") == 1250.5
    assert nz(" 6.625 ") == 6.625
    assert nz("-300") == -300.0


def test_monthly_payment_standard_amortization():
    assert round(monthly_payment(300000, 6.5, 30), 2) == 1896.2
    assert abs(monthly_payment(302350, 6.5, 30) - 1911.06) < 0.05


def test_monthly_payment_zero_rate_is_straight_line():
    assert monthly_payment(120000, 0, 10) == 1000.0
    assert monthly_payment(120000, -2, 10) == 1000.0


def test_monthly_payment_zero_term_never_divides_by_zero():
    assert monthly_payment(5000, 0, 0) == 5000.0
    pmt = monthly_payment(5000, 6, 0)
    assert math.isfinite(pmt)
    assert round(pmt, 2) == 5025.0


def test_remaining_balance_paid_off_at_term():
    assert abs(remaining_balance(100000, 6.0, 30, 360)) < 1e-4
    assert remaining_balance(120000, 0, 10, 60) == 60000.0
    assert remaining_balance(100000, 6.0, 30, 0) == 100000.0


def test_remaining_balance_matches_schedule():
    sched = amortization_schedule(200000, 6.0, 30)
    after_five_years = float(sched.loc[sched["Month"] == 60, "Balance"].iloc[0])
    assert abs(after_five_years - remaining_balance(200000, 6.0, 30, 60)) < 1e-4


def test_amortization_schedule_totals():
    sched = amortization_schedule(100000, 6.0, 30)
    assert len(sched) == 360
    assert list(sched.columns) == ["Month", "Payment", "Interest", "Principal", "Balance"]
    assert abs(float(sched["Balance"].iloc[-1])) < 1e-6
    assert abs(float(sched["Principal"].sum()) - 100000) < 1e-4
    assert round(float(sched["Payment"].iloc[0]), 2) == round(monthly_payment(100000, 6.0, 30), 2)


def test_escrow_cost():
    assert escrow_cost(450, 2) == 900
    assert escrow_cost("", 2) == 0


def test_government_fee_pct_by_program():
    assert government_fee_pct("VA") == 3.3
    assert government_fee_pct("VA IRRRL") == 0.5
    assert government_fee_pct("FHA") == 1.75
    assert government_fee_pct("Conventional") == 0.0
    assert government_fee_pct("VA", funding_fee_exempt=True) == 0.0
    assert government_fee_pct("VA IRRRL", funding_fee_exempt=True) == 0.0
    assert government_fee_pct("FHA", funding_fee_exempt=True) == 1.75


def test_loan_amounts_points_on_fee_inclusive_base():
    res = loan_amounts("FHA", 200000, 0, 2350, 650, 900, 1.0, 0.5)
    base = 200000 + 2350 + 650 + 900
    assert res["base_loan_before_gov_fee"] == base
    assert abs(res["government_fee"] - base * 0.0175) < 1e-6
    assert abs(res["points_cost"] - res["base_loan_with_gov_fee"] * 0.015) < 1e-6
    expected_costs = 2350 + 650 + 900 + res["points_cost"] + res["government_fee"]
    assert abs(res["total_costs"] - expected_costs) < 1e-6
    assert abs(res["final_loan_pre_buydown"] - (200000 + expected_costs)) < 1e-6


def test_loan_amounts_points_never_capped():
    res = loan_amounts("Conventional", 100000, 0, 0, 0, 0, 3.0, 2.0)
    assert res["total_points_pct"] == 5.0
    assert res["points_too_high"] is True
    assert abs(res["points_cost"] - 5000) < 1e-6
    ok = loan_amounts("Conventional", 100000, 0, 0, 0, 0, 2.75, 2.0)
    assert ok["points_too_high"] is False


def test_compute_ltv_without_appraisal():
    assert compute_ltv(0, 300000) == 0.0
    assert compute_ltv(-1, 300000) == 0.0
    assert compute_ltv(400000, 300000) == 75.0


def test_mortgage_insurance_program_rules():
    mip, mi = monthly_mortgage_insurance("FHA", 240000, 70, 0.6)
    assert abs(mip - 240000 * 0.0055 / 12) < 1e-9 and mi == 0.0
    mip, mi = monthly_mortgage_insurance("Conventional", 240000, 80, 0.6)
    assert mip == 0.0 and mi == 0.0
    mip, mi = monthly_mortgage_insurance("Conventional", 240000, 80.01, 0.6)
    assert abs(mi - 240000 * 0.006 / 12) < 1e-9
    assert monthly_mortgage_insurance("VA", 240000, 100, 0.6) == (0.0, 0.0)


def test_piti_components_sum():
    res = piti_components("Conventional", 360000, 6.5, 30, 500, 400000, 0.6)
    assert res["ltv"] == 90.0
    assert abs(res["total"] - (res["pi"] + 500 + res["mi"])) < 1e-9
    assert res["mi"] > 0


def test_buydown_rates():
    assert buydown_rates(7.0, "2/1") == (5.0, 6.0)
    assert buydown_rates(7.0, "1/0") == (6.0,)
    assert buydown_rates(7.0, "None") == ()


def test_buydown_subsidy_two_one():
    loan = 300000
    pre = piti_components("Conventional", loan, 7.0, 30, 400, 500000, 0.6)
    res = buydown_subsidy(loan, 7.0, 30, "2/1", pre)
    base = monthly_payment(loan, 7.0, 30)
    d1 = base - monthly_payment(loan, 5.0, 30)
    d2 = base - monthly_payment(loan, 6.0, 30)
    assert abs(res["diff_year1"] - d1) < 1e-6
    assert abs(res["diff_year2"] - d2) < 1e-6
    assert abs(res["subsidy_cost"] - (d1 + d2) * 12) < 1e-6


def test_buydown_subsidy_floors_at_zero_rate():
    pre = piti_components("Conventional", 300000, 0.0, 30, 0, 500000, 0.6)
    res = buydown_subsidy(300000, 0.0, 30, "2/1", pre)
    assert res["subsidy_cost"] == 0.0
    assert res["diff_year1"] == 0.0 and res["diff_year2"] == 0.0


def test_consolidation_split_applies_debt_up_to_cash_out():
    res = consolidation_split(20000, 25000, 600, 2000, 2100)
    assert res["is_consolidating"]
    assert res["debt_paid_off_applied"] == 20000
    assert res["cash_to_borrower"] == 0.0
    assert res["total_previous_monthly_outflow"] == 2600
    assert abs(res["total_monthly_savings"] - 500) < 1e-9


def test_consolidation_split_pure_cash_out():
    res = consolidation_split(20000, 15000, 500, 2200, 2100, pure_cash_out=True)
    assert not res["is_consolidating"]
    assert res["cash_to_borrower"] == 20000
    assert res["debt_paid_off_applied"] == 0.0
    assert res["total_monthly_savings"] == 0.0
    assert not res["ambiguous_cash_out"]


def test_consolidation_split_ambiguous_intent():
    res = consolidation_split(20000, 0, 0, 2200, 2100)
    assert not res["is_consolidating"]
    assert res["ambiguous_cash_out"]
    assert res["cash_to_borrower"] == 20000
    assert not consolidation_split(0, 0, 0, 2200, 2100)["ambiguous_cash_out"]


def test_consolidation_savings_never_negative():
    res = consolidation_split(20000, 15000, 100, 1000, 3000)
    assert res["total_monthly_savings"] == 0.0


def test_quick_price_out():
    res = quick_price_out(2400, 2000, 900)
    assert res["pi_increase"] == 400
    assert res["est_monthly_savings"] == 500
    assert quick_price_out(2400, 2000, 900, no_cash_out=True) == {
        "pi_increase": None,
        "est_monthly_savings": None,
    }
    assert quick_price_out(2400, None, 900)["pi_increase"] is None
    assert quick_price_out(2400, 2000, None)["est_monthly_savings"] is None
