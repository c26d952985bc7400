from refiquote.calculators import compensation, pricing_tier


def test_tier_boundaries():
    assert pricing_tier(3.0) == "Tier1"
    assert pricing_tier(2.25) == "Tier1"
    assert pricing_tier(2.2499) == "Tier2"
    assert pricing_tier(1.5) == "Tier2"
    assert pricing_tier(1.4999) == "Tier3"
    assert pricing_tier(0.75) == "Tier3"
    assert pricing_tier(0.74) == "Tier4"
    assert pricing_tier(0.01) == "Tier4"


def test_tier_out_of_range():
    assert pricing_tier(0) == "None"
    assert pricing_tier(3.01) == "None"
    assert pricing_tier(-0.5) == "None"
    assert pricing_tier(0.745) == "None"
    assert pricing_tier("") == "None"


def test_compensation_bps_table():
    expected = {
        "Tier1": (100, 80),
        "Tier2": (75, 60),
        "Tier3": (50, 50),
        "Tier4": (25, 25),
        "None": (0, 0),
    }
    for tier, (lo, loa) in expected.items():
        comp = compensation(400000, tier)
        assert comp["loan_officer_bps"] == lo
        assert comp["associate_bps"] == loa
        assert abs(comp["loan_officer_compensation"] - 400000 * lo / 10000) < 1e-9
        assert abs(comp["associate_compensation"] - 400000 * loa / 10000) < 1e-9


def test_compensation_custom_table():
    table = {"loan_officer": {"Tier2": 90}}
    comp = compensation(200000, "Tier2", table)
    assert comp["loan_officer_compensation"] == 1800
    assert comp["associate_bps"] == 0
