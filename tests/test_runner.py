import numpy as np
import pytest

from core import SimulationConfig, SimulationInput
from engine import project, simulate
from engine.aggregator import run_trials


def _plan(**overrides):
    base = dict(
        initial_amount=5_000_000,
        monthly_contribution=50_000,
        annual_return_rate=5,
        volatility=15,
        inflation_rate=2,
        contribution_years=20,
        withdrawal_start_year=20,
        withdrawal_years=25,
        monthly_withdrawal=250_000,
    )
    base.update(overrides)
    return SimulationInput(**base)


@pytest.mark.parametrize(
    "overrides",
    [
        dict(inflation_rate=0),
        dict(inflation_rate=0, tax_free=True),
        dict(inflation_rate=0, monthly_withdrawal=None, annual_withdrawal_rate=4),
    ],
)
def test_zero_volatility_matches_deterministic_projection(overrides):
    inp = _plan(volatility=0, **overrides)
    rows = project(inp)
    result = simulate(inp, SimulationConfig(n_trials=50, seed=1))

    assert len(result.yearly_data) == len(rows)
    for mc, det in zip(result.yearly_data, rows):
        for p in (mc.p10, mc.p25, mc.p50, mc.p75, mc.p90):
            assert p == pytest.approx(det.total)
        assert mc.principal == pytest.approx(det.principal)
        assert (mc.is_contributing, mc.is_withdrawing) == (det.is_contributing, det.is_withdrawing)


def test_zero_volatility_nominal_terms_with_inflation():
    inp = _plan(volatility=0)
    rows = project(inp)
    result = simulate(inp, SimulationConfig(n_trials=20, real_terms=False))
    assert result.yearly_data[-1].p50 == pytest.approx(rows[-1].total)


def test_real_terms_deflate_by_inflation():
    inp = SimulationInput(
        initial_amount=1_000_000,
        annual_return_rate=0,
        inflation_rate=2,
        contribution_years=1,
    )
    result = simulate(inp, SimulationConfig(n_trials=10))
    assert result.yearly_data[0].p50 == pytest.approx(1_000_000)
    assert result.yearly_data[1].p50 == pytest.approx(1_000_000 / 1.02)


def test_percentiles_are_ordered_every_year():
    result = simulate(_plan(), SimulationConfig(n_trials=500, seed=3))
    for d in result.yearly_data:
        assert d.p10 <= d.p25 <= d.p50 <= d.p75 <= d.p90
        assert 0.0 <= d.depletion_rate <= 1.0


def test_same_seed_reproduces_result():
    cfg = SimulationConfig(n_trials=300, seed=11)
    a = simulate(_plan(), cfg)
    b = simulate(_plan(), cfg)
    assert a.yearly_data == b.yearly_data
    assert a.depletion_probability == b.depletion_probability
    assert a.distribution == b.distribution


def test_explicit_generator_is_used():
    cfg = SimulationConfig(n_trials=300, seed=11)
    a = simulate(_plan(), cfg, rng=np.random.default_rng(99))
    b = simulate(_plan(), cfg, rng=np.random.default_rng(99))
    c = simulate(_plan(), cfg)
    assert a.yearly_data == b.yearly_data
    assert a.yearly_data != c.yearly_data


def test_depletion_rate_is_non_decreasing():
    result = simulate(_plan(monthly_withdrawal=400_000), SimulationConfig(n_trials=400, seed=5))
    rates = [d.depletion_rate for d in result.yearly_data]
    assert rates == sorted(rates)
    assert result.depletion_probability == pytest.approx(rates[-1])


def test_certain_depletion():
    inp = SimulationInput(
        initial_amount=1_000_000,
        annual_return_rate=0,
        withdrawal_years=5,
        monthly_withdrawal=100_000,
    )
    result = simulate(inp, SimulationConfig(n_trials=100))

    assert result.depletion_probability == 1.0
    assert result.yearly_data[-1].p90 == 0
    assert len(result.distribution) == 1
    assert result.distribution[0].is_depleted
    assert result.distribution[0].count == 100


def test_failure_when_ending_below_contributions():
    inp = SimulationInput(
        initial_amount=1_000_000,
        annual_return_rate=0,
        expense_ratio=10,
        contribution_years=1,
    )
    result = simulate(inp, SimulationConfig(n_trials=50))
    assert result.failure_probability == 1.0
    assert result.depletion_probability == 0.0


def test_failure_counts_only_contributions_actually_made():
    inp = SimulationInput(
        initial_amount=100_000,
        monthly_contribution=10_000,
        annual_return_rate=0,
        contribution_years=5,
        withdrawal_years=5,
        monthly_withdrawal=50_000,
        tax_free=True,
    )
    result = simulate(inp, SimulationConfig(n_trials=20))

    # every trial runs dry in year 0 and makes no later contributions
    assert result.depletion_probability == 1.0
    assert result.failure_probability == 0.0


def test_principal_is_in_the_same_units_as_the_bands():
    inp = SimulationInput(
        initial_amount=1_000_000,
        annual_return_rate=0,
        inflation_rate=3,
        contribution_years=30,
    )
    last = simulate(inp, SimulationConfig(n_trials=20)).yearly_data[-1]
    assert last.p50 == pytest.approx(1_000_000 / 1.03 ** 30)
    assert last.principal == pytest.approx(last.p50)

    nominal = simulate(inp, SimulationConfig(n_trials=20, real_terms=False)).yearly_data[-1]
    assert nominal.principal == pytest.approx(1_000_000)


def test_no_failure_when_growth_is_certain():
    inp = SimulationInput(initial_amount=1_000_000, annual_return_rate=5, contribution_years=10)
    result = simulate(inp, SimulationConfig(n_trials=50))
    assert result.failure_probability == 0.0


def test_histogram_counts_every_trial():
    cfg = SimulationConfig(n_trials=1000, seed=2)
    result = simulate(_plan(monthly_withdrawal=150_000), cfg)

    depleted = [b for b in result.distribution if b.is_depleted]
    value_bins = [b for b in result.distribution if not b.is_depleted]
    assert sum(b.count for b in result.distribution) == 1000
    assert len(value_bins) == cfg.histogram_bins
    if depleted:
        assert result.distribution[0].is_depleted
        assert depleted[0].count == round(result.depletion_probability * 1000)
    ends = [b.range_end for b in value_bins]
    assert ends == sorted(ends)


def test_constant_outcome_falls_in_one_bin():
    inp = SimulationInput(initial_amount=1_000_000, annual_return_rate=5, contribution_years=3)
    result = simulate(inp, SimulationConfig(n_trials=40))
    assert sum(b.count for b in result.distribution) == 40
    assert result.distribution[-1].count == 40


def test_to_dataframe_has_one_row_per_year():
    inp = _plan()
    result = simulate(inp, SimulationConfig(n_trials=100))
    df = result.to_dataframe()
    assert len(df) == inp.total_years + 1
    assert {"year", "p10", "p50", "p90", "depletion_rate"} <= set(df.columns)


def test_run_trials_rejects_wrong_horizon():
    inp = _plan()
    with pytest.raises(ValueError):
        run_trials(inp, np.zeros((10, inp.total_years - 1)), SimulationConfig(n_trials=10))


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(n_trials=0),
        dict(n_trials=-5),
        dict(return_distribution="student-t"),
        dict(histogram_bins=0),
        dict(tax_rate=1.5),
        dict(percentiles=(90, 75, 50, 25, 10)),
        dict(max_workers=0),
    ],
)
def test_invalid_config_is_rejected(kwargs):
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)


def test_lognormal_returns_run():
    result = simulate(_plan(), SimulationConfig(n_trials=200, return_distribution="lognormal"))
    assert len(result.yearly_data) == _plan().total_years + 1
    assert 0.0 <= result.depletion_probability <= 1.0
