import numpy as np
import pytest

from analytics import (
    build_fan_chart_data,
    build_timeline_segments,
    compute_income_coverage,
    compute_mc_drawdown_end_value,
    compute_monthly_withdrawal_for_summary,
    compute_security_score,
    compute_summary_year,
    compute_total_withdrawal_amount,
    compute_total_years,
    compute_withdrawal_milestones,
    describe_timeline,
    filter_sensitivity_rows,
    find_safe_suggestion,
    get_security_label,
    locate_in_distribution,
    select_milestones,
)
from analytics.bands import fan_chart_frame
from core import MonteCarloYearData, SensitivityRow, SimulationInput, YearlyProjection
from engine import project


def _mc_year(year, p10, p25, p50, p75, p90, *, withdrawing=False):
    return MonteCarloYearData(
        year=year, p10=p10, p25=p25, p50=p50, p75=p75, p90=p90,
        principal=0.0, is_contributing=not withdrawing, is_withdrawing=withdrawing,
        depletion_rate=0.0,
    )


def _projection(year, yearly_withdrawal=0.0, *, withdrawing=False, total=0.0):
    return YearlyProjection(
        year=year, principal=total, interest=0.0, tax=0.0, total=total,
        yearly_withdrawal=yearly_withdrawal, is_contributing=False, is_withdrawing=withdrawing,
    )


def _row(delta, score, *, monthly=0.0, rate=None):
    return SensitivityRow(
        delta=delta, monthly_contribution=monthly, withdrawal_rate=rate,
        depletion_probability=0.0, security_score=score, median_final_balance=0.0,
    )


# ---------------------------------------------------------------------------
# Horizon / summary year
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "c, s, w, expected",
    [(20, 20, 0, 20), (20, 30, 25, 30), (20, 10, 10, 10), (10, 20, 15, 20)],
)
def test_compute_summary_year(c, s, w, expected):
    assert compute_summary_year(c, s, w) == expected


@pytest.mark.parametrize(
    "c, s, w, expected",
    [(20, 20, 25, 45), (50, 10, 10, 50), (0, 0, 0, 0), (30, 0, 0, 30)],
)
def test_compute_total_years(c, s, w, expected):
    assert compute_total_years(c, s, w) == expected


# ---------------------------------------------------------------------------
# Timeline
# ---------------------------------------------------------------------------

def test_timeline_segments_with_idle_gap():
    segs = build_timeline_segments(20, 30, 25)
    assert [(s.type, s.start, s.end) for s in segs] == [
        ("contribution", 0, 20),
        ("idle", 20, 30),
        ("withdrawal", 30, 55),
    ]
    assert [s.years for s in segs] == [20, 10, 25]


def test_timeline_segments_with_overlap():
    segs = build_timeline_segments(20, 10, 20)
    assert [(s.type, s.start, s.end) for s in segs] == [
        ("contribution", 0, 10),
        ("overlap", 10, 20),
        ("withdrawal", 20, 30),
    ]


def test_timeline_segments_cover_horizon():
    segs = build_timeline_segments(15, 15, 30)
    assert segs[0].start == 0
    assert segs[-1].end == compute_total_years(15, 15, 30)
    for a, b in zip(segs, segs[1:]):
        assert a.end == b.start
        assert a.type != b.type


def test_timeline_empty_horizon():
    assert build_timeline_segments(0, 0, 0) == []


@pytest.mark.parametrize(
    "c, s, w, expected",
    [
        (20, 20, 0, "積立のみ（積立20年）"),
        (0, 0, 0, "積立のみ"),
        (20, 20, 25, "積立 → 切り崩し（積立20年・切り崩し25年）"),
        (20, 30, 25, "積立 → 据え置き → 切り崩し（積立20年・据え置き10年・切り崩し25年）"),
        (0, 0, 30, "切り崩しのみ（切り崩し30年）"),
        (0, 5, 30, "据え置き → 切り崩し（据え置き5年・切り崩し30年）"),
        (20, 10, 10, "積立+切り崩し（積立20年・切り崩し10年）"),
    ],
)
def test_describe_timeline(c, s, w, expected):
    assert describe_timeline(c, s, w) == expected


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "max_value, expected",
    [
        (60_000_000, [10_000_000, 20_000_000]),
        (100_000, []),
        (10_500_000, []),
        (300_000_000, [20_000_000, 50_000_000]),
    ],
)
def test_select_milestones(max_value, expected):
    assert select_milestones(max_value) == expected


def test_withdrawal_milestones_short_plan_is_none():
    projections = [_projection(y) for y in range(30)]
    assert compute_withdrawal_milestones(5, 20, projections) is None


def test_withdrawal_milestones_long_plan():
    projections = [_projection(y, yearly_withdrawal=1000.0 * y) for y in range(61)]
    milestones = compute_withdrawal_milestones(30, 20, projections)
    assert [(m.year, m.annual) for m in milestones] == [(10, 30_000.0), (20, 40_000.0)]


def test_withdrawal_milestones_midpoint_and_missing_rows():
    projections = [_projection(y, yearly_withdrawal=float(y)) for y in range(25)]
    assert [(m.year, m.annual) for m in compute_withdrawal_milestones(15, 10, projections)] == [(7, 17.0)]
    assert compute_withdrawal_milestones(15, 30, projections) == []


# ---------------------------------------------------------------------------
# Fan chart
# ---------------------------------------------------------------------------

def test_fan_chart_bands():
    point = build_fan_chart_data([_mc_year(0, 100, 200, 400, 700, 1000)])[0]
    assert point.base == 100
    assert (
        point.band_outer_lower,
        point.band_inner_lower,
        point.band_inner_upper,
        point.band_outer_upper,
    ) == (100, 200, 300, 300)


def test_fan_chart_frame_columns():
    df = fan_chart_frame([_mc_year(0, 1, 2, 3, 4, 5), _mc_year(1, 2, 3, 4, 5, 6)])
    assert len(df) == 2
    assert "band_outer_upper" in df.columns


# ---------------------------------------------------------------------------
# Security score
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "args, expected",
    [
        ((0,), 100),
        ((1,), 0),
        ((0.2,), 80),
        ((0.2, 0.5), 70),
        ((0.0, 1.0), 80),
        ((0.05, 0.0, True), 10),
    ],
)
def test_compute_security_score(args, expected):
    assert compute_security_score(*args) == expected


def test_security_score_capped_when_median_is_zero():
    assert compute_security_score(0.83, 0.25, True) <= 10


@pytest.mark.parametrize(
    "score, label, level",
    [
        (100, "非常に安心", "safe"),
        (95, "非常に安心", "safe"),
        (80, "安心", "safe"),
        (79, "やや注意", "caution"),
        (60, "やや注意", "caution"),
        (59, "注意", "warning"),
        (40, "注意", "warning"),
        (39, "要見直し", "danger"),
        (0, "要見直し", "danger"),
    ],
)
def test_get_security_label(score, label, level):
    result = get_security_label(score)
    assert (result.label, result.level) == (label, level)


def test_safe_suggestion_amount_mode():
    rows = [
        _row(-10_000, 40, monthly=20_000),
        _row(0, 60, monthly=30_000),
        _row(10_000, 75, monthly=40_000),
        _row(20_000, 85, monthly=50_000),
        _row(30_000, 92, monthly=60_000),
    ]
    suggestion = find_safe_suggestion(60, rows, current_monthly=30_000)
    assert suggestion.delta == 20_000


def test_safe_suggestion_rate_mode_looks_for_lower_rate():
    rows = [
        _row(-2, 95, rate=2.0),
        _row(-1, 85, rate=3.0),
        _row(0, 70, rate=4.0),
        _row(1, 50, rate=5.0),
    ]
    suggestion = find_safe_suggestion(70, rows, current_monthly=0, current_rate=4.0)
    assert suggestion.withdrawal_rate == 2.0


def test_no_suggestion_when_already_safe_or_unreachable():
    rows = [_row(0, 85, monthly=30_000), _row(10_000, 90, monthly=40_000)]
    assert find_safe_suggestion(85, rows, current_monthly=30_000) is None
    weak = [_row(0, 50, monthly=30_000), _row(10_000, 70, monthly=40_000)]
    assert find_safe_suggestion(50, weak, current_monthly=30_000) is None
    assert find_safe_suggestion(50, [], current_monthly=30_000) is None


def test_filter_sensitivity_rows():
    rate_rows = [_row(d, 50, rate=4 + d) for d in (-3, -2, -1.5, -1, -0.5, 0, 0.5, 1)]
    assert [r.delta for r in filter_sensitivity_rows(rate_rows, "rate")] == [-0.5, 0, 0.5, 1]

    amount_rows = [_row(d, 50) for d in (-20_000, 0, 30_000, 50_000, 100_000)]
    assert [r.delta for r in filter_sensitivity_rows(amount_rows, "amount")] == [-20_000, 0, 30_000]


# ---------------------------------------------------------------------------
# Summary figures
# ---------------------------------------------------------------------------

def test_monthly_withdrawal_for_summary():
    projections = [_projection(y, yearly_withdrawal=1_200_000.0 if y >= 11 else 0.0) for y in range(20)]
    assert compute_monthly_withdrawal_for_summary("rate", projections, 10, 0) == 100_000
    assert compute_monthly_withdrawal_for_summary("amount", projections, 10, 250_000) == 250_000
    assert compute_monthly_withdrawal_for_summary("rate", projections, 30, 0) == 0


def test_rate_mode_summary_from_projection():
    inp = SimulationInput(
        initial_amount=12_000_000,
        annual_return_rate=0,
        withdrawal_years=10,
        annual_withdrawal_rate=4,
        tax_free=True,
    )
    monthly = compute_monthly_withdrawal_for_summary("rate", project(inp), 0, 0)
    assert monthly == pytest.approx(40_000)


def test_mc_drawdown_end_value():
    data = [
        _mc_year(0, 1, 2, 3, 4, 5),
        _mc_year(1, 10, 20, 30, 40, 50, withdrawing=True),
        _mc_year(2, 11, 21, 31, 41, 51, withdrawing=True),
        _mc_year(3, 0, 0, 0, 0, 0),
    ]
    assert compute_mc_drawdown_end_value(2, data) == 31
    assert compute_mc_drawdown_end_value(2, data, "p10") == 11
    assert compute_mc_drawdown_end_value(0, data) is None
    assert compute_mc_drawdown_end_value(2, data[:1]) is None


def test_total_withdrawal_amount():
    projections = [
        _projection(0),
        _projection(1, 100.0, withdrawing=True),
        _projection(2, 150.0, withdrawing=True),
    ]
    assert compute_total_withdrawal_amount(2, projections) == 250.0
    assert compute_total_withdrawal_amount(0, projections) == 0.0


@pytest.mark.parametrize(
    "pension, other, expense, expected",
    [(100_000, 50_000, 200_000, 0.75), (100_000, 0, 0, 0.0), (0, 0, 100_000, 0.0)],
)
def test_income_coverage(pension, other, expense, expected):
    assert compute_income_coverage(pension, other, expense) == pytest.approx(expected)


def test_locate_in_distribution():
    values = np.arange(1, 101, dtype=float)
    loc = locate_in_distribution(50.0, values)
    assert loc.percentile_rank == pytest.approx(50.0)
    assert loc.z_score == pytest.approx((50 - 50.5) / values.std())

    empty = locate_in_distribution(10.0, None)
    assert (empty.z_score, empty.percentile_rank) == (0.0, 0.0)
