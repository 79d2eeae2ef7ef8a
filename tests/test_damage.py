from dataclasses import replace

import numpy as np
import pytest

from collapse_engine.core.damage import (
    BuildingCode,
    CollapseDegree,
    CollapseStats,
    DamageModel,
    FireState,
    clamp_damage,
)
from collapse_engine.core.params import CodeProbabilities, CollapseParams, ConfigError, GaussianParams
from collapse_engine.core.sampling import GaussianSampler, RandomSource, UniformSampler

from .helpers import ConstantSampler, FixedDraws

DYADIC = CodeProbabilities(p_destroyed=0.125, p_severe=0.125, p_moderate=0.25, p_slight=0.25)


def _samplers(slight=10, moderate=35, severe=60, destroyed=90):
    return {
        CollapseDegree.SLIGHT: ConstantSampler(slight),
        CollapseDegree.MODERATE: ConstantSampler(moderate),
        CollapseDegree.SEVERE: ConstantSampler(severe),
        CollapseDegree.DESTROYED: ConstantSampler(destroyed),
    }


def _model(draws, samplers=None):
    stats = {code: CollapseStats.from_probabilities(code, DYADIC) for code in BuildingCode}
    return DamageModel(stats, samplers or _samplers(), FixedDraws(draws))


# ── Thresholds ─────────────────────────────────────────────────────────── #

def test_thresholds_are_cumulative():
    stats = CollapseStats.from_probabilities(BuildingCode.WOOD, DYADIC)
    assert stats.p_destroyed == 0.125
    assert stats.p_severe == 0.25
    assert stats.p_moderate == 0.5
    assert stats.p_slight == 0.75


@pytest.mark.parametrize(
    "draw, expected",
    [
        (0.0, CollapseDegree.DESTROYED),
        (0.124, CollapseDegree.DESTROYED),
        (0.125, CollapseDegree.SEVERE),
        (0.25, CollapseDegree.MODERATE),
        (0.5, CollapseDegree.SLIGHT),
        (0.749, CollapseDegree.SLIGHT),
        (0.75, CollapseDegree.NONE),
        (0.99, CollapseDegree.NONE),
    ],
)
def test_draw_on_threshold_falls_into_next_category(draw, expected):
    stats = CollapseStats.from_probabilities(BuildingCode.STEEL, DYADIC)
    assert stats.category(draw) == expected


def test_probabilities_need_not_sum_to_one():
    probs = CodeProbabilities(p_destroyed=0.5, p_severe=0.5, p_moderate=0.5, p_slight=0.5)
    stats = CollapseStats.from_probabilities(BuildingCode.CONCRETE, probs)
    assert stats.p_slight == 2.0
    assert stats.category(0.99) == CollapseDegree.SEVERE


# ── Collapse degree ────────────────────────────────────────────────────── #

@pytest.mark.parametrize(
    "damage, expected",
    [
        (0, CollapseDegree.NONE),
        (1, CollapseDegree.SLIGHT),
        (25, CollapseDegree.SLIGHT),
        (26, CollapseDegree.MODERATE),
        (50, CollapseDegree.MODERATE),
        (75, CollapseDegree.SEVERE),
        (76, CollapseDegree.DESTROYED),
        (100, CollapseDegree.DESTROYED),
    ],
)
def test_collapse_degree_bounds(damage, expected):
    assert CollapseDegree.get(damage) == expected


def test_collapse_degree_rejects_out_of_range():
    with pytest.raises(ValueError):
        CollapseDegree.get(101)


def test_clamp_damage_truncates_then_clamps():
    assert clamp_damage(42.9) == 42
    assert clamp_damage(-5.7) == 0
    assert clamp_damage(250.0) == 100
    assert isinstance(clamp_damage(np.float64(12.5)), int)


# ── Earthquake draws ───────────────────────────────────────────────────── #

def test_earthquake_damage_uses_category_sampler():
    model = _model([0.1, 0.2, 0.3, 0.6, 0.8])
    assert [model.draw_earthquake_damage(BuildingCode.WOOD) for _ in range(5)] == [90, 60, 35, 10, 0]


def test_earthquake_damage_never_samples_for_none():
    samplers = _samplers()
    model = _model([0.9], samplers)
    assert model.draw_earthquake_damage(BuildingCode.STEEL) == 0
    assert all(s.calls == 0 for s in samplers.values())


def test_earthquake_damage_is_clamped():
    model = _model([0.0, 0.6], _samplers(slight=-50, destroyed=200))
    assert model.draw_earthquake_damage(BuildingCode.CONCRETE) == 100
    assert model.draw_earthquake_damage(BuildingCode.CONCRETE) == 0


def test_unknown_code_gets_no_damage_and_consumes_no_draw():
    model = _model([0.0])
    assert model.draw_earthquake_damage(7) == 0
    assert model.draw_earthquake_damage(None) == 0
    # The single scripted draw is still available.
    assert model.draw_earthquake_damage(BuildingCode.WOOD) == 90


def test_missing_code_stats_rejected():
    stats = {BuildingCode.WOOD: CollapseStats.from_probabilities(BuildingCode.WOOD, DYADIC)}
    with pytest.raises(ConfigError):
        DamageModel(stats, _samplers(), FixedDraws([]))


# ── Fire draws ─────────────────────────────────────────────────────────── #

@pytest.mark.parametrize(
    "state, expected",
    [
        (FireState.HEATING, 10),
        (FireState.BURNING, 35),
        (FireState.INFERNO, 60),
        (FireState.BURNT_OUT, 90),
        (FireState.UNBURNT, 0),
        (FireState.WATER_DAMAGE, 0),
        (FireState.SEVERE_DAMAGE, 0),
        (None, 0),
        (42, 0),
    ],
)
def test_fire_minimum_damage(state, expected):
    assert _model([]).fire_minimum_damage(state) == expected


# ── Construction from params ───────────────────────────────────────────── #

def test_from_params_is_reproducible(params):
    a = DamageModel.from_params(params, RandomSource(123))
    b = DamageModel.from_params(params, RandomSource(123))
    draws_a = [a.draw_earthquake_damage(code) for code in BuildingCode for _ in range(50)]
    draws_b = [b.draw_earthquake_damage(code) for code in BuildingCode for _ in range(50)]
    assert draws_a == draws_b
    assert all(0 <= d <= 100 for d in draws_a)


def test_zero_sd_gaussian_returns_mean():
    sampler = GaussianSampler(35.0, 0.0, RandomSource(1).spawn())
    assert {sampler.next_value() for _ in range(10)} == {35.0}


def test_uniform_sampler_bounds():
    rng = RandomSource(5).spawn()
    sampler = UniformSampler(0.5, 1.0, rng)
    values = [sampler.next_value() for _ in range(200)]
    assert all(0.5 <= v <= 1.0 for v in values)
    assert UniformSampler(0.7, 0.7, rng).next_value() == 0.7


def test_spawned_generators_are_independent():
    source = RandomSource(9)
    a, b = source.spawn(), source.spawn()
    assert a.random() != b.random()


# ── Parameter validation ───────────────────────────────────────────────── #

def test_negative_sd_rejected():
    with pytest.raises(ConfigError):
        GaussianParams(mean=10.0, sd=-1.0)


def test_negative_probability_rejected():
    with pytest.raises(ConfigError):
        CodeProbabilities(p_destroyed=-0.1, p_severe=0.1, p_moderate=0.1, p_slight=0.1)


def test_params_require_every_code(params):
    with pytest.raises(ConfigError):
        replace(params, probabilities={BuildingCode.WOOD: DYADIC})


def test_params_have_no_builtin_constants():
    with pytest.raises(TypeError):
        CollapseParams(probabilities={code: DYADIC for code in BuildingCode})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"floor_height_m": 0.0},
        {"wall_extent_min": -0.1},
        {"wall_extent_min": 0.9, "wall_extent_max": 0.5},
    ],
)
def test_params_reject_bad_blockade_constants(params, kwargs):
    with pytest.raises(ConfigError):
        replace(params, **kwargs)


def test_floor_height_in_millimetres(params):
    assert params.floor_height_mm == 3000.0
