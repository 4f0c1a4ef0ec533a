"""
Test suite for the traced-model execution engine.

Uses small toy models so that scores and weights can be checked against
closed-form log densities.
"""

import numpy as np
import pytest
from scipy import stats

from trajinfer.distributions import Normal, Uniform
from trajinfer.tracing import ChoiceRecorder, generate, simulate


def toy_model(recorder, sigma):
    """x ~ U(0, 1); y ~ N(x, sigma)."""
    x = recorder.sample("x", Uniform(0.0, 1.0))
    y = recorder.sample("y", Normal(x, sigma))
    return x + y


def test_distributions_validate_parameters():
    """Degenerate distribution parameters are rejected."""
    with pytest.raises(ValueError, match="low < high"):
        Uniform(1.0, 1.0)
    with pytest.raises(ValueError, match="sigma"):
        Normal(0.0, 0.0)


def test_uniform_logpdf_outside_support():
    """Out-of-support values have log density -inf, not an error."""
    assert Uniform(0.0, 1.0).logpdf(1.5) == -np.inf
    assert Uniform(0.0, 1.0).logpdf(0.5) == 0.0
    assert np.isclose(Uniform(0.0, 2.0).logpdf(1.0), -np.log(2.0))


def test_simulate_records_all_choices():
    """Simulation records every choice and the joint log density."""
    trace = simulate(toy_model, (0.1,), rng=0)
    assert list(trace.choices) == ["x", "y"]
    assert np.isclose(trace.retval, trace["x"] + trace["y"])

    expected = stats.norm.logpdf(trace["y"], trace["x"], 0.1)
    assert np.isclose(trace.score, expected), f"score {trace.score} != {expected}"


def test_simulate_reproducible_with_seed():
    """Same seed gives the same trace."""
    a = simulate(toy_model, (0.1,), rng=5)
    b = simulate(toy_model, (0.1,), rng=5)
    assert dict(a.choices) == dict(b.choices)


def test_generate_forces_constrained_values():
    """Constrained addresses take the given values and weight by their density."""
    trace, log_weight = generate(toy_model, (0.1,), {"y": 0.3}, rng=1)
    assert trace["y"] == 0.3
    expected = stats.norm.logpdf(0.3, trace["x"], 0.1)
    assert np.isclose(log_weight, expected)
    assert np.isclose(trace.score, expected)


def test_generate_without_constraints_has_zero_weight():
    """No constraints means a log weight of exactly zero."""
    _, log_weight = generate(toy_model, (0.1,), rng=0)
    assert log_weight == 0.0


def test_generate_out_of_support_constraint():
    """A constraint outside the support gives log weight -inf."""
    trace, log_weight = generate(toy_model, (0.1,), {"x": 2.0}, rng=0)
    assert log_weight == -np.inf
    assert trace["x"] == 2.0


def test_generate_rejects_unvisited_constraints():
    """Constraining an address the model never samples is an error."""
    with pytest.raises(ValueError, match="never visited"):
        generate(toy_model, (0.1,), {"z": 0.0}, rng=0)


def test_duplicate_address_rejected():
    """A model may not sample the same address twice."""

    def bad_model(recorder):
        recorder.sample("x", Uniform())
        recorder.sample("x", Uniform())

    with pytest.raises(ValueError, match="more than once"):
        simulate(bad_model, (), rng=0)


def test_recorder_exposes_rng():
    """Models can hand the recorder's generator to untraced code."""
    rng = np.random.default_rng(0)
    recorder = ChoiceRecorder(rng)
    assert recorder.rng is rng
    recorder.sample("x", Uniform())
    assert len(recorder.choices) == 1
