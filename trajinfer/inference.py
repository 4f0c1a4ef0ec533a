"""Importance sampling with resampling for traced models.

This module provides:

- `importance_sampling`: N independent constrained executions of a model,
  each weighted by the likelihood of the observations.
- `resample`: categorical selection of one particle by normalised weight.
- `infer`: the two steps above, returning a single approximate posterior
  trace.
- `sample_posterior`: repeated independent `infer` runs.

The proposal for every unobserved address is its prior, so a particle's log
weight is the sum of the observed addresses' log densities at the values the
model generated. Weights are normalised in log space with
`scipy.special.logsumexp`.

Particles with weight -inf (an observation outside its support) are never
selected. If every particle has weight -inf, `infer` returns an
`InferenceFailure` instead of a trace.

Each particle runs with its own Generator spawned from a SeedSequence, so
results depend only on the seed, not on `n_jobs`.
"""

from __future__ import annotations

import math
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Mapping, NamedTuple, Optional, Union

import numpy as np
from scipy.special import logsumexp

from .tracing import RandomState, Trace, generate


class WeightedParticle(NamedTuple):
    """One importance sample: a trace and its unnormalised log weight."""

    trace: Trace
    log_weight: float


class InferenceFailure(NamedTuple):
    """Returned by `infer` when no particle is consistent with the observations.

    Attributes
    ----------
    reason : str
        Human-readable explanation
    num_particles : int
        Number of particles that were tried
    """

    reason: str
    num_particles: int


class ImportanceResult(NamedTuple):
    """Weighted particle collection from `importance_sampling`.

    Attributes
    ----------
    particles : list[WeightedParticle]
        All particles in generation order
    log_normalized_weights : np.ndarray
        Log weights normalised to sum to one in linear space, shape (N,).
        All -inf if every particle has zero weight.
    log_ml_estimate : float
        Log of the mean unnormalised weight, an estimate of the log marginal
        likelihood of the observations
    ess : float
        Effective sample size 1 / sum(w_i^2) of the normalised weights
    """

    particles: list
    log_normalized_weights: np.ndarray
    log_ml_estimate: float
    ess: float

    @property
    def failed(self) -> bool:
        """True if every particle has zero weight."""
        return not math.isfinite(self.log_ml_estimate)


def _spawn_generators(rng: np.random.Generator, n: int) -> list[np.random.Generator]:
    """Independent child generators, one per particle."""
    seed_seq = np.random.SeedSequence(int(rng.integers(0, 2**63)))
    return [np.random.default_rng(child) for child in seed_seq.spawn(n)]


def importance_sampling(
    model: Callable,
    model_args: tuple,
    observations: Optional[Mapping],
    num_particles: int,
    rng: RandomState = None,
    n_jobs: int = 1,
) -> ImportanceResult:
    """Draw weighted particles from `model` conditioned on `observations`.

    Parameters
    ----------
    model : callable
        Model function `model(recorder, *model_args)`
    model_args : tuple
        Model arguments, shared read-only by all particles
    observations : mapping or None
        Address -> observed value
    num_particles : int
        Number of particles, >= 1
    rng : np.random.Generator or int, optional
        Generator or seed (default: fresh entropy)
    n_jobs : int
        Number of worker threads; 1 runs particles in the calling thread

    Returns
    -------
    result : ImportanceResult
    """
    if int(num_particles) != num_particles or num_particles < 1:
        raise ValueError(f"num_particles must be a positive int, got {num_particles}")
    if n_jobs < 1:
        raise ValueError(f"n_jobs must be >= 1, got {n_jobs}")

    rng = np.random.default_rng(rng)
    observations = observations if observations is not None else {}
    generators = _spawn_generators(rng, int(num_particles))

    def run_particle(gen: np.random.Generator) -> WeightedParticle:
        trace, log_weight = generate(model, model_args, observations, gen)
        return WeightedParticle(trace, float(log_weight))

    if n_jobs == 1:
        particles = [run_particle(gen) for gen in generators]
    else:
        with ThreadPoolExecutor(max_workers=n_jobs) as pool:
            particles = list(pool.map(run_particle, generators))

    log_weights = np.array([p.log_weight for p in particles], dtype=float)

    if not np.any(np.isfinite(log_weights)):
        return ImportanceResult(
            particles=particles,
            log_normalized_weights=np.full(len(particles), -np.inf),
            log_ml_estimate=-np.inf,
            ess=0.0,
        )

    log_total = float(logsumexp(log_weights))
    log_normalized = log_weights - log_total
    ess = float(1.0 / np.sum(np.exp(2.0 * log_normalized)))

    return ImportanceResult(
        particles=particles,
        log_normalized_weights=log_normalized,
        log_ml_estimate=log_total - math.log(len(particles)),
        ess=ess,
    )


def resample(
    result: ImportanceResult, rng: RandomState = None
) -> Union[Trace, InferenceFailure]:
    """Select one particle with probability proportional to its weight."""
    if result.failed:
        return InferenceFailure(
            reason="every particle has zero likelihood under the observations",
            num_particles=len(result.particles),
        )

    rng = np.random.default_rng(rng)
    probs = np.exp(result.log_normalized_weights)
    probs /= probs.sum()
    idx = int(rng.choice(len(probs), p=probs))
    return result.particles[idx].trace


def infer(
    model: Callable,
    model_args: tuple,
    observations: Optional[Mapping],
    num_particles: int,
    rng: RandomState = None,
    n_jobs: int = 1,
) -> Union[Trace, InferenceFailure]:
    """Approximate posterior sample by importance sampling with resampling.

    Parameters
    ----------
    model : callable
        Model function `model(recorder, *model_args)`
    model_args : tuple
        Model arguments
    observations : mapping or None
        Address -> observed value; all other addresses are sampled from
        their priors
    num_particles : int
        Number of particles, >= 1. With 1 particle and no observations this
        is a plain prior sample.
    rng : np.random.Generator or int, optional
        Generator or seed (default: fresh entropy)
    n_jobs : int
        Number of worker threads for the particle loop

    Returns
    -------
    trace : Trace or InferenceFailure
        Selected trace, or InferenceFailure if every particle had zero
        likelihood

    Examples
    --------
    >>> from trajinfer import agent_model, Observations
    >>> from trajinfer.scene_config import DEMO_SCENE
    >>> from trajinfer.synthetic_data import DEMO_MEASUREMENTS, DEMO_START
    >>> from trajinfer.synthetic_data import DEMO_DT, DEMO_PLANNER_PARAMS
    >>> obs = Observations.from_measurements(DEMO_MEASUREMENTS, start=DEMO_START)
    >>> args = (DEMO_SCENE, DEMO_DT, len(DEMO_MEASUREMENTS), DEMO_PLANNER_PARAMS)
    >>> trace = infer(agent_model, args, obs, num_particles=1000, rng=0)
    """
    rng = np.random.default_rng(rng)
    result = importance_sampling(
        model, model_args, observations, num_particles, rng=rng, n_jobs=n_jobs
    )
    return resample(result, rng)


def sample_posterior(
    model: Callable,
    model_args: tuple,
    observations: Optional[Mapping],
    num_particles: int,
    num_samples: int,
    rng: RandomState = None,
    n_jobs: int = 1,
) -> list[Trace]:
    """Run `infer` `num_samples` times independently.

    Failed runs are dropped and reported with a UserWarning, so the result
    may hold fewer than `num_samples` traces.
    """
    if num_samples < 0:
        raise ValueError(f"num_samples must be >= 0, got {num_samples}")

    rng = np.random.default_rng(rng)
    traces = []
    failures = 0
    for _ in range(num_samples):
        result = infer(
            model, model_args, observations, num_particles, rng=rng, n_jobs=n_jobs
        )
        if isinstance(result, InferenceFailure):
            failures += 1
            continue
        traces.append(result)

    if failures:
        warnings.warn(
            f"{failures} of {num_samples} inference runs failed "
            "(every particle had zero likelihood); dropped from posterior samples",
            UserWarning,
        )
    return traces
