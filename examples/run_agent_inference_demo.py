"""Demo script for agent destination inference.

This script demonstrates the complete workflow:
1. Plan and plot a path in the one-square scene
2. Draw prior samples of the agent model in the demo scene
3. Condition on the recorded demo measurements and infer one trace
4. Draw repeated posterior samples and summarize them with arviz
5. Check inference against synthetic ground truth

Figures are written to ``examples/output/``.
"""

import sys
from pathlib import Path

# Add parent directory to path for trajinfer import
sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib

matplotlib.use("Agg")

import numpy as np

import trajinfer
from trajinfer import DEMO_SCENE, SIMPLE_SCENE, Observations, agent_model, export_trace
from trajinfer.diagnostics import (
    compute_planning_metrics,
    measurement_rmse,
    posterior_mean_destination,
    summarize_posterior,
)
from trajinfer.synthetic_data import (
    DEMO_DT,
    DEMO_MEASUREMENTS,
    DEMO_PLANNER_PARAMS,
    DEMO_START,
    SyntheticDataConfig,
    generate_demo_sequence,
)
from trajinfer.viz_trace import plot_posterior_paths, plot_trace

OUTPUT_DIR = Path(__file__).parent / "output"
OUTPUT_DIR.mkdir(exist_ok=True)

NUM_PARTICLES = 1000
NUM_POSTERIOR_SAMPLES = 20
N_JOBS = 4

rng = np.random.default_rng(0)

print("=" * 70)
print("Agent destination inference demo")
print("=" * 70)

# =============================================================================
# 1. Plan a path
# =============================================================================

print("\n[1/5] Planning in the one-square scene...")

path = trajinfer.plan_path(
    trajinfer.Point(0.1, 0.1),
    trajinfer.Point(0.5, 0.5),
    SIMPLE_SCENE,
    DEMO_PLANNER_PARAMS,
    rng=rng,
)
if path is None:
    print("  - Planning failed")
else:
    print(f"  - {len(path)} waypoints, length {path.length():.3f}")

# =============================================================================
# 2. Prior samples
# =============================================================================

print("\n[2/5] Drawing prior samples...")

model_args = (DEMO_SCENE, DEMO_DT, len(DEMO_MEASUREMENTS), DEMO_PLANNER_PARAMS)
prior_traces = [trajinfer.simulate(agent_model, model_args, rng=rng) for _ in range(10)]
metrics = compute_planning_metrics(prior_traces)

print(f"  - Planning failure rate: {metrics['planning_failure_rate']:.2f}")
print(f"  - Mean path length: {metrics['mean_path_length']:.3f}")
plot_posterior_paths(
    [export_trace(t) for t in prior_traces],
    OUTPUT_DIR / "prior_samples.png",
    title="Prior samples",
)

# =============================================================================
# 3. Single posterior trace
# =============================================================================

print(f"\n[3/5] Inferring with {NUM_PARTICLES} particles...")

observations = Observations.from_measurements(DEMO_MEASUREMENTS, start=DEMO_START)
result = trajinfer.infer(
    agent_model, model_args, observations, NUM_PARTICLES, rng=rng, n_jobs=N_JOBS
)

if isinstance(result, trajinfer.InferenceFailure):
    print(f"  - Inference failed: {result.reason}")
else:
    print(f"  - Destination: ({result['dest_x']:.3f}, {result['dest_y']:.3f})")
    print(f"  - Speed: {result['speed']:.3f}")
    print(f"  - Measurement RMSE: {measurement_rmse(result):.4f}")
    plot_trace(export_trace(result), OUTPUT_DIR / "posterior_trace.png", title="Posterior trace")

# =============================================================================
# 4. Repeated posterior samples
# =============================================================================

print(f"\n[4/5] Drawing {NUM_POSTERIOR_SAMPLES} posterior samples...")

posterior = trajinfer.sample_posterior(
    agent_model,
    model_args,
    observations,
    NUM_PARTICLES,
    NUM_POSTERIOR_SAMPLES,
    rng=rng,
    n_jobs=N_JOBS,
)

if posterior:
    print(summarize_posterior(posterior))
    mean_dest = posterior_mean_destination(posterior)
    print(f"  - Posterior mean destination: ({mean_dest.x:.3f}, {mean_dest.y:.3f})")
    plot_posterior_paths(
        [export_trace(t) for t in posterior], OUTPUT_DIR / "posterior_samples.png"
    )

# =============================================================================
# 5. Synthetic ground truth
# =============================================================================

print("\n[5/5] Recovering a known destination...")

config = SyntheticDataConfig(dest=trajinfer.Point(0.9, 0.1), speed=0.6)
data = generate_demo_sequence(DEMO_SCENE, config=config)
synthetic_obs = Observations.from_measurements(data.measurements, start=config.start)
recovered = trajinfer.infer(
    agent_model, model_args, synthetic_obs, NUM_PARTICLES, rng=rng, n_jobs=N_JOBS
)

print(f"  - True destination: ({config.dest[0]:.3f}, {config.dest[1]:.3f})")
if isinstance(recovered, trajinfer.InferenceFailure):
    print(f"  - Inference failed: {recovered.reason}")
else:
    print(f"  - Inferred destination: ({recovered['dest_x']:.3f}, {recovered['dest_y']:.3f})")

print("\n" + "=" * 70)
print(f"Figures saved to {OUTPUT_DIR}")
print("=" * 70)
