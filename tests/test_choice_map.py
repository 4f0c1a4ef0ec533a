"""
Test suite for addresses, choice maps and observations.
"""

import numpy as np
import pytest

from trajinfer.choice_map import (
    ChoiceMap,
    Observations,
    is_meas_address,
    meas_address,
    validate_address,
)
from trajinfer.scene_config import Point


def test_meas_address_structure():
    """Measurement addresses keep tick index and axis queryable."""
    address = meas_address(3, "y")
    assert address == ("meas", 3, "y")
    assert is_meas_address(address)
    assert not is_meas_address("speed")


@pytest.mark.parametrize(
    "address",
    [("meas", 0, "x"), ("meas", 1, "z"), ("meas", 1.0, "x"), ("meas", True, "x"), "velocity", ("speed",)],
)
def test_invalid_addresses_rejected(address):
    """Unknown names, zero/non-int tick indices and bad axes are rejected."""
    with pytest.raises(ValueError):
        validate_address(address)


def test_tick_index_bounded_by_num_ticks():
    """Tick indices beyond the model horizon are rejected when it is known."""
    validate_address(("meas", 5, "x"), num_ticks=5)
    with pytest.raises(ValueError, match="exceeds num_ticks"):
        validate_address(("meas", 6, "x"), num_ticks=5)


def test_numpy_integer_tick_accepted():
    """Tick indices may be numpy integers."""
    validate_address(("meas", np.int64(2), "x"))


def test_choice_map_preserves_order_and_rejects_duplicates():
    """Choices iterate in recording order; re-recording an address fails."""
    cm = ChoiceMap()
    cm._record("start_x", 0.1)
    cm._record(("meas", 2, "x"), 0.2)
    cm._record(("meas", 1, "y"), 0.3)
    assert list(cm) == ["start_x", ("meas", 2, "x"), ("meas", 1, "y")]
    assert cm.measurement_ticks() == [1, 2]
    with pytest.raises(ValueError, match="more than once"):
        cm._record("start_x", 0.5)


def test_observations_from_measurements():
    """One x and one y observation per tick, plus the optional start."""
    obs = Observations.from_measurements(
        [Point(0.1, 0.2), Point(0.3, 0.4)], start=Point(0.05, 0.06)
    )
    assert len(obs) == 6
    assert obs["start_x"] == 0.05 and obs["start_y"] == 0.06
    assert obs[("meas", 2, "x")] == 0.3
    assert obs.num_ticks == 2


def test_observations_validate_keys_and_values():
    """Unknown addresses and non-finite values are rejected."""
    with pytest.raises(ValueError, match="Unknown address"):
        Observations({"velocity": 1.0})
    with pytest.raises(ValueError, match="finite"):
        Observations({"speed": float("nan")})
    with pytest.raises(ValueError, match="exceeds num_ticks"):
        Observations.from_measurements([Point(0.1, 0.1)] * 3, num_ticks=2)


def test_observations_allow_out_of_support_values():
    """Values outside the prior support are legal observations."""
    obs = Observations({"speed": 2.0})
    assert obs["speed"] == 2.0


def test_observations_are_read_only():
    """Observations expose no item assignment."""
    obs = Observations({"speed": 0.5})
    with pytest.raises(TypeError):
        obs["speed"] = 0.1
