"""Choice addresses, choice maps, and validated observations.

Addresses are structured keys, never concatenated strings:

- scalar latents are plain strings: "start_x", "start_y", "dest_x",
  "dest_y", "speed"
- measurements are tuples ("meas", i, axis) with tick index i >= 1 and
  axis in {"x", "y"}

so that the tick index and axis of a measurement stay queryable.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from typing import Iterator, Optional, Sequence, Union

from .scene_config import Point

Address = Union[str, tuple]

LATENT_ADDRESSES = ("start_x", "start_y", "dest_x", "dest_y", "speed")
MEAS = "meas"
AXES = ("x", "y")


def meas_address(i: int, axis: str) -> tuple:
    """Address of the tick-`i` measurement on `axis` (i is 1-indexed)."""
    address = (MEAS, i, axis)
    validate_address(address)
    return address


def is_meas_address(address: Address) -> bool:
    return isinstance(address, tuple) and len(address) == 3 and address[0] == MEAS


def validate_address(address: Address, num_ticks: Optional[int] = None) -> None:
    """Check that `address` is one of the agent-model addresses.

    Parameters
    ----------
    address : str or tuple
        Address to check
    num_ticks : int, optional
        If given, measurement tick indices must be <= num_ticks

    Raises
    ------
    ValueError
        If the address is unknown or its tick index/axis is out of range
    """
    if isinstance(address, str):
        if address not in LATENT_ADDRESSES:
            raise ValueError(
                f"Unknown address {address!r} (expected one of {LATENT_ADDRESSES} "
                f"or ('meas', i, 'x'|'y'))"
            )
        return

    if not is_meas_address(address):
        raise ValueError(f"Unknown address {address!r}")

    _, i, axis = address
    if isinstance(i, bool) or not isinstance(i, numbers.Integral) or i < 1:
        raise ValueError(f"Measurement tick index must be an int >= 1, got {i!r}")
    if num_ticks is not None and i > num_ticks:
        raise ValueError(f"Measurement tick index {i} exceeds num_ticks ({num_ticks})")
    if axis not in AXES:
        raise ValueError(f"Measurement axis must be 'x' or 'y', got {axis!r}")


class ChoiceMap(Mapping):
    """Insertion-ordered mapping from address to sampled value."""

    def __init__(self, choices: Optional[Mapping] = None):
        self._choices: dict = {}
        if choices is not None:
            for address, value in choices.items():
                self._choices[address] = float(value)

    def __getitem__(self, address: Address) -> float:
        return self._choices[address]

    def __iter__(self) -> Iterator[Address]:
        return iter(self._choices)

    def __len__(self) -> int:
        return len(self._choices)

    def __repr__(self) -> str:
        return f"ChoiceMap({self._choices!r})"

    def _record(self, address: Address, value: float) -> None:
        if address in self._choices:
            raise ValueError(f"Address {address!r} sampled more than once")
        self._choices[address] = float(value)

    def measurement_ticks(self) -> list[int]:
        """Sorted tick indices that have at least one measurement."""
        return sorted({a[1] for a in self._choices if is_meas_address(a)})


class Observations(Mapping):
    """Immutable partial assignment of fixed values to agent-model addresses.

    Keys are validated on construction against the fixed address set; values
    must be finite. A value outside an address's prior support is allowed
    and simply yields zero likelihood during inference.

    Parameters
    ----------
    values : mapping
        Address -> observed value
    num_ticks : int, optional
        If given, measurement tick indices are checked against it
    """

    def __init__(self, values: Optional[Mapping] = None, num_ticks: Optional[int] = None):
        self._values: dict = {}
        self.num_ticks = num_ticks
        for address, value in (values or {}).items():
            validate_address(address, num_ticks)
            value = float(value)
            if not math.isfinite(value):
                raise ValueError(f"Observed value for {address!r} must be finite, got {value}")
            self._values[address] = value

    @classmethod
    def from_measurements(
        cls,
        measurements: Sequence[Point],
        start: Optional[Point] = None,
        num_ticks: Optional[int] = None,
    ) -> Observations:
        """Observe one (x, y) measurement per tick, optionally fixing the start.

        Parameters
        ----------
        measurements : sequence of Point
            measurements[i - 1] is observed at tick i
        start : Point, optional
            Observed start position
        num_ticks : int, optional
            Number of model ticks (defaults to len(measurements))

        Returns
        -------
        observations : Observations
        """
        if num_ticks is None:
            num_ticks = len(measurements)
        values: dict = {}
        if start is not None:
            values["start_x"] = start[0]
            values["start_y"] = start[1]
        for i, m in enumerate(measurements, start=1):
            values[(MEAS, i, "x")] = m[0]
            values[(MEAS, i, "y")] = m[1]
        return cls(values, num_ticks=num_ticks)

    def __getitem__(self, address: Address) -> float:
        return self._values[address]

    def __iter__(self) -> Iterator[Address]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Observations({self._values!r}, num_ticks={self.num_ticks})"
