"""Execution engine for traced generative models.

A model is a plain Python function whose first argument is a
`ChoiceRecorder`. Every random choice the model wants exposed to inference
goes through `recorder.sample(address, distribution)`; anything else the
model does (including calls to stochastic black boxes using `recorder.rng`)
is untraced.

Two entry points run a model:

- `simulate`: ancestral sampling of every choice.
- `generate`: some addresses are forced to given values; the log densities
  of the forced values are summed into an importance weight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

import numpy as np

from .choice_map import Address, ChoiceMap

RandomState = Union[np.random.Generator, int, None]


@dataclass(frozen=True)
class Trace:
    """Record of one model execution.

    Attributes
    ----------
    model : callable
        The model function that was executed
    args : tuple
        Model arguments (excluding the recorder)
    choices : ChoiceMap
        Every traced random choice, in the order it was made
    retval : Any
        Model return value
    score : float
        Joint log density of all traced choices
    """

    model: Callable
    args: tuple
    choices: ChoiceMap
    retval: Any
    score: float

    def __getitem__(self, address: Address) -> float:
        return self.choices[address]


class ChoiceRecorder:
    """Handle through which a model makes traced random choices.

    Attributes
    ----------
    rng : np.random.Generator
        Generator for traced choices; models may also hand it to untraced
        stochastic subroutines
    choices : ChoiceMap
        Choices recorded so far
    score : float
        Running joint log density of recorded choices
    log_weight : float
        Running sum of log densities of constrained choices
    """

    def __init__(self, rng: np.random.Generator, constraints: Optional[Mapping] = None):
        self.rng = rng
        self.constraints = constraints if constraints is not None else {}
        self.choices = ChoiceMap()
        self.score = 0.0
        self.log_weight = 0.0

    def sample(self, address: Address, dist) -> float:
        """Draw (or force) the value at `address` from `dist`.

        Parameters
        ----------
        address : str or tuple
            Unique address of this choice within the execution
        dist : distribution
            Object with `sample(rng)` and `logpdf(value)`

        Returns
        -------
        value : float
            The constrained value if `address` is constrained, else a fresh
            draw from `dist`
        """
        if address in self.choices:
            raise ValueError(f"Address {address!r} sampled more than once")

        if address in self.constraints:
            value = float(self.constraints[address])
            logp = dist.logpdf(value)
            self.log_weight += logp
        else:
            value = dist.sample(self.rng)
            logp = dist.logpdf(value)

        self.choices._record(address, value)
        self.score += logp
        return value


def generate(
    model: Callable,
    args: tuple,
    constraints: Optional[Mapping] = None,
    rng: RandomState = None,
) -> tuple[Trace, float]:
    """Run `model` with some addresses forced to fixed values.

    Parameters
    ----------
    model : callable
        Model function `model(recorder, *args)`
    args : tuple
        Model arguments
    constraints : mapping, optional
        Address -> forced value
    rng : np.random.Generator or int, optional
        Generator or seed (default: fresh entropy)

    Returns
    -------
    trace : Trace
        Execution record, consistent with `constraints`
    log_weight : float
        Sum of log densities of the constrained values; -inf if any of them
        lies outside its distribution's support

    Raises
    ------
    ValueError
        If a constrained address is never visited by the model
    """
    rng = np.random.default_rng(rng)
    constraints = constraints if constraints is not None else {}
    args = tuple(args)

    recorder = ChoiceRecorder(rng, constraints)
    retval = model(recorder, *args)

    unused = [address for address in constraints if address not in recorder.choices]
    if unused:
        raise ValueError(f"Constrained addresses never visited by the model: {unused}")

    trace = Trace(
        model=model,
        args=args,
        choices=recorder.choices,
        retval=retval,
        score=recorder.score,
    )
    return trace, recorder.log_weight


def simulate(model: Callable, args: tuple, rng: RandomState = None) -> Trace:
    """Run `model` drawing every choice from its prior."""
    trace, _ = generate(model, args, None, rng)
    return trace
