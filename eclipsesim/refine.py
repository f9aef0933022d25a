"""Sub-step localisation of predicate transitions.

When a detector reports a different value after a coarse step, the change
happened somewhere inside that step. A disposable clone of the state is
walked backwards in small steps until the old value reappears.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
from typing import Callable

from . import constants as C
from .integrators import Integrator
from .timescales import format_utc, from_ns

logger = logging.getLogger(__name__)


class RefinementError(RuntimeError):
    """The predicate did not return to its previous value within one coarse step."""

    def __init__(self, start_ns: int, end_ns: int, before, after):
        self.start_ns = start_ns
        self.end_ns = end_ns
        self.before = before
        self.after = after
        super().__init__(
            f"Transition {before} -> {after} not found between "
            f"{format_utc(from_ns(start_ns))} and {format_utc(from_ns(end_ns))}; "
            "the coarse step is too large for the event or the detector is inconsistent"
        )


@dataclass(frozen=True)
class Transition:
    time_ns: int
    before: Enum
    after: Enum

    @property
    def datetime(self) -> datetime:
        return from_ns(self.time_ns)


def refine_transition(
    state,
    integrator: Integrator,
    classify: Callable,
    before,
    coarse_step: float,
    fine_step: float = C.REFINE_STEP,
) -> Transition:
    """Locate the instant ``classify`` changed away from ``before``.

    ``state`` is the live state just after the change was observed; it is
    not modified. The returned time is the middle of the last ``fine_step``
    interval, so it lies strictly inside the coarse step.

    Raises
    ------
    RefinementError
        If more than ``coarse_step / fine_step`` reversals are needed.
    """
    after = classify(state)
    scratch = state.clone()
    reversals = 0
    while True:
        integrator.propagate(scratch, -fine_step)
        reversals += 1
        if reversals * fine_step > coarse_step:
            raise RefinementError(
                state.time_ns - int(round(coarse_step * C.NS_PER_SECOND)),
                state.time_ns,
                before,
                after,
            )
        if classify(scratch) == before:
            break
    transition = Transition(
        scratch.time_ns + int(round(0.5 * fine_step * C.NS_PER_SECOND)), before, after
    )
    logger.debug("Refined %s -> %s after %d reversals", before, after, reversals)
    return transition
