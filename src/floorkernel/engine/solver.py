"""Contract of the external geometric constraint solver.

The kernel never implements a solver. It talks to one through this protocol,
exchanging primitives in their wire form (see
:meth:`floorkernel.core.primitives.PointPrimitive.to_dict`).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Protocol

WirePrimitive = Dict[str, Any]


class Solver(Protocol):
    """Protocol for constraint solvers.

    A solver instance is used for exactly one solve: push, solve, and on
    success apply and read back. Callers construct a fresh instance for every
    solve so no internal state leaks between rooms or attempts.
    """

    def push_primitives_and_params(self, primitives: List[WirePrimitive]) -> None:
        """Load primitives and their parameters into the solver."""
        ...

    def solve(self) -> bool:
        """Run the solver.

        Returns:
            True if the constraint system was satisfied.
        """
        ...

    def apply_solution(self) -> None:
        """Write the solved parameters back onto the solver's primitives."""
        ...

    def get_primitives(self) -> List[WirePrimitive]:
        """Primitives as held by the solver, after :meth:`apply_solution`."""
        ...


SolverFactory = Callable[[], Solver]
