"""
Core utility functions for hex-lattice chain geometry.

This module provides the fundamental lattice operations used throughout
the package: axial coordinates, the six neighbor directions, bend
arithmetic, the hex distance metric and the fold-state <-> angle
conversion. Scalar helpers work on plain ints; the batched helpers work
on int64 tensors of shape (..., N, 2) so layouts stay exact.

Axial directions (flat-top hexes):
    0: East       (+1,  0)
    1: Southeast  ( 0, +1)
    2: Southwest  (-1, +1)
    3: West       (-1,  0)
    4: Northwest  ( 0, -1)
    5: Northeast  (+1, -1)

A right turn advances the direction index (clockwise), a left turn
decreases it. Fold states count left turns as positive steps.
"""

import math
import torch
from typing import List, Optional, Tuple


DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (+1, 0),   # 0: East
    (0, +1),   # 1: Southeast
    (-1, +1),  # 2: Southwest
    (-1, 0),   # 3: West
    (0, -1),   # 4: Northwest
    (+1, -1),  # 5: Northeast
)
DIRECTION_NAMES = ("E", "SE", "SW", "W", "NW", "NE")
N_DIRECTIONS = 6

BEND_ANGLES = {60: 1, 120: 2}
TURN_SENSES = {"right": 1, "left": -1}
MAX_STEPS = 2


def direction_vectors(device: torch.device | str = "cpu") -> torch.Tensor:
    """Axial direction offsets as an int64 tensor, shape (6, 2)."""
    return torch.tensor(DIRECTIONS, dtype=torch.int64, device=device)


def _check_direction(direction: int) -> None:
    if not 0 <= direction < N_DIRECTIONS:
        raise ValueError(f"direction={direction} out of valid range [0, {N_DIRECTIONS}).")


def move(q: int, r: int, direction: int) -> Tuple[int, int]:
    """
    Move one hex from (q, r) along a direction.

    Args:
        q, r: Current axial coordinate
        direction: Direction index in [0, 6)

    Returns:
        (q', r') one lattice step away
    """
    _check_direction(direction)
    dq, dr = DIRECTIONS[direction]
    return q + dq, r + dr


def neighbors(q: int, r: int) -> List[Tuple[int, int, int]]:
    """
    All six neighbors of a hex, in direction order.

    Returns:
        List of (q, r, direction) tuples
    """
    return [(*move(q, r, d), d) for d in range(N_DIRECTIONS)]


def bend(direction: int, angle: int, turn: str) -> int:
    """
    Apply a bend to a heading.

    A 60° turn shifts the direction by one index, a 120° turn by two;
    right turns go clockwise (+), left turns counter-clockwise (-).

    Args:
        direction: Current direction in [0, 6)
        angle: Bend angle in degrees, 60 or 120
        turn: 'left' or 'right'

    Returns:
        New direction in [0, 6)

    Example:
        bend(0, 60, 'right')   # 1 (East -> Southeast)
        bend(0, 120, 'left')   # 4 (East -> Northwest)
    """
    _check_direction(direction)
    if angle not in BEND_ANGLES:
        raise ValueError(f"Invalid bend angle {angle}°. Expected one of {sorted(BEND_ANGLES)}.")
    if turn not in TURN_SENSES:
        raise ValueError(f"Invalid turn sense '{turn}'. Expected 'left' or 'right'.")
    return (direction + TURN_SENSES[turn] * BEND_ANGLES[angle]) % N_DIRECTIONS


def turn_offset(steps: int) -> int:
    """
    Direction-index offset produced by a fold state.

    Positive steps are left turns, so the index goes down.
    """
    return -steps


def hex_distance(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    """
    Lattice distance between two axial coordinates.

    Uses the cube-coordinate form: with s = -q - r,
        d = (|Δq| + |Δr| + |Δs|) / 2

    Args:
        a, b: (q, r) coordinates

    Returns:
        Number of lattice steps between a and b
    """
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    total = abs(dq) + abs(dr) + abs(dq + dr)
    if isinstance(total, int):
        return total // 2
    return total / 2


def hex_distance_matrix(positions: torch.Tensor) -> torch.Tensor:
    """
    Pairwise hex distances for batched coordinates.

    Integer positions give exact integer distances; float positions are
    accepted and use the same formula.

    Args:
        positions: Axial coordinates, shape (..., N, 2)

    Returns:
        Distance matrix, shape (..., N, N)
    """
    q = positions[..., 0]
    r = positions[..., 1]
    dq = q.unsqueeze(-1) - q.unsqueeze(-2)
    dr = r.unsqueeze(-1) - r.unsqueeze(-2)
    total = dq.abs() + dr.abs() + (dq + dr).abs()
    if total.is_floating_point():
        return total / 2
    return torch.div(total, 2, rounding_mode="floor")


def axial_to_cartesian(positions: torch.Tensor) -> torch.Tensor:
    """
    Embed axial coordinates in the plane with unit bond length.

        x = q + r/2
        y = r·√3/2

    Args:
        positions: Axial coordinates, shape (..., 2)

    Returns:
        Cartesian coordinates, float64, shape (..., 2)
    """
    positions = positions.to(torch.float64)
    q = positions[..., 0]
    r = positions[..., 1]
    return torch.stack([q + 0.5 * r, r * (math.sqrt(3) / 2)], dim=-1)


def angle_to_steps(angle: int, direction: Optional[str]) -> int:
    """
    Convert a bend angle and turn sense to fold-state steps.

    Steps: 0=straight, +1=L60, -1=R60, +2=L120, -2=R120

    Args:
        angle: 0, 60 or 120 degrees
        direction: 'left', 'right', or None for a straight fold

    Returns:
        Signed step count
    """
    if angle == 0:
        return 0
    if angle not in BEND_ANGLES:
        raise ValueError(f"Invalid bend angle {angle}°. Expected 0, 60 or 120.")
    if direction not in TURN_SENSES:
        raise ValueError(f"Invalid turn sense '{direction}' for a {angle}° bend.")
    return -TURN_SENSES[direction] * BEND_ANGLES[angle]


def steps_to_angle(steps: int) -> Tuple[int, Optional[str]]:
    """
    Convert fold-state steps back to (angle, direction).

    Example:
        steps_to_angle(0)    # (0, None)
        steps_to_angle(-2)   # (120, 'right')
    """
    if not -MAX_STEPS <= steps <= MAX_STEPS:
        raise ValueError(f"steps={steps} out of valid range [-{MAX_STEPS}, {MAX_STEPS}].")
    if steps == 0:
        return 0, None
    return abs(steps) * 60, ("left" if steps > 0 else "right")


__all__ = [
    'DIRECTIONS',
    'DIRECTION_NAMES',
    'direction_vectors',
    'move',
    'neighbors',
    'bend',
    'turn_offset',
    'hex_distance',
    'hex_distance_matrix',
    'axial_to_cartesian',
    'angle_to_steps',
    'steps_to_angle',
]
