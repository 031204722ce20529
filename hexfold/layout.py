"""
Chain layout on the hex lattice.

Provides two ways of turning fold states into lattice positions:
  - HexChainBuilder : places monomers one at a time, tracking occupancy,
                      and reports the first self-overlap it meets
  - chain_positions : places whole batches of fold-state rows at once via
                      cumulative sums of direction vectors (K, N) -> (K, N, 2)

Both start at (0, 0) heading East and apply the bend of fold state i
after placing monomer i. End fold states are ignored. They produce
identical integer coordinates.
"""

import torch
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .chain import Chain
from .core import N_DIRECTIONS, direction_vectors, hex_distance_matrix, move, turn_offset


@dataclass(frozen=True)
class Overlap:
    """
    First self-overlap met while placing a chain.

    Attributes:
        index:         Monomer being placed when the collision happened
        other_index:   Monomer already holding the coordinate
        monomer:       Type code of `index`
        other_monomer: Type code of `other_index`
        position:      The shared (q, r) coordinate
    """
    index: int
    other_index: int
    monomer: str
    other_monomer: str
    position: Tuple[int, int]

    def __str__(self) -> str:
        q, r = self.position
        return (
            f"Overlap detected: element {self.index} ({self.monomer}) overlaps with "
            f"element {self.other_index} ({self.other_monomer}) at position ({q}, {r})"
        )


class OverlapError(ValueError):
    """Raised by layout() when two non-adjacent monomers share a coordinate."""

    def __init__(self, overlap: Overlap):
        super().__init__(str(overlap))
        self.overlap = overlap
        self.index = overlap.index
        self.other_index = overlap.other_index
        self.monomer = overlap.monomer
        self.other_monomer = overlap.other_monomer
        self.position = overlap.position


@dataclass(frozen=True, eq=False)
class Layout:
    """
    Lattice positions of a chain.

    Attributes:
        sequence:  Monomer type codes, length N
        positions: Axial coordinates, int64 tensor of shape (N, 2)
    """
    sequence: Tuple[str, ...]
    positions: torch.Tensor

    def __len__(self) -> int:
        return len(self.sequence)

    @property
    def coordinates(self) -> List[Tuple[int, int]]:
        """Positions as a list of (q, r) tuples."""
        return [tuple(p) for p in self.positions.tolist()]

    def items(self) -> List[Tuple[str, int, int]]:
        """(type, q, r) per monomer, in chain order."""
        return [(code, q, r) for code, (q, r) in zip(self.sequence, self.coordinates)]


class HexChainBuilder:
    """
    Incremental chain builder with occupancy tracking.

    Places monomer 0 at the origin facing East, then for each following
    monomer applies the pending bend and steps one hex forward. Every
    placed coordinate is recorded; the first coordinate that is already
    taken stops the build with an Overlap.
    """

    def __init__(self, chain: Chain):
        self.chain = chain
        self._positions: List[Tuple[int, int]] = []
        self._occupied: Dict[Tuple[int, int], int] = {}
        self._direction: int = 0
        self._monomer_index: int = 0
        self.overlap: Optional[Overlap] = None

    def init_chain(self) -> None:
        """Reset and place monomer 0 at the origin heading East."""
        self._positions = [(0, 0)]
        self._occupied = {(0, 0): 0}
        self._direction = 0
        self._monomer_index = 0
        self.overlap = None

    def _place_monomer(self, position: Tuple[int, int]) -> None:
        index = self._monomer_index + 1
        other = self._occupied.get(position)
        if other is not None:
            self.overlap = Overlap(
                index=index,
                other_index=other,
                monomer=self.chain.sequence[index],
                other_monomer=self.chain.sequence[other],
                position=position,
            )
            return
        self._occupied[position] = index
        self._positions.append(position)

    def step(self, steps: int) -> None:
        """
        Place the next monomer.

        Args:
            steps: Fold state of the current (last placed) monomer
        """
        if steps != 0:
            self._direction = (self._direction + turn_offset(steps)) % N_DIRECTIONS

        q, r = self._positions[-1]
        self._place_monomer(move(q, r, self._direction))
        if self.overlap is None:
            self._monomer_index += 1

    def run(self) -> Union[Layout, Overlap]:
        """
        Place the whole chain.

        Returns:
            Layout on success, or the first Overlap met
        """
        self.init_chain()
        folds = self.chain.fold_states
        last = len(self.chain) - 1

        for i in range(last):
            # End fold states have no segment on one side
            steps = folds[i] if 0 < i < last else 0
            self.step(steps)
            if self.overlap is not None:
                return self.overlap

        return Layout(
            sequence=self.chain.sequence,
            positions=torch.tensor(self._positions, dtype=torch.int64).view(-1, 2),
        )


def build_layout(chain: Chain) -> Union[Layout, Overlap]:
    """Lay out a chain, returning either its Layout or the first Overlap."""
    return HexChainBuilder(chain).run()


def layout(chain: Chain) -> Layout:
    """
    Lay out a chain on the hex lattice.

    Raises:
        OverlapError: two non-adjacent monomers land on the same hex
    """
    result = build_layout(chain)
    if isinstance(result, Overlap):
        raise OverlapError(result)
    return result


def chain_positions(fold_states: torch.Tensor) -> torch.Tensor:
    """
    Batched layout from fold-state rows.

    Bond i (monomer i -> i+1) points along direction
        (Σ_{0<j<=i} turn_offset(fold_j)) mod 6
    and positions are the running sum of bond vectors from the origin.

    Args:
        fold_states: Fold states, shape (N,) or (K, N), integer

    Returns:
        Axial coordinates, int64, shape (N, 2) or (K, N, 2)
    """
    fold_states = torch.as_tensor(fold_states, dtype=torch.int64)
    squeeze = fold_states.dim() == 1
    if squeeze:
        fold_states = fold_states.unsqueeze(0)

    K, N = fold_states.shape
    device = fold_states.device
    positions = torch.zeros((K, N, 2), dtype=torch.int64, device=device)
    if N == 1:
        return positions[0] if squeeze else positions

    # End fold states are ignored
    turns = turn_offset(fold_states.clone())
    turns[:, 0] = 0
    turns[:, -1] = 0

    headings = torch.remainder(torch.cumsum(turns, dim=1), N_DIRECTIONS)  # (K, N)
    bonds = direction_vectors(device)[headings[:, :-1]]                  # (K, N-1, 2)
    positions[:, 1:] = torch.cumsum(bonds, dim=1)

    return positions[0] if squeeze else positions


def has_overlap(positions: torch.Tensor) -> torch.Tensor:
    """
    Flag layouts where two distinct monomers share a coordinate.

    Args:
        positions: Axial coordinates, shape (N, 2) or (K, N, 2)

    Returns:
        Bool tensor, scalar or shape (K,)
    """
    dist = hex_distance_matrix(positions)
    N = dist.shape[-1]
    off_diagonal = ~torch.eye(N, dtype=torch.bool, device=dist.device)
    return ((dist == 0) & off_diagonal).any(dim=-1).any(dim=-1)


__all__ = [
    'Overlap',
    'OverlapError',
    'Layout',
    'HexChainBuilder',
    'build_layout',
    'layout',
    'chain_positions',
    'has_overlap',
]
