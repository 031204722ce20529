"""
Chain value type: a monomer sequence paired with its fold states.

A Chain is an immutable snapshot. Fold state i is the turn applied after
placing monomer i and before placing monomer i+1; the first and last
entries have no segment on one side and are ignored by layout and energy.
Applying a transition means building a new Chain with with_fold().
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

import torch

from .core import MAX_STEPS
from .monomers import AMINO_ACIDS


FOLD_STATES: Tuple[int, ...] = tuple(range(-MAX_STEPS, MAX_STEPS + 1))
MOLECULE_KINDS = ("protein", "dna", "rna", "other")


def _infer_kind(sequence: Sequence[str]) -> str:
    """Guess the molecule kind from its type codes."""
    if any(code == "U" for code in sequence):
        return "rna"
    if sequence[0] in ("A", "C", "G", "T"):
        return "dna"
    if sequence[0] in AMINO_ACIDS:
        return "protein"
    return "other"


def split_sequence(text: str) -> Tuple[str, ...]:
    """
    Split a sequence string into type codes.

    "STR-L60-FLX" -> ('STR', 'L60', 'FLX');  "ACGU" -> ('A', 'C', 'G', 'U')
    """
    return tuple(text.split("-")) if "-" in text else tuple(text)


@dataclass(frozen=True)
class Chain:
    """
    Linear chain of typed monomers with one fold state per monomer.

    Attributes:
        sequence: Monomer type codes, length N >= 1
        fold_states: Fold states in steps (-2..2), length N; all 0 if omitted
        kind: 'protein', 'dna', 'rna' or 'other'; inferred if omitted

    Raises:
        ValueError: empty sequence, length mismatch, fold state out of range
    """
    sequence: Tuple[str, ...]
    fold_states: Optional[Tuple[int, ...]] = None
    kind: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        sequence = tuple(self.sequence)
        if len(sequence) == 0:
            raise ValueError("Chain sequence must be non-empty")

        if self.fold_states is None:
            fold_states = (0,) * len(sequence)
        else:
            fold_states = tuple(self.fold_states)
            for i, steps in enumerate(fold_states):
                if int(steps) != steps:
                    raise ValueError(f"fold state {steps!r} at position {i} is not an integer")
            fold_states = tuple(int(s) for s in fold_states)

        if len(fold_states) != len(sequence):
            raise ValueError(
                f"fold_states length {len(fold_states)} does not match "
                f"sequence length {len(sequence)}"
            )
        for i, steps in enumerate(fold_states):
            if steps not in FOLD_STATES:
                raise ValueError(
                    f"fold state {steps} at position {i} out of valid range "
                    f"[{FOLD_STATES[0]}, {FOLD_STATES[-1]}]"
                )

        kind = self.kind if self.kind is not None else _infer_kind(sequence)
        if kind not in MOLECULE_KINDS:
            raise ValueError(f"Unknown molecule kind '{kind}'. Expected one of {MOLECULE_KINDS}.")

        object.__setattr__(self, "sequence", sequence)
        object.__setattr__(self, "fold_states", fold_states)
        object.__setattr__(self, "kind", kind)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def parse(
        cls,
        text: str,
        fold_states: Optional[Iterable[int]] = None,
        kind: Optional[str] = None,
    ) -> "Chain":
        """
        Build a chain from a sequence string.

        Example:
            Chain.parse("FLX-L60-FLX", [0, 1, 0])
        """
        folds = tuple(fold_states) if fold_states is not None else None
        return cls(split_sequence(text), folds, kind)

    @classmethod
    def protein(cls, sequence: str | Sequence[str], fold_states=None) -> "Chain":
        codes = tuple(sequence.split("-")) if isinstance(sequence, str) else tuple(sequence)
        return cls(codes, fold_states, "protein")

    @classmethod
    def dna(cls, sequence: str, fold_states=None) -> "Chain":
        return cls(split_sequence(sequence), fold_states, "dna")

    @classmethod
    def rna(cls, sequence: str, fold_states=None) -> "Chain":
        return cls(split_sequence(sequence), fold_states, "rna")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.sequence)

    @property
    def label(self) -> str:
        """Dash-joined sequence, e.g. 'STR-L60-FLX'."""
        return "-".join(self.sequence)

    @property
    def pivots(self) -> range:
        """Positions whose fold state affects the layout: 1 .. N-2."""
        return range(1, max(len(self) - 1, 1))

    def type_at(self, index: int) -> Optional[str]:
        """Type code at index, or None when out of range."""
        if not 0 <= index < len(self):
            return None
        return self.sequence[index]

    def fold_at(self, index: int) -> Optional[int]:
        """Fold state at index, or None when out of range."""
        if not 0 <= index < len(self):
            return None
        return self.fold_states[index]

    def with_fold(self, index: int, steps: int) -> "Chain":
        """
        Return a copy of this chain with one fold state replaced.

        Raises:
            ValueError: index out of range or steps outside -2..2
        """
        if not 0 <= index < len(self):
            raise ValueError(f"Invalid index: {index} (chain length {len(self)})")
        folds = list(self.fold_states)
        folds[index] = steps
        return Chain(self.sequence, tuple(folds), self.kind)

    def fold_tensor(self, device: torch.device | str = "cpu") -> torch.Tensor:
        """Fold states as an int64 tensor, shape (N,)."""
        return torch.tensor(self.fold_states, dtype=torch.int64, device=device)

    def __str__(self) -> str:
        return f"{self.label} {list(self.fold_states)}"


__all__ = ['Chain', 'FOLD_STATES', 'MOLECULE_KINDS', 'split_sequence']
