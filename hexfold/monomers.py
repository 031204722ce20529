"""
Monomer catalogue for hex-lattice chains.

Each monomer type has independent static properties:
- Folding preference (straight, left/right 60°/120°, or flexible)
- Charge class (+1, -1, none)
- Hydropathy class (hydrophobic, hydrophilic, neutral)
- Mass in Daltons (drives moments of inertia and kinetic barriers)

The catalogue is a closed table built once at import time and exposed
read-only. Codes that are not in the table are permitted everywhere:
they contribute zero to every energy term and weigh DEFAULT_MASS.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

import torch


DEFAULT_MASS = 100.0  # Da, used for unknown codes


class ChargeClass(IntEnum):
    """Elementary charge carried by a monomer."""
    NONE = 0
    POSITIVE = 1
    NEGATIVE = -1


class Hydropathy(Enum):
    """Solvent preference of a monomer."""
    NEUTRAL = "neutral"
    HYDROPHOBIC = "hydrophobic"
    HYDROPHILIC = "hydrophilic"


@dataclass(frozen=True)
class MonomerType:
    """
    Static physical attributes of one monomer type.

    Attributes:
        code: Type code used in sequences (e.g. "L60", "A")
        name: Human-readable name
        mass: Mass in Daltons
        charge: Charge class
        hydropathy: Hydropathy class
        preferred_steps: Preferred fold state in steps, None if flexible
        description: Short description
    """
    code: str
    name: str
    mass: float
    charge: ChargeClass = ChargeClass.NONE
    hydropathy: Hydropathy = Hydropathy.NEUTRAL
    preferred_steps: Optional[int] = None
    description: str = ""

    @property
    def flexible(self) -> bool:
        """True when the monomer has no single preferred fold state."""
        return self.preferred_steps is None


def _table(*entries: MonomerType) -> Mapping[str, MonomerType]:
    return MappingProxyType({m.code: m for m in entries})


AMINO_ACIDS = _table(
    # Structural: control folding geometry
    MonomerType("STR", "Straight", 89.0, preferred_steps=0,
                description="Prefers straight/no bend"),
    MonomerType("L60", "Left-60", 115.0, preferred_steps=1,
                description="Prefers 60° left bend"),
    MonomerType("R60", "Right-60", 115.0, preferred_steps=-1,
                description="Prefers 60° right bend"),
    MonomerType("L12", "Left-120", 131.0, preferred_steps=2,
                description="Prefers 120° left bend (sharp turn)"),
    MonomerType("R12", "Right-120", 131.0, preferred_steps=-2,
                description="Prefers 120° right bend (sharp turn)"),
    MonomerType("FLX", "Flexible", 75.0,
                description="Flexible, no preference, low energy barriers"),

    # Charged: electrostatic interactions (charged = hydrophilic)
    MonomerType("POS", "Positive", 146.0, ChargeClass.POSITIVE, Hydropathy.HYDROPHILIC,
                description="Positively charged, attracts negative charges"),
    MonomerType("NEG", "Negative", 133.0, ChargeClass.NEGATIVE, Hydropathy.HYDROPHILIC,
                description="Negatively charged, attracts positive charges"),

    # Hydropathy
    MonomerType("PHO", "Hydrophobic", 149.0, hydropathy=Hydropathy.HYDROPHOBIC,
                description="Hydrophobic, wants to be buried in the core"),
    MonomerType("PHI", "Hydrophilic", 132.0, hydropathy=Hydropathy.HYDROPHILIC,
                description="Hydrophilic, wants to be on the surface"),
)

# Nucleotide residue masses (monophosphate, Da); bases are neutral and flexible
NUCLEOTIDES = _table(
    MonomerType("A", "Adenine", 313.2, description="Purine"),
    MonomerType("C", "Cytosine", 289.2, description="Pyrimidine"),
    MonomerType("G", "Guanine", 329.2, description="Purine"),
    MonomerType("T", "Thymine", 304.2, description="Pyrimidine (DNA)"),
    MonomerType("U", "Uracil", 306.2, description="Pyrimidine (RNA)"),
)

CATALOGUE: Mapping[str, MonomerType] = MappingProxyType({**AMINO_ACIDS, **NUCLEOTIDES})


def lookup(code: str) -> Optional[MonomerType]:
    """Return the catalogue entry for a code, or None if unknown."""
    return CATALOGUE.get(code)


def mass_of(code: str) -> float:
    monomer = CATALOGUE.get(code)
    return monomer.mass if monomer else DEFAULT_MASS


def charge_of(code: str) -> int:
    monomer = CATALOGUE.get(code)
    return int(monomer.charge) if monomer else 0


def hydropathy_of(code: str) -> Hydropathy:
    monomer = CATALOGUE.get(code)
    return monomer.hydropathy if monomer else Hydropathy.NEUTRAL


def preferred_steps_of(code: str) -> Optional[int]:
    monomer = CATALOGUE.get(code)
    return monomer.preferred_steps if monomer else None


def fold_energy(code: str, steps: int, angular_penalty: float = 0.1) -> float:
    """
    Folding-preference energy of one monomer at a given fold state.

    Energy = angular_penalty × |steps - preferred_steps|

    Args:
        code: Monomer type code
        steps: Current fold state (0=straight, +1=L60, -1=R60, +2=L120, -2=R120)
        angular_penalty: eV per step of mismatch

    Returns:
        Energy in eV; 0 for flexible and unknown monomers
    """
    preferred = preferred_steps_of(code)
    if preferred is None:
        return 0.0
    return angular_penalty * abs(steps - preferred)


def masses(sequence: Sequence[str], device: torch.device | str = "cpu") -> torch.Tensor:
    """Per-monomer masses, shape (N,), float64."""
    return torch.tensor([mass_of(c) for c in sequence], dtype=torch.float64, device=device)


def charges(sequence: Sequence[str], device: torch.device | str = "cpu") -> torch.Tensor:
    """Per-monomer charges, shape (N,), float64."""
    return torch.tensor([charge_of(c) for c in sequence], dtype=torch.float64, device=device)


__all__ = [
    'DEFAULT_MASS',
    'ChargeClass',
    'Hydropathy',
    'MonomerType',
    'AMINO_ACIDS',
    'NUCLEOTIDES',
    'CATALOGUE',
    'lookup',
    'mass_of',
    'charge_of',
    'hydropathy_of',
    'preferred_steps_of',
    'fold_energy',
    'masses',
    'charges',
]
