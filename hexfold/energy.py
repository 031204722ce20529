"""
Energy model for hex-lattice chains.

All energies are in eV. The total energy is the sum of four independent
terms evaluated on lattice positions:

- Electrostatic: 2D Coulomb (logarithmic) potential between charges,
      E = -k · q1 · q2 · ln(d)
  so adjacent pairs (d = 1) contribute 0, opposite charges gain energy
  as they separate and like charges lose it.
- Hydrophobic: burial/exposure weights from the number of occupied
  lattice neighbors (exposure = 1 - neighbors/6).
- Folding preference: angular_penalty per 60° step away from a
  monomer's preferred bend.
- Steric: steep repulsion between non-bonded monomers at or below the
  clash distance.

Every term accepts positions of shape (N, 2) or a batch (K, N, 2) and
returns a scalar tensor or a (K,) tensor. Unknown type codes contribute
zero to every term.
"""

import math
import torch
from dataclasses import dataclass
from typing import Optional, Sequence

from .chain import Chain
from .config import DEFAULT_CONFIG, SimulationConfig
from .core import hex_distance_matrix
from .layout import chain_positions, has_overlap
from .monomers import Hydropathy, charges, hydropathy_of, preferred_steps_of


@dataclass(frozen=True)
class EnergyBreakdown:
    """
    Per-term energies of one conformation.

    `total` is +inf exactly when the layout overlaps; the four terms are
    still reported for the (overlapping) positions.
    """
    electrostatic: float
    hydrophobic: float
    folding: float
    steric: float
    overlap: bool = False

    @property
    def total(self) -> float:
        if self.overlap:
            return math.inf
        return self.electrostatic + self.hydrophobic + self.folding + self.steric

    def as_dict(self) -> dict:
        return {
            "electrostatic": self.electrostatic,
            "hydrophobic": self.hydrophobic,
            "folding": self.folding,
            "steric": self.steric,
            "total": self.total,
        }


def _as_positions(positions, device: torch.device) -> torch.Tensor:
    positions = torch.as_tensor(positions, device=device)
    if positions.is_floating_point():
        return positions.to(torch.float64)
    return positions.to(torch.int64)


def _upper_pairs(N: int, device: torch.device, offset: int = 1) -> torch.Tensor:
    """Bool mask of pairs (i, j) with j >= i + offset, shape (N, N)."""
    return torch.triu(torch.ones((N, N), dtype=torch.bool, device=device), diagonal=offset)


# ----------------------------------------------------------------------
# Energy terms
# ----------------------------------------------------------------------

def electrostatic_energy(
    sequence: Sequence[str],
    positions,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """
    Electrostatic energy from charged monomers.

    In 2D the solution to Poisson's equation is logarithmic:
        E = -k * q1 * q2 * ln(r)

    For opposite charges (q1*q2 = -1):  E = k * ln(r), 0 at r=1, rising
    with separation, so minimizing energy pulls them together. Like
    charges mirror the sign. Coincident pairs (r=0) are skipped.

    Args:
        sequence: Monomer type codes, length N
        positions: Axial coordinates, shape (N, 2) or (K, N, 2)
        config: Energy constants

    Returns:
        Energy in eV, scalar tensor or shape (K,)
    """
    config = config or DEFAULT_CONFIG
    device = config.torch_device
    positions = _as_positions(positions, device)
    N = len(sequence)

    q = charges(sequence, device)
    qq = q.unsqueeze(-1) * q.unsqueeze(-2)                       # (N, N)
    dist = hex_distance_matrix(positions).to(torch.float64)      # (..., N, N)

    pairs = _upper_pairs(N, device) & (qq != 0) & (dist > 0)
    log_r = torch.log(torch.where(pairs, dist, torch.ones_like(dist)))

    return (-config.coulomb_constant * qq * log_r * pairs).sum(dim=(-2, -1))


def solvent_exposure(positions, config: Optional[SimulationConfig] = None) -> torch.Tensor:
    """
    Solvent exposure per monomer: 0 = fully buried, 1 = fully exposed.

    Counts other monomers within contact_radius; max_neighbors (6 on the
    hex lattice) contacts means full burial.

    Returns:
        Exposure, float64, shape (..., N)
    """
    config = config or DEFAULT_CONFIG
    positions = _as_positions(positions, config.torch_device)
    dist = hex_distance_matrix(positions)
    N = dist.shape[-1]

    off_diagonal = ~torch.eye(N, dtype=torch.bool, device=dist.device)
    contacts = ((dist <= config.contact_radius) & off_diagonal).sum(dim=-1)
    burial = torch.clamp(contacts.to(torch.float64) / config.max_neighbors, max=1.0)
    return 1.0 - burial


def hydrophobic_energy(
    sequence: Sequence[str],
    positions,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """
    Hydrophobic effect energy.

    Hydrophobic monomers want to be buried (low exposure), hydrophilic
    monomers want to be exposed:
        hydrophobic: E = W_exp * exposure + W_bury * (1 - exposure)
        hydrophilic: same form with the mirrored weights
    Neutral and unknown monomers contribute 0.
    """
    config = config or DEFAULT_CONFIG
    device = config.torch_device

    w_exposed = []
    w_buried = []
    for code in sequence:
        kind = hydropathy_of(code)
        if kind is Hydropathy.HYDROPHOBIC:
            w_exposed.append(config.hydrophobic_exposure)
            w_buried.append(config.hydrophobic_burial)
        elif kind is Hydropathy.HYDROPHILIC:
            w_exposed.append(config.hydrophilic_exposure)
            w_buried.append(config.hydrophilic_burial)
        else:
            w_exposed.append(0.0)
            w_buried.append(0.0)

    w_exposed = torch.tensor(w_exposed, dtype=torch.float64, device=device)
    w_buried = torch.tensor(w_buried, dtype=torch.float64, device=device)

    exposure = solvent_exposure(positions, config)
    return (w_exposed * exposure + w_buried * (1.0 - exposure)).sum(dim=-1)


def folding_energy(
    sequence: Sequence[str],
    fold_states,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """
    Energy from folding preferences (angular distance model).

    Energy = angular_penalty × |steps - preferred_steps| summed over the
    interior monomers (the first and last cannot bend). Flexible and
    unknown monomers contribute 0.

    Args:
        sequence: Monomer type codes, length N
        fold_states: Fold states, shape (N,) or (K, N)

    Returns:
        Energy in eV, scalar tensor or shape (K,)
    """
    config = config or DEFAULT_CONFIG
    device = config.torch_device
    N = len(sequence)

    preferred = [preferred_steps_of(code) for code in sequence]
    mask = torch.tensor(
        [p is not None and 0 < i < N - 1 for i, p in enumerate(preferred)],
        dtype=torch.float64, device=device,
    )
    target = torch.tensor(
        [p if p is not None else 0 for p in preferred],
        dtype=torch.float64, device=device,
    )

    steps = torch.as_tensor(fold_states, device=device).to(torch.float64)
    mismatch = (steps - target).abs() * mask
    return config.angular_penalty * mismatch.sum(dim=-1)


def steric_energy(
    sequence: Sequence[str],
    positions,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """
    Steric clash energy between non-bonded monomers.

    Pairs at least two apart in sequence and within clash_distance add
        clash_penalty * exp(-r / clash_decay)
    Bonded neighbors (i, i+1) are always exempt.
    """
    config = config or DEFAULT_CONFIG
    device = config.torch_device
    positions = _as_positions(positions, device)
    N = len(sequence)

    dist = hex_distance_matrix(positions).to(torch.float64)
    clash = _upper_pairs(N, device, offset=2) & (dist <= config.clash_distance)
    penalty = config.clash_penalty * torch.exp(-dist / config.clash_decay)

    return (penalty * clash).sum(dim=(-2, -1))


# ----------------------------------------------------------------------
# Totals
# ----------------------------------------------------------------------

def total_energy(
    sequence: Sequence[str],
    positions,
    fold_states,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """Sum of the four terms for given positions (no overlap check)."""
    return (
        electrostatic_energy(sequence, positions, config)
        + hydrophobic_energy(sequence, positions, config)
        + folding_energy(sequence, fold_states, config)
        + steric_energy(sequence, positions, config)
    )


def full_energy_batch(
    sequence: Sequence[str],
    fold_states: torch.Tensor,
    config: Optional[SimulationConfig] = None,
) -> torch.Tensor:
    """
    Total energy of many conformations of one sequence.

    Each row of fold_states is laid out independently; rows whose layout
    overlaps get +inf. Rows are evaluated config.batch_size at a time, so
    peak memory is O(batch_size · N²) rather than O(K · N²).

    Args:
        sequence: Monomer type codes, length N
        fold_states: Fold states, shape (K, N)
        config: Energy constants, device and batch_size

    Returns:
        Energies, float64, shape (K,)
    """
    config = config or DEFAULT_CONFIG
    fold_states = torch.as_tensor(fold_states, dtype=torch.int64, device=config.torch_device)
    if fold_states.dim() == 1:
        fold_states = fold_states.unsqueeze(0)
    if fold_states.shape[-1] != len(sequence):
        raise ValueError(
            f"fold_states.shape[-1]={fold_states.shape[-1]} does not match "
            f"sequence length {len(sequence)}"
        )

    if fold_states.shape[0] == 0:
        return torch.empty(0, dtype=torch.float64, device=fold_states.device)

    chunks = []
    for rows in torch.split(fold_states, config.batch_size):
        positions = chain_positions(rows)
        energies = total_energy(sequence, positions, rows, config)
        chunks.append(
            torch.where(has_overlap(positions), torch.full_like(energies, math.inf), energies)
        )
    return torch.cat(chunks)


def energy_breakdown(chain: Chain, config: Optional[SimulationConfig] = None) -> EnergyBreakdown:
    """Per-term energies of a chain's layout."""
    config = config or DEFAULT_CONFIG
    folds = chain.fold_tensor(config.torch_device)
    positions = chain_positions(folds)

    return EnergyBreakdown(
        electrostatic=float(electrostatic_energy(chain.sequence, positions, config)),
        hydrophobic=float(hydrophobic_energy(chain.sequence, positions, config)),
        folding=float(folding_energy(chain.sequence, folds, config)),
        steric=float(steric_energy(chain.sequence, positions, config)),
        overlap=bool(has_overlap(positions)),
    )


def full_energy(chain: Chain, config: Optional[SimulationConfig] = None) -> float:
    """
    Total energy of a chain in eV.

    Returns:
        Finite energy, or +inf if the layout self-overlaps
    """
    return energy_breakdown(chain, config).total


__all__ = [
    'EnergyBreakdown',
    'electrostatic_energy',
    'solvent_exposure',
    'hydrophobic_energy',
    'folding_energy',
    'steric_energy',
    'total_energy',
    'full_energy_batch',
    'energy_breakdown',
    'full_energy',
]
