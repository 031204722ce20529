"""
Fold-transition kinetics for hex-lattice chains.

A fold transition at pivot p rotates the monomers after p about the
monomer at p. Its rate follows an Arrhenius law over two barriers:

    rate = exp(-(E_a + max(0, ΔE)) / kT)

- E_a is a rotational (kinetic) barrier, ½ · scale · I · θ², from the
  reduced moment of inertia of the two arms hinged at the pivot.
- ΔE is the thermodynamic energy change, only paid when uphill.

Since E_a is the same in both directions, k(+ΔE) / k(-ΔE) = exp(-ΔE/kT)
(detailed balance). build_transition_matrix() enumerates every reachable
single-pivot re-fold of a chain and returns the weighted candidate list
for an external Monte Carlo selector; it never draws or applies one.
"""

import math
import numpy as np
import torch
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .chain import Chain, FOLD_STATES
from .config import (
    DEFAULT_CONFIG,
    STAY_COMPLEMENT,
    STAY_ZERO,
    SimulationConfig,
    StayPolicy,
)
from .core import axial_to_cartesian, steps_to_angle
from .energy import full_energy_batch
from .layout import chain_positions
from .monomers import masses


# =============================================================================
# Moment of inertia and barriers
# =============================================================================

def _arm_moments(
    positions: torch.Tensor,
    weights: torch.Tensor,
    pivot: int,
) -> tuple[float, float]:
    """I_left, I_right about the pivot monomer using squared hex distance."""
    delta = positions - positions[pivot]
    dq, dr = delta[:, 0], delta[:, 1]
    dist = (dq.abs() + dr.abs() + (dq + dr).abs()) // 2
    moments = weights * dist.to(torch.float64) ** 2

    return float(moments[:pivot].sum()), float(moments[pivot + 1:].sum())


def _pivot_moment(positions: torch.Tensor, weights: torch.Tensor, pivot: int) -> float:
    I_left, I_right = _arm_moments(positions, weights, pivot)
    if I_left > 0 and I_right > 0:
        return I_left * I_right / (I_left + I_right)
    return I_left + I_right


def _rotational_barrier(moment: float, angle_change: float, config: SimulationConfig) -> float:
    omega = math.radians(angle_change)
    return 0.5 * config.rotational_scale * moment * omega * omega


def _moment_about_com(positions: torch.Tensor, weights: torch.Tensor) -> float:
    xy = axial_to_cartesian(positions)                         # (N, 2)
    com = (weights.unsqueeze(-1) * xy).sum(dim=0) / weights.sum()
    return float((weights * ((xy - com) ** 2).sum(dim=-1)).sum())


def moment_of_inertia(
    chain: Chain,
    pivot: Optional[int] = None,
    config: Optional[SimulationConfig] = None,
) -> float:
    """
    Reduced moment of inertia for a fold at the given pivot.

    When a fold occurs, both arms of the chain rotate in opposite senses
    in the centre-of-mass frame. With angular momentum conserved and a
    relative rotation Δθ, the kinetic energy is

        E = ½ Δθ² × (I_left × I_right) / (I_left + I_right)

    the rotational analog of a reduced mass. I_left sums m·d² over the
    monomers strictly before the pivot (d = hex distance to the pivot),
    I_right over those strictly after it. If one arm has no moment the
    other arm's moment is returned; a single monomer gives 0.

    Args:
        chain: Chain in its current fold states
        pivot: Pivot index; None computes the moment about the centre of mass
        config: Provides the tensor device

    Returns:
        Moment of inertia in Da·hex²
    """
    config = config or DEFAULT_CONFIG
    device = config.torch_device
    positions = chain_positions(chain.fold_tensor(device))
    weights = masses(chain.sequence, device)

    if pivot is None:
        return _moment_about_com(positions, weights)

    if not 0 <= pivot < len(chain):
        raise ValueError(f"pivot={pivot} out of range [0, {len(chain)}).")

    return _pivot_moment(positions, weights, pivot)


def kinetic_barrier(
    chain: Chain,
    angle_change: float,
    pivot: Optional[int] = None,
    config: Optional[SimulationConfig] = None,
) -> float:
    """
    Rotational activation energy of a fold transition.

        E_a = ½ × rotational_scale × I × ω²

    with ω the angle change in radians per unit time, so the barrier
    scales with the square of the angle.

    Args:
        chain: Chain in its current fold states
        angle_change: Angle change in degrees
        pivot: Position where the bend occurs
        config: Supplies rotational_scale

    Returns:
        Activation energy in eV
    """
    config = config or DEFAULT_CONFIG
    return _rotational_barrier(moment_of_inertia(chain, pivot, config), angle_change, config)


def log_transition_rate(
    barrier: float | np.ndarray,
    delta_e: float | np.ndarray,
    temperature: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
) -> float | np.ndarray:
    """
    Natural log of transition_rate(), -(E_a + max(0, ΔE)) / kT.

    Stays finite and ordered where the rate itself underflows to 0.0.
    """
    config = config or DEFAULT_CONFIG
    temperature = config.temperature if temperature is None else temperature
    kT = config.thermal_energy(temperature)

    log_rate = -(np.asarray(barrier) + np.maximum(0.0, delta_e)) / kT
    return float(log_rate) if np.ndim(log_rate) == 0 else log_rate


def transition_rate(
    barrier: float | np.ndarray,
    delta_e: float | np.ndarray,
    temperature: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
) -> float | np.ndarray:
    """
    Transition rate from the current state to a target state.

        rate = exp(-(E_a + max(0, ΔE)) / kT)

    Downhill moves only pay the kinetic barrier, uphill moves pay the
    energy difference on top, which makes
        rate(B, ΔE) / rate(B, -ΔE) = exp(-ΔE / kT).

    Note:
        float64 underflows to 0.0 once the exponent drops below about
        -745, i.e. a total barrier above ~19 eV at 300 K. The barrier
        grows with the arm moments, so long chains folded near their
        middle reach this with the default rotational_scale. Use
        log_transition_rate() (or Transition.log_rate) to compare such
        rates.

    Args:
        barrier: Kinetic barrier E_a in eV
        delta_e: Energy change E_final - E_initial in eV
        temperature: Temperature in K (config.temperature if None)
        config: Supplies the Boltzmann constant

    Returns:
        Rate (probability per unit time), same shape as the inputs
    """
    rate = np.exp(log_transition_rate(barrier, delta_e, temperature, config))
    return float(rate) if np.ndim(rate) == 0 else rate


# =============================================================================
# Transition matrix
# =============================================================================

@dataclass(frozen=True)
class Transition:
    """
    One candidate re-fold of a chain.

    Attributes:
        position:     Pivot index whose fold state changes
        from_steps:   Current fold state
        to_steps:     Candidate fold state
        rate:         Transition rate (>= 0; 0.0 only on float underflow)
        angle:        Bend angle of the candidate state in degrees
        direction:    'left', 'right' or None (straight)
        angle_change: |to - from| × 60°
        barrier:      Kinetic barrier E_a in eV
        delta_e:      E_candidate - E_current in eV
        log_rate:     ln(rate), finite even when rate underflows
    """
    position: int
    from_steps: int
    to_steps: int
    rate: float
    angle: int = 0
    direction: Optional[str] = None
    angle_change: int = 0
    barrier: float = 0.0
    delta_e: float = 0.0
    log_rate: float = 0.0


def _complement_stay(total_rate: float) -> float:
    return max(0.0, 1.0 - total_rate)


def _zero_stay(total_rate: float) -> float:
    return 0.0


STAY_POLICIES: dict[str, Callable[[float], float]] = {
    STAY_COMPLEMENT: _complement_stay,
    STAY_ZERO: _zero_stay,
}


def stay_rate(total_rate: float, policy: StayPolicy = STAY_COMPLEMENT) -> float:
    """
    Residual "no transition" weight for a given total rate.

    Args:
        total_rate: Sum of all candidate rates
        policy: 'complement' (max(0, 1 - total)), 'zero', or a callable

    Returns:
        Non-negative, finite stay weight
    """
    if isinstance(policy, str):
        if policy not in STAY_POLICIES:
            raise ValueError(
                f"Unknown stay policy '{policy}'. Expected one of {sorted(STAY_POLICIES)} "
                f"or a callable."
            )
        policy = STAY_POLICIES[policy]

    weight = float(policy(total_rate))
    if not math.isfinite(weight) or weight < 0:
        raise ValueError(f"stay policy returned {weight}; expected a finite value >= 0")
    return weight


@dataclass(frozen=True)
class TransitionMatrix:
    """
    All single-pivot transitions out of one chain state.

    Attributes:
        chain:        The state the transitions start from
        transitions:  Candidate transitions (overlapping targets excluded)
        total_rate:   Sum of candidate rates
        stay_rate:    Residual weight of staying put
        temperature:  Temperature in K
        energy:       Energy of the current state in eV
    """
    chain: Chain
    transitions: List[Transition] = field(default_factory=list)
    total_rate: float = 0.0
    stay_rate: float = 1.0
    temperature: float = 300.0
    energy: float = 0.0

    def __len__(self) -> int:
        return len(self.transitions)

    def selection_weights(self) -> np.ndarray:
        """
        Normalised selection probabilities: candidates in order, then stay.

        Returns:
            Array of length len(transitions) + 1 summing to 1
        """
        weights = np.array([t.rate for t in self.transitions] + [self.stay_rate])
        norm = weights.sum()
        if norm <= 0:
            # No candidates and a zero stay weight: staying is the only option
            weights[-1] = 1.0
            return weights
        return weights / norm

    def target(self, transition: Transition) -> Chain:
        """Chain reached by applying a transition."""
        return self.chain.with_fold(transition.position, transition.to_steps)

    def by_position(self, position: int) -> List[Transition]:
        return [t for t in self.transitions if t.position == position]


def _candidate_steps(current: int, max_step_change: int) -> List[int]:
    return [
        s for s in FOLD_STATES
        if s != current and abs(s - current) <= max_step_change
    ]


def build_transition_matrix(
    chain: Chain,
    temperature: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
    stay_policy: Optional[StayPolicy] = None,
) -> TransitionMatrix:
    """
    Build every single-bend transition out of the current chain state.

    For each pivot 1..N-2, each fold state other than the current one and
    within max_step_change steps becomes a candidate. All candidates are
    laid out and scored as independent rows of one batch, evaluated in
    config.batch_size chunks; overlapping candidates are dropped (not
    given a zero rate). Pivot moments come from the current layout once
    per pivot.

    If the current state itself overlaps its energy is +inf and every
    valid candidate counts as downhill.

    Args:
        chain: Current chain state (not modified)
        temperature: Temperature in K (config.temperature if None)
        config: Energy constants and enumeration policy
        stay_policy: Overrides config.stay_policy

    Returns:
        TransitionMatrix with candidates, total_rate and stay_rate
    """
    config = config or DEFAULT_CONFIG
    temperature = config.temperature if temperature is None else temperature
    policy = config.stay_policy if stay_policy is None else stay_policy
    device = config.torch_device

    current_folds = chain.fold_tensor(device)

    # Enumerate candidates as (pivot, from, to) and their fold-state rows
    candidates = []
    for pos in chain.pivots:
        current = chain.fold_states[pos]
        for target in _candidate_steps(current, config.max_step_change):
            candidates.append((pos, current, target))

    rows = current_folds.unsqueeze(0).repeat(len(candidates) + 1, 1)   # (K+1, N)
    for k, (pos, _, target) in enumerate(candidates, start=1):
        rows[k, pos] = target

    energies = full_energy_batch(chain.sequence, rows, config).cpu().numpy()
    current_energy = float(energies[0])

    # Pivot moments only depend on the current layout
    positions = chain_positions(current_folds)
    weights = masses(chain.sequence, device)
    moments = {pos: _pivot_moment(positions, weights, pos) for pos in chain.pivots}

    transitions: List[Transition] = []
    for (pos, current, target), energy in zip(candidates, energies[1:]):
        if not math.isfinite(energy):
            continue

        angle_change = abs(target - current) * 60
        barrier = _rotational_barrier(moments[pos], angle_change, config)
        delta_e = float(energy) - current_energy
        log_rate = log_transition_rate(barrier, delta_e, temperature, config)

        angle, direction = steps_to_angle(target)
        transitions.append(Transition(
            position=pos,
            from_steps=current,
            to_steps=target,
            rate=math.exp(log_rate),
            angle=angle,
            direction=direction,
            angle_change=angle_change,
            barrier=barrier,
            delta_e=delta_e,
            log_rate=log_rate,
        ))

    total = float(sum(t.rate for t in transitions))

    return TransitionMatrix(
        chain=chain,
        transitions=transitions,
        total_rate=total,
        stay_rate=stay_rate(total, policy),
        temperature=temperature,
        energy=current_energy,
    )


__all__ = [
    'moment_of_inertia',
    'kinetic_barrier',
    'log_transition_rate',
    'transition_rate',
    'Transition',
    'TransitionMatrix',
    'STAY_POLICIES',
    'stay_rate',
    'build_transition_matrix',
]
