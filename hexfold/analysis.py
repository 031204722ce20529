"""
Analysis tools for the fold-transition model.

This module provides the KineticsAnalyzer class, which treats every
conformation of a short chain as a state of a continuous-time Markov
chain whose rates come from build_transition_matrix(), and computes:
- The sparse rate matrix and its generator
- The reachable component of the state space
- The stationary distribution of the generator
- The Boltzmann distribution exp(-E/kT) over the same states
- The detailed-balance residual max |π_i k_ij - π_j k_ji|

With the Arrhenius rate law used here the stationary distribution and
the Boltzmann distribution coincide, which makes the analyzer a check on
the energy and kinetics layers together.
"""

import itertools
import time
import numpy as np
from scipy import sparse
from scipy.linalg import solve
from scipy.sparse.csgraph import connected_components
from typing import Dict, List, Optional, Sequence, Tuple

from .chain import Chain, FOLD_STATES
from .config import DEFAULT_CONFIG, SimulationConfig
from .energy import full_energy_batch
from .kinetics import TransitionMatrix, build_transition_matrix


class KineticsAnalyzer:
    """
    Exhaustive state-space analysis of one monomer sequence.

    States are all fold-state assignments of the interior positions
    (ends fixed at 0) whose layout does not overlap. The state space grows
    as 5^(N-2), so it is capped by max_states.

    Attributes:
        sequence:    Monomer type codes
        temperature: Temperature in K
        states:      Non-overlapping chains, in enumeration order
        energies:    Energy per state in eV, shape (M,)
    """

    def __init__(
        self,
        sequence: Sequence[str] | str,
        config: Optional[SimulationConfig] = None,
        temperature: Optional[float] = None,
        max_states: int = 5 ** 6,
        verbose: bool = False,
    ):
        """
        Args:
            sequence:    Type codes, or a sequence string ("STR-POS-FLX-NEG")
            config:      Energy constants and enumeration policy
            temperature: Temperature in K (config.temperature if None)
            max_states:  Refuse to enumerate more fold-state assignments
            verbose:     Print progress while building the rate matrix

        Raises:
            ValueError: if the state space exceeds max_states
        """
        if isinstance(sequence, str):
            sequence = Chain.parse(sequence).sequence
        self.sequence: Tuple[str, ...] = tuple(sequence)
        self.config = config or DEFAULT_CONFIG
        self.temperature = self.config.temperature if temperature is None else temperature
        self.verbose = verbose

        n_interior = max(len(self.sequence) - 2, 0)
        n_assignments = len(FOLD_STATES) ** n_interior
        if n_assignments > max_states:
            raise ValueError(
                f"State space of {n_assignments} fold assignments exceeds "
                f"max_states={max_states} (chain length {len(self.sequence)})."
            )

        self.states, self.energies = self._enumerate_states()
        self._index: Dict[Tuple[int, ...], int] = {
            s.fold_states: i for i, s in enumerate(self.states)
        }
        self._rates: Optional[sparse.csr_matrix] = None

    # ------------------------------------------------------------------
    # State space
    # ------------------------------------------------------------------

    def _enumerate_states(self) -> Tuple[List[Chain], np.ndarray]:
        N = len(self.sequence)
        n_interior = max(N - 2, 0)

        assignments = []
        for interior in itertools.product(FOLD_STATES, repeat=n_interior):
            folds = (0,) + interior + (0,) if N >= 2 else (0,)
            assignments.append(folds)

        energies = full_energy_batch(
            self.sequence, np.array(assignments, dtype=np.int64), self.config
        ).cpu().numpy()

        valid = np.isfinite(energies)
        states = [Chain(self.sequence, a) for a, ok in zip(assignments, valid) if ok]
        return states, energies[valid]

    @property
    def n_states(self) -> int:
        return len(self.states)

    def index_of(self, chain: Chain) -> int:
        """State index of a chain, matched on its fold states."""
        folds = list(chain.fold_states)
        if len(folds) >= 2:
            folds[0] = folds[-1] = 0
        try:
            return self._index[tuple(folds)]
        except KeyError:
            raise ValueError(f"{chain} is not a valid state of this analyzer") from None

    # ------------------------------------------------------------------
    # Rates
    # ------------------------------------------------------------------

    def transition_matrix(self, i: int) -> TransitionMatrix:
        """Transition candidates out of state i."""
        return build_transition_matrix(self.states[i], self.temperature, self.config)

    def rate_matrix(self) -> sparse.csr_matrix:
        """
        Sparse matrix of transition rates k_ij between states.

        Returns:
            CSR matrix, shape (M, M), zero diagonal
        """
        if self._rates is not None:
            return self._rates

        rows, cols, vals = [], [], []
        if self.verbose:
            print(f"⚙️  Building rate matrix for {self.n_states} states...")
            start_time = time.perf_counter()

        for i in range(self.n_states):
            matrix = self.transition_matrix(i)
            for t in matrix.transitions:
                rows.append(i)
                cols.append(self.index_of(matrix.target(t)))
                vals.append(t.rate)

            if self.verbose and i % 25 == 0:
                elapsed = time.perf_counter() - start_time
                print(f"\r  Progress: {i + 1}/{self.n_states} | Time: {elapsed:.2f}s", end="")

        if self.verbose:
            elapsed = time.perf_counter() - start_time
            print(f"\n✅ Rate matrix complete in {elapsed:.2f}s ({len(vals)} transitions)")

        self._rates = sparse.csr_matrix(
            (vals, (rows, cols)), shape=(self.n_states, self.n_states)
        )
        return self._rates

    def generator(self) -> sparse.csr_matrix:
        """CTMC generator Q = K - diag(row sums of K)."""
        rates = self.rate_matrix()
        out_rates = np.asarray(rates.sum(axis=1)).ravel()
        return (rates - sparse.diags(out_rates)).tocsr()

    def reachable_states(self, start: Optional[Chain] = None) -> np.ndarray:
        """
        Indices of states in the same connected component as start.

        Args:
            start: Starting chain (the all-straight chain if None)
        """
        start = start or Chain(self.sequence)
        _, labels = connected_components(self.rate_matrix(), directed=False)
        return np.flatnonzero(labels == labels[self.index_of(start)])

    # ------------------------------------------------------------------
    # Distributions
    # ------------------------------------------------------------------

    def boltzmann_distribution(self, states: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Normalised exp(-E/kT) over the given (default: reachable) states.
        """
        states = self.reachable_states() if states is None else states
        kT = self.config.thermal_energy(self.temperature)
        energies = self.energies[states]
        weights = np.exp(-(energies - energies.min()) / kT)
        return weights / weights.sum()

    def stationary_distribution(self, states: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Stationary distribution π of the generator, π Q = 0.

        Computed on the given (default: reachable) states, where the
        generator restricted to one connected component has a
        one-dimensional null space. One balance equation is replaced by
        the normalisation Σπ = 1 so the system has a unique solution.
        """
        states = self.reachable_states() if states is None else states
        Q = self.generator()[states][:, states].toarray()
        M = len(states)
        if M == 1:
            return np.ones(1)

        A = Q.T.copy()
        A[-1, :] = 1.0
        b = np.zeros(M)
        b[-1] = 1.0
        pi = solve(A, b)
        return np.clip(pi, 0.0, None) / np.clip(pi, 0.0, None).sum()

    def detailed_balance_residual(self, states: Optional[np.ndarray] = None) -> float:
        """
        Largest probability-flux imbalance max |π_i k_ij - π_j k_ji|.

        Uses the Boltzmann distribution as π.
        """
        states = self.reachable_states() if states is None else states
        pi = self.boltzmann_distribution(states)
        K = self.rate_matrix()[states][:, states].toarray()
        flux = pi[:, None] * K
        return float(np.abs(flux - flux.T).max()) if len(states) else 0.0

    def summary(self) -> Dict[str, float]:
        """Headline numbers of the analysis."""
        states = self.reachable_states()
        pi = self.stationary_distribution(states)
        boltzmann = self.boltzmann_distribution(states)
        ground = states[np.argmin(self.energies[states])]
        return {
            "n_states": float(self.n_states),
            "n_reachable": float(len(states)),
            "ground_energy": float(self.energies[ground]),
            "ground_probability": float(pi[np.argmin(self.energies[states])]),
            "max_boltzmann_deviation": float(np.abs(pi - boltzmann).max()),
            "detailed_balance_residual": self.detailed_balance_residual(states),
        }


__all__ = ['KineticsAnalyzer']
