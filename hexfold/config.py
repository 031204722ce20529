"""
Configuration management for hex-lattice folding kinetics.

This module provides a centralized configuration class that holds the
energy-model constants, the thermal parameters, device allocation and
output paths shared by the layout, energy and kinetics modules.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Union
import re
import torch
import numpy as np


StayPolicy = Union[str, Callable[[float], float]]

# Named stay policies; kinetics.STAY_POLICIES maps each to its weight function
STAY_COMPLEMENT = "complement"
STAY_ZERO = "zero"
STAY_POLICY_NAMES = (STAY_COMPLEMENT, STAY_ZERO)


@dataclass
class SimulationConfig:
    """
    Central configuration for hex-lattice chain energetics and kinetics.

    This class manages:
    - Energy-model constants (all energies in eV)
    - Thermal parameters (temperature, Boltzmann constant)
    - Transition enumeration policy (step limit, stay-rate policy)
    - Hardware configuration (CPU/GPU device for batched evaluation)
    - Output paths for plots and animations

    Energy scale:
        angular_penalty = 0.1 eV per 60° step away from a preferred bend
        adjacent opposite charges sit at ln(1) = 0 on the 2D log potential
        burying a hydrophobic monomer ≈ -1.5 eV
        a 60° fold of a 4-monomer chain costs ≈ 1 kT at 300 K

    Attributes:
        temperature: Default temperature in K
        boltzmann_constant: k_B in eV/K
        angular_penalty: eV per step of fold mismatch
        rotational_scale: Converts Da·hex²·rad² to eV
        coulomb_constant: Prefactor of the 2D log potential (eV)
        hydrophobic_burial: Weight of a buried hydrophobic monomer (< 0)
        hydrophobic_exposure: Weight of an exposed hydrophobic monomer (> 0)
        hydrophilic_burial: Weight of a buried hydrophilic monomer (> 0)
        hydrophilic_exposure: Weight of an exposed hydrophilic monomer (< 0)
        contact_radius: Hex distance counted as a contact
        max_neighbors: Contacts for full burial (6 on the hex lattice)
        clash_distance: Hex distance at or below which a steric clash applies
        clash_penalty: Clash energy at zero distance (eV)
        clash_decay: Length scale of the clash exponential (hex units)
        max_step_change: Largest fold change of one transition, in steps
        stay_policy: "complement", "zero" or a callable total_rate -> weight
        device: Device for PyTorch tensors ("cpu" or "cuda")
        batch_size: Fold-state rows evaluated per chunk; bounds the (K, N, N)
                    pairwise tensors of batched energies
        output_dir: Directory for plots and GIFs
        frame_dpi: DPI resolution for animation frames
        gif_duration: Duration per frame in milliseconds
    """

    # Thermal parameters
    temperature: float = 300.0  # K, gives kT ≈ 0.026 eV
    boltzmann_constant: float = 8.617e-5  # eV/K

    # Folding preference and rotation
    angular_penalty: float = 0.1
    rotational_scale: float = 1e-4

    # Electrostatics
    coulomb_constant: float = 1.0

    # Hydropathy
    hydrophobic_burial: float = -1.5
    hydrophobic_exposure: float = 1.5
    hydrophilic_burial: float = 0.5
    hydrophilic_exposure: float = -0.5
    contact_radius: float = 1.5
    max_neighbors: int = 6

    # Steric repulsion
    clash_distance: float = 0.5
    clash_penalty: float = 100.0
    clash_decay: float = 0.1

    # Transition enumeration
    max_step_change: int = 2
    stay_policy: StayPolicy = STAY_COMPLEMENT

    # Hardware configuration
    device: str = "cpu"
    batch_size: int = 32

    # File system paths
    output_dir: Path = field(default_factory=lambda: Path("./local/outputs/plots"))

    # Visualization parameters
    frame_dpi: int = 128
    gif_duration: int = 200  # milliseconds per frame

    # Private fields (computed in __post_init__)
    _torch_device: torch.device = field(init=False, repr=False)

    def __post_init__(self):
        """Validate parameters and initialize derived properties."""
        self.output_dir = Path(self.output_dir)

        if self.temperature <= 0:
            raise ValueError(f"temperature must be positive, got {self.temperature}")
        if self.boltzmann_constant <= 0:
            raise ValueError(
                f"boltzmann_constant must be positive, got {self.boltzmann_constant}"
            )

        # Exposure must be unfavorable and burial favorable for hydrophobic
        # monomers; hydrophilic monomers use the mirrored pair.
        if not self.hydrophobic_exposure > 0 > self.hydrophobic_burial:
            raise ValueError(
                f"hydrophobic weights need exposure > 0 > burial, got "
                f"exposure={self.hydrophobic_exposure}, burial={self.hydrophobic_burial}"
            )
        if not self.hydrophilic_burial > 0 > self.hydrophilic_exposure:
            raise ValueError(
                f"hydrophilic weights need burial > 0 > exposure, got "
                f"burial={self.hydrophilic_burial}, exposure={self.hydrophilic_exposure}"
            )

        if not 1 <= self.max_step_change <= 4:
            raise ValueError(
                f"max_step_change must be in [1, 4], got {self.max_step_change}"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if isinstance(self.stay_policy, str) and self.stay_policy not in STAY_POLICY_NAMES:
            raise ValueError(
                f"Unknown stay_policy '{self.stay_policy}'. "
                f"Expected one of {STAY_POLICY_NAMES} or a callable."
            )

        # Initialize torch device
        self._torch_device = torch.device(self.device)

    @property
    def torch_device(self) -> torch.device:
        """Get PyTorch device object for tensor allocation."""
        return self._torch_device

    @property
    def kT(self) -> float:
        """
        Thermal energy at the configured temperature, in eV.

        Example:
            SimulationConfig().kT   # 8.617e-5 * 300 ≈ 0.02585 eV
        """
        return self.thermal_energy(self.temperature)

    def thermal_energy(self, temperature: float | np.ndarray) -> float | np.ndarray:
        """
        Convert a temperature in K to kT in eV.

        Args:
            temperature: Temperature(s) in Kelvin, must be positive

        Returns:
            kT = k_B * T
        """
        if np.any(np.asarray(temperature) <= 0):
            raise ValueError(f"temperature must be positive, got {temperature}")
        return self.boltzmann_constant * temperature

    def output_path(self, label: str) -> Path:
        """
        Get output directory path for a specific chain.

        Args:
            label: Chain label, e.g. "STR-L60-FLX"

        Returns:
            Path to chain-specific output directory
        """
        safe = re.sub(r"[^A-Za-z0-9_.-]+", "_", label) or "chain"
        path = self.output_dir / safe
        path.mkdir(parents=True, exist_ok=True)
        return path

    def __repr__(self) -> str:
        """Formatted string representation of configuration."""
        policy = self.stay_policy if isinstance(self.stay_policy, str) else "custom"
        return (
            f"SimulationConfig(\n"
            f"  temperature={self.temperature} K, kT={self.kT:.4f} eV\n"
            f"  angular_penalty={self.angular_penalty}, "
            f"rotational_scale={self.rotational_scale}\n"
            f"  coulomb_constant={self.coulomb_constant}, "
            f"clash=({self.clash_distance}, {self.clash_penalty}, {self.clash_decay})\n"
            f"  max_step_change={self.max_step_change}, stay_policy={policy}\n"
            f"  device={self.device}, batch_size={self.batch_size}, output_dir={self.output_dir}\n"
            f")"
        )


DEFAULT_CONFIG = SimulationConfig()
