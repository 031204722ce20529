"""
Hex-Lattice Fold Kinetics Package

A modular framework for laying out linear chains of typed monomers on a
2D hexagonal lattice, scoring their conformations with a four-term
energy model and enumerating kinetic Monte Carlo fold transitions.

Main Components:
---------------
config.SimulationConfig - Central configuration management
chain.Chain - Sequence + fold-state value type
layout.layout - Hex-lattice layout with overlap detection
energy.full_energy - Electrostatic, hydrophobic, folding and steric energy
kinetics.build_transition_matrix - Weighted fold-transition candidates
analysis.KineticsAnalyzer - State-space stationary distribution checks
plotting.* - Visualization classes

Module Structure:
----------------
├── run.py                  # Temperature sweep script
├── local/                  # Output isolation
└── hexfold/                # Module library files
    ├── config.py           # Configuration management
    ├── monomers.py         # Monomer type catalogue
    ├── core.py             # Hex-lattice geometry and step conversions
    ├── chain.py            # Chain value type
    ├── layout.py           # Sequential and batched layout
    ├── energy.py           # Energy model
    ├── kinetics.py         # Barriers, rates and transition matrices
    ├── analysis.py         # State-space analysis
    ├── plotting.py         # Visualization classes
    └── __init__.py         # This file

For detailed usage, see run.py or the documentation.
"""

from .config import SimulationConfig, DEFAULT_CONFIG
from .chain import Chain, FOLD_STATES
from .core import angle_to_steps, steps_to_angle, hex_distance, bend, move
from .layout import Layout, Overlap, OverlapError, HexChainBuilder, build_layout, layout
from .energy import EnergyBreakdown, energy_breakdown, full_energy, full_energy_batch
from .kinetics import (
    Transition,
    TransitionMatrix,
    build_transition_matrix,
    kinetic_barrier,
    log_transition_rate,
    moment_of_inertia,
    stay_rate,
    transition_rate,
)
from .analysis import KineticsAnalyzer
from .plotting import (
    RatePlotter,
    FoldRosePlotter,
    TemperaturePlotter,
    DashboardPlotter,
    BasePlotter
)

__version__ = "1.0.0"
__author__ = "Polymer Simulation Team"

__all__ = [
    # Configuration
    'SimulationConfig',
    'DEFAULT_CONFIG',

    # Chains and layout
    'Chain',
    'FOLD_STATES',
    'Layout',
    'Overlap',
    'OverlapError',
    'HexChainBuilder',
    'build_layout',
    'layout',

    # Geometric utilities
    'angle_to_steps',
    'steps_to_angle',
    'hex_distance',
    'bend',
    'move',

    # Energy and kinetics
    'EnergyBreakdown',
    'energy_breakdown',
    'full_energy',
    'full_energy_batch',
    'Transition',
    'TransitionMatrix',
    'build_transition_matrix',
    'kinetic_barrier',
    'log_transition_rate',
    'moment_of_inertia',
    'stay_rate',
    'transition_rate',
    'KineticsAnalyzer',

    # Visualization
    'RatePlotter',
    'FoldRosePlotter',
    'TemperaturePlotter',
    'DashboardPlotter',
    'BasePlotter',
]
