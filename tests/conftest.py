"""
Test fixtures for the hex-lattice fold kinetics package.
Provides chain factories and a headless matplotlib backend.

NOTE: the reference layouts below start at (0, 0) heading East and step
along axial directions E(+1,0), SE(0,+1), SW(-1,+1), W(-1,0), NW(0,-1),
NE(+1,-1). Positive fold states turn left (counter-clockwise).
"""
import pytest
import sys
import os

import matplotlib
matplotlib.use("Agg")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from hexfold import Chain, SimulationConfig


@pytest.fixture
def config(tmp_path):
    """Default configuration with outputs isolated per test."""
    return SimulationConfig(output_dir=tmp_path / "plots")


@pytest.fixture
def chain_factory():
    """Factory to create chains from a dash-separated sequence string."""
    def _make(sequence, fold_states=None, kind=None):
        return Chain.parse(sequence, fold_states, kind)
    return _make


@pytest.fixture
def straight_chain(chain_factory):
    """Four STR monomers, all straight: (0,0) (1,0) (2,0) (3,0)."""
    return chain_factory("STR-STR-STR-STR")


@pytest.fixture
def hexagon_chain(chain_factory):
    """
    Seven monomers with five consecutive left 60° bends.

    Monomers 0..5 trace a hexagon; monomer 6 lands back on (0, 0).
    """
    return chain_factory("STR-FLX-FLX-FLX-FLX-FLX-STR", [0, 1, 1, 1, 1, 1, 0])


@pytest.fixture
def open_ring_chain(chain_factory):
    """
    Seven monomers with four left 60° bends: no overlap.

    (0,0) (1,0) (2,-1) (2,-2) (1,-2) (0,-1) (-1,0)
    A further left bend at position 5 would land on (0, 0).
    """
    return chain_factory("STR-FLX-FLX-FLX-FLX-FLX-STR", [0, 1, 1, 1, 1, 0, 0])


@pytest.fixture
def mixed_chain(chain_factory):
    """Short chain with every energy term active."""
    return chain_factory("POS-PHO-L60-NEG-PHI-STR", [0, 1, 1, 0, -1, 0])
