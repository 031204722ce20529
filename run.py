"""
Main runner for hex-lattice fold kinetics.

This script orchestrates the full workflow for one chain:
1. Configuration setup
2. Layout and energy report of the chain
3. Transition matrix sweep over temperature
4. Visualization and animation generation

Animation structure:
    One frame per temperature, coldest first.
"""

import time
import numpy as np
import matplotlib.pyplot as plt
from typing import List, Sequence, Tuple

from hexfold import Chain, SimulationConfig, build_transition_matrix, energy_breakdown
from hexfold import Overlap, TransitionMatrix, build_layout
from hexfold import FoldRosePlotter, RatePlotter, TemperaturePlotter


class Timer:
    """Simple timer for performance monitoring."""

    def __init__(self):
        self.start_time = time.perf_counter()
        self.last_lap = time.perf_counter()

    def lap(self) -> float:
        now = time.perf_counter()
        delta = now - self.last_lap
        self.last_lap = now
        return delta

    @property
    def total(self) -> float:
        return time.perf_counter() - self.start_time


def setup_plotters() -> Tuple[RatePlotter, FoldRosePlotter]:
    """
    Initialize plotting windows.

    Returns:
        Tuple of (rate_plotter, rose_plotter)
    """
    rates = RatePlotter(plt.figure(0))
    rates.set_size(10, 5)

    rose = FoldRosePlotter(plt.figure(1))
    rose.set_size(6, 6)

    return rates, rose


def generate_temperature_sweep(
    t_min: float = 150.0,
    t_max: float = 600.0,
    n_points: int = 31
) -> np.ndarray:
    """
    Generate linear sweep of temperatures.

    Args:
        t_min:    Minimum temperature in K
        t_max:    Maximum temperature in K
        n_points: Number of points in sweep

    Returns:
        Array of temperatures
    """
    return np.linspace(t_min, t_max, n_points)


def report_chain(chain: Chain, config: SimulationConfig) -> bool:
    """
    Print the layout and energy breakdown of a chain.

    Returns:
        False if the chain overlaps itself
    """
    result = build_layout(chain)
    if isinstance(result, Overlap):
        print(f"❌ {result}")
        return False

    print("Layout:")
    for i, (code, q, r) in enumerate(result.items()):
        print(f"  {i:3d} {code:>4s} ({q:3d}, {r:3d})  fold {chain.fold_states[i]:+d}")

    breakdown = energy_breakdown(chain, config)
    print("Energy (eV):")
    for name, value in breakdown.as_dict().items():
        print(f"  {name:<14s} {value:+.4f}")
    return True


def run_temperature_sweep(
    chain: Chain,
    config: SimulationConfig,
    temperatures: Sequence[float],
) -> List[TransitionMatrix]:
    """
    Build the transition matrix of one chain at every temperature.

    Captures one frame per temperature and writes the GIFs and a summary
    plot to config.output_path(chain.label).

    Args:
        chain:        Chain state to analyse
        config:       Simulation configuration
        temperatures: Temperatures in K

    Returns:
        Transition matrices in sweep order
    """
    timer = Timer()
    rate_plotter, rose_plotter = setup_plotters()
    matrices: List[TransitionMatrix] = []

    print(f"🔄 Building transition matrices for {len(temperatures)} temperatures...")
    try:
        for i, temperature in enumerate(temperatures):
            matrix = build_transition_matrix(chain, float(temperature), config)
            matrices.append(matrix)

            rate_plotter.plot(matrix)
            rate_plotter.capture_frame(dpi=config.frame_dpi)
            rose_plotter.plot(matrix)
            rose_plotter.capture_frame(dpi=config.frame_dpi)

            print(f"\r  Frame {i + 1}/{len(temperatures)} | T = {temperature:6.1f} K | "
                  f"total = {matrix.total_rate:.3e} | stay = {matrix.stay_rate:.3e}", end="")
        print(f"\n  Done! ({timer.lap():.2f}s)")

    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user, saving captured frames...")

    finally:
        output_dir = config.output_path(chain.label)
        print(f"💾 Saving outputs to {output_dir}")
        for name, plotter in (("rates", rate_plotter), ("rose", rose_plotter)):
            print("  ", end="")
            plotter.save_gif(output_dir / f"{name}_{len(matrices)}T.gif",
                             duration=config.gif_duration)

        if matrices:
            sweep = TemperaturePlotter(plt.figure(2))
            sweep.set_size(8, 5)
            sweep.plot(matrices)
            sweep.save(output_dir / "sweep.png", dpi=config.frame_dpi)

        print(f"✅ Sweep complete! Total time: {timer.total:.2f}s")
        print("-" * 60)

    return matrices


def print_transitions(matrix: TransitionMatrix, top: int = 10) -> None:
    """Print the fastest candidates of a transition matrix."""
    ranked = sorted(matrix.transitions, key=lambda t: t.log_rate, reverse=True)[:top]
    print(f"Top {len(ranked)} of {len(matrix)} transitions at {matrix.temperature:.0f} K:")
    for t in ranked:
        bend = f"{t.angle}° {t.direction}" if t.direction else "straight"
        print(f"  pos {t.position:3d}: {t.from_steps:+d} → {t.to_steps:+d} ({bend:>10s}) "
              f"E_a={t.barrier:.4f} ΔE={t.delta_e:+.4f} rate={t.rate:.3e}")
    print(f"  total = {matrix.total_rate:.4f}, stay = {matrix.stay_rate:.4f}")


def main(sequence: str, fold_states: Sequence[int]):
    """Main entry point for the sweep."""

    config = SimulationConfig(
        device="cpu",
        frame_dpi=96,
        gif_duration=150,
    )
    chain = Chain.parse(sequence, fold_states)

    print(f"\n{'='*60}")
    print(f"Hex-Lattice Fold Kinetics")
    print(f"{'='*60}")
    print(f"Chain:          {chain}")
    print(f"Kind:           {chain.kind} ({len(chain)} monomers)")
    print(config)
    print(f"{'='*60}\n")

    if not report_chain(chain, config):
        return

    print_transitions(build_transition_matrix(chain, config=config))
    print()

    run_temperature_sweep(chain, config, generate_temperature_sweep())

    print(f"\n{'='*60}")
    print(f"Run complete!")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    main("STR-POS-PHO-L60-FLX-PHO-NEG-STR", [0, 0, 1, 1, 0, -1, 0, 0])
