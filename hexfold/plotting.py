"""
Visualization tools for fold-transition rates.

This module provides plotting classes for transition matrices and
temperature sweeps, with built-in support for animation frame capture
and GIF generation.
"""

import io
import numpy as np
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec
from PIL import Image
from pathlib import Path
from typing import Optional, Sequence

from .kinetics import TransitionMatrix

# Fold states -2..2 and their bend angles, clockwise from straight ahead
FOLD_STEPS = np.arange(-2, 3)
FOLD_LABELS = ['R120', 'R60', 'Straight', 'L60', 'L120']
FOLD_ANGLES = -60 * FOLD_STEPS


class FrameCapture:
    """
    Frame buffer for a temperature sweep, one PNG-rendered frame per
    temperature, written out as a looping GIF.
    """

    def __init__(self):
        self.frames: list[Image.Image] = []

    def __len__(self) -> int:
        return len(self.frames)

    def capture(self, fig: plt.Figure, dpi: int = 64) -> None:
        """Render fig and append it as the next frame."""
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=dpi)
        buf.seek(0)
        frame = Image.open(buf)
        frame.load()
        self.frames.append(frame)

    def save_gif(self, output_path: Path | str, duration: int = 200) -> Optional[Path]:
        """
        Write the frames in capture order as an endlessly looping GIF and
        clear the buffer.

        Args:
            output_path: Output file path; parent directories are created
            duration: Milliseconds per frame (config.gif_duration)

        Returns:
            The written path, or None if no frames were captured
        """
        if not self.frames:
            print("⚠️  No frames captured, skipping GIF save")
            return None

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        first, *rest = self.frames
        first.save(output_path, save_all=True, append_images=rest,
                   duration=duration, loop=0)

        print(f"✅ Saved GIF: {output_path} ({len(self.frames)} frames)")
        self.frames = []
        return output_path


class BasePlotter:
    """
    Shared figure handling for the rate plotters: sizing, still images
    and sweep frames.
    """

    def __init__(self, fig: Optional[plt.Figure] = None, ax=None):
        self.fig = fig if fig else plt.figure()
        self.ax = ax if ax else self.fig.add_subplot(111)
        self.frame_capture = FrameCapture()

    def set_size(self, width: float, height: float) -> None:
        """Set figure size in inches."""
        self.fig.set_size_inches(width, height)

    def capture_frame(self, dpi: int = 64) -> None:
        self.frame_capture.capture(self.fig, dpi=dpi)

    def save_gif(self, output_path: Path | str, duration: int = 200) -> Optional[Path]:
        return self.frame_capture.save_gif(output_path, duration)

    def save(self, output_path: Path | str, dpi: int = 128) -> Path:
        """Save the current figure as a still image."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.fig.savefig(output_path, dpi=dpi)
        return output_path

    def close(self) -> None:
        plt.close(self.fig)

    def plot(self, matrix: TransitionMatrix):
        raise NotImplementedError("Subclasses must implement plot()")


class RatePlotter(BasePlotter):
    """
    Bar chart of candidate transition rates.

    One bar per candidate, grouped by pivot position and coloured by the
    target fold state. A dashed line marks the stay weight.
    """

    def plot(self, matrix: TransitionMatrix, log: bool = True) -> None:
        """
        Plot candidate rates of one transition matrix.

        Args:
            matrix: TransitionMatrix instance
            log: Use a logarithmic rate axis
        """
        self.ax.clear()
        self.ax.set_title(f"Transition Rates: {matrix.chain.label} @ {matrix.temperature:.0f} K")
        self.ax.set_xlabel("Candidate (position:target steps)")
        self.ax.set_ylabel("Rate")

        if not matrix.transitions:
            self.ax.text(0.5, 0.5, "No valid transitions", ha='center', va='center',
                         transform=self.ax.transAxes)
            return

        rates = np.array([t.rate for t in matrix.transitions])
        labels = [f"{t.position}:{t.to_steps:+d}" for t in matrix.transitions]
        cmap = plt.get_cmap('coolwarm')
        colors = [cmap((t.to_steps + 2) / 4) for t in matrix.transitions]

        x = np.arange(len(rates))
        self.ax.bar(x, rates, color=colors)
        self.ax.set_xticks(x)
        self.ax.set_xticklabels(labels, rotation=90, fontsize=7)

        if matrix.stay_rate > 0:
            self.ax.axhline(matrix.stay_rate, color='k', linestyle='--', lw=1, label='stay')
            self.ax.legend(loc='upper right')

        if log:
            self.ax.set_yscale('log')
        self.ax.grid(True, axis='y', linestyle='--', alpha=0.3)


class FoldRosePlotter(BasePlotter):
    """
    Polar histogram of rate mass by target bend angle.

    Displays where transitions lead, with the five fold states on the
    angular axis (straight ahead at the top).
    """

    def __init__(self, fig: Optional[plt.Figure] = None, ax=None):
        """
        Initialize polar histogram plotter.

        Args:
            fig: Matplotlib figure
            ax: Polar axes (will create if None)
        """
        if ax is None:
            fig = fig if fig else plt.figure()
            ax = fig.add_subplot(111, projection="polar")

        super().__init__(fig, ax)

    @staticmethod
    def rate_by_fold(matrix: TransitionMatrix) -> np.ndarray:
        """Summed candidate rate per target fold state, ordered -2..2."""
        totals = np.zeros(len(FOLD_ANGLES))
        for t in matrix.transitions:
            totals[t.to_steps + 2] += t.rate
        return totals

    def plot(self, matrix: TransitionMatrix) -> None:
        """
        Plot rate mass per target fold state.

        Args:
            matrix: TransitionMatrix instance
        """
        self.ax.clear()

        self.ax.set_title("Transition Rate by Target Bend")
        self.ax.set_yticklabels([])
        self.ax.set_theta_zero_location("N")
        self.ax.set_theta_direction(-1)
        self.ax.set_thetagrids(FOLD_ANGLES % 360, labels=FOLD_LABELS)

        totals = self.rate_by_fold(matrix)
        self.ax.bar(
            np.radians(FOLD_ANGLES),
            totals,
            width=np.radians(50),
            bottom=0.0
        )


class TemperaturePlotter(BasePlotter):
    """
    Total and stay rate of one chain state against temperature.
    """

    def plot(self, matrices: Sequence[TransitionMatrix]) -> None:
        """
        Plot a temperature sweep.

        Args:
            matrices: Transition matrices of one chain at several temperatures
        """
        self.ax.clear()
        self.ax.set_title("Rates vs Temperature")
        self.ax.set_xlabel("Temperature (K)")
        self.ax.set_ylabel("Rate")

        temps = np.array([m.temperature for m in matrices])
        order = np.argsort(temps)
        total = np.array([m.total_rate for m in matrices])[order]
        stay = np.array([m.stay_rate for m in matrices])[order]

        self.ax.semilogy(temps[order], total, 'o-', label='total')
        if np.any(stay > 0):
            self.ax.semilogy(temps[order], stay, 's--', label='stay')
        self.ax.legend()
        self.ax.grid(True, linestyle='--', alpha=0.3)


class DashboardPlotter(BasePlotter):
    """
    Composite dashboard with multiple synchronized plots.

    Combines the candidate rates, the fold rose and the temperature sweep
    in a single figure layout.
    """

    def __init__(self):
        """Initialize dashboard with multi-panel layout."""
        super().__init__(fig=plt.figure(figsize=(12.80, 7.20)))
        self.fig.delaxes(self.ax)

        gs = gridspec.GridSpec(2, 2, height_ratios=[3, 2], width_ratios=[2, 1])

        self.rates = RatePlotter(self.fig, self.fig.add_subplot(gs[0, :]))
        self.rose = FoldRosePlotter(self.fig, self.fig.add_subplot(gs[1, 1], projection="polar"))
        self.sweep = TemperaturePlotter(self.fig, self.fig.add_subplot(gs[1, 0]))
        self.ax = self.rates.ax

    def plot(self, matrix: TransitionMatrix, history: Sequence[TransitionMatrix] = ()) -> None:
        """
        Update all sub-plots.

        Args:
            matrix: Current TransitionMatrix
            history: Matrices of the sweep so far (including matrix)
        """
        self.rates.plot(matrix)
        self.rose.plot(matrix)
        self.sweep.plot(list(history) or [matrix])
        self.fig.tight_layout()


__all__ = [
    'FrameCapture',
    'BasePlotter',
    'RatePlotter',
    'FoldRosePlotter',
    'TemperaturePlotter',
    'DashboardPlotter',
]
