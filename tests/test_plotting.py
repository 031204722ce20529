"""
Tests for the plotters and GIF frame capture (Agg backend).
"""
import matplotlib.pyplot as plt
import numpy as np
import pytest
from PIL import Image

from hexfold import build_transition_matrix
from hexfold.plotting import (
    DashboardPlotter,
    FoldRosePlotter,
    FrameCapture,
    RatePlotter,
    TemperaturePlotter,
)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def matrix(mixed_chain):
    return build_transition_matrix(mixed_chain)


class TestFrameCapture:

    def test_capture_and_save_gif(self, tmp_path, mixed_chain):
        plotter = RatePlotter()
        for temperature in (200, 300, 400):
            plotter.plot(build_transition_matrix(mixed_chain, temperature=temperature))
            plotter.capture_frame(dpi=32)
        assert len(plotter.frame_capture) == 3

        path = plotter.save_gif(tmp_path / "out" / "rates.gif", duration=50)
        assert path.exists()
        with Image.open(path) as img:
            assert img.n_frames == 3
        assert len(plotter.frame_capture) == 0

    def test_frames_kept_in_capture_order(self):
        capture = FrameCapture()
        for width in (2, 3, 4):
            capture.capture(plt.figure(figsize=(width, 2)), dpi=10)
        assert [frame.size for frame in capture.frames] == [(20, 20), (30, 20), (40, 20)]

    def test_save_without_frames(self, tmp_path, capsys):
        assert FrameCapture().save_gif(tmp_path / "empty.gif") is None
        assert "No frames captured" in capsys.readouterr().out
        assert not (tmp_path / "empty.gif").exists()


class TestPlotters:

    def test_rate_plotter_bars(self, matrix):
        plotter = RatePlotter()
        plotter.plot(matrix)
        assert len(plotter.ax.patches) == len(matrix)

    def test_rate_plotter_empty(self, chain_factory):
        plotter = RatePlotter()
        plotter.plot(build_transition_matrix(chain_factory("POS-NEG")))
        assert len(plotter.ax.patches) == 0

    def test_rate_by_fold(self, matrix):
        totals = FoldRosePlotter.rate_by_fold(matrix)
        assert totals.shape == (5,)
        assert totals.sum() == pytest.approx(matrix.total_rate)
        for steps in range(-2, 3):
            expected = sum(t.rate for t in matrix.transitions if t.to_steps == steps)
            assert totals[steps + 2] == pytest.approx(expected)

    def test_rose_uses_polar_axes(self, matrix):
        plotter = FoldRosePlotter()
        plotter.plot(matrix)
        assert plotter.ax.name == "polar"
        assert len(plotter.ax.patches) == 5

    def test_temperature_plotter(self, mixed_chain, tmp_path):
        matrices = [build_transition_matrix(mixed_chain, temperature=t) for t in (400, 200, 300)]
        plotter = TemperaturePlotter()
        plotter.plot(matrices)
        x, y = plotter.ax.lines[0].get_data()
        assert list(x) == [200, 300, 400]
        assert np.all(np.diff(y) > 0)
        assert plotter.save(tmp_path / "sweep.png").exists()

    def test_dashboard(self, matrix):
        dashboard = DashboardPlotter()
        dashboard.plot(matrix, [matrix])
        dashboard.capture_frame(dpi=24)
        assert len(dashboard.frame_capture) == 1
        assert dashboard.rose.ax.name == "polar"
