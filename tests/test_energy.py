"""
Tests for the four energy terms and their combination.
"""
import math

import pytest
import torch

from hexfold import Chain, SimulationConfig, energy_breakdown, full_energy, full_energy_batch
from hexfold.energy import (
    electrostatic_energy,
    folding_energy,
    hydrophobic_energy,
    solvent_exposure,
    steric_energy,
)


# PHO at the origin with all six lattice neighbors occupied
BURIED_POSITIONS = torch.tensor([
    [0, 0], [1, 0], [0, 1], [-1, 1], [-1, 0], [0, -1], [1, -1],
])


class TestElectrostatic:

    def test_adjacent_charges_contribute_zero(self, chain_factory):
        chain = chain_factory("POS-NEG")
        assert energy_breakdown(chain).electrostatic == 0.0

    def test_opposite_charges_at_distance_two(self, chain_factory):
        chain = chain_factory("POS-FLX-NEG")
        assert energy_breakdown(chain).electrostatic == pytest.approx(math.log(2))

    def test_like_charges_mirror_sign(self, chain_factory):
        opposite = energy_breakdown(chain_factory("POS-FLX-NEG")).electrostatic
        like = energy_breakdown(chain_factory("POS-FLX-POS")).electrostatic
        assert like == pytest.approx(-opposite)
        assert like < 0 < opposite

    def test_opposite_charges_favor_closeness(self, chain_factory):
        far = chain_factory("POS-FLX-FLX-NEG", [0, 0, 0, 0])
        near = chain_factory("POS-FLX-FLX-NEG", [0, 2, 0, 0])
        assert energy_breakdown(near).electrostatic < energy_breakdown(far).electrostatic

    def test_uncharged_contribute_zero(self, chain_factory):
        assert energy_breakdown(chain_factory("STR-FLX-PHO-STR")).electrostatic == 0.0

    def test_coulomb_constant_scales(self):
        positions = torch.tensor([[0, 0], [3, 0]])
        base = electrostatic_energy(["POS", "NEG"], positions)
        scaled = electrostatic_energy(["POS", "NEG"], positions, SimulationConfig(coulomb_constant=2.0))
        assert float(scaled) == pytest.approx(2 * float(base))


class TestHydrophobic:

    def test_isolated_monomer_fully_exposed(self):
        positions = torch.tensor([[0, 0]])
        assert float(solvent_exposure(positions)[0]) == 1.0
        assert float(hydrophobic_energy(["PHO"], positions)) == pytest.approx(1.5)
        assert float(hydrophobic_energy(["PHI"], positions)) == pytest.approx(-0.5)

    def test_buried_hydrophobic_is_favorable(self):
        sequence = ["PHO"] + ["STR"] * 6
        assert float(solvent_exposure(BURIED_POSITIONS)[0]) == 0.0
        assert float(hydrophobic_energy(sequence, BURIED_POSITIONS)) == pytest.approx(-1.5)

    def test_buried_hydrophilic_is_unfavorable(self):
        sequence = ["PHI"] + ["STR"] * 6
        assert float(hydrophobic_energy(sequence, BURIED_POSITIONS)) == pytest.approx(0.5)

    def test_chain_interior_partially_exposed(self, chain_factory):
        # Two bonded neighbors: exposure 2/3
        chain = chain_factory("STR-PHO-STR")
        assert energy_breakdown(chain).hydrophobic == pytest.approx(1.5 * 2 / 3 - 1.5 / 3)

    def test_neutral_contribute_zero(self, chain_factory):
        assert energy_breakdown(chain_factory("STR-FLX-STR")).hydrophobic == 0.0


class TestFolding:

    @pytest.mark.parametrize("code,steps,expected", [
        ("L60", 1, 0.0),
        ("L60", 0, 0.1),
        ("L60", -1, 0.2),
        ("R12", 2, 0.4),
        ("STR", -2, 0.2),
    ])
    def test_penalty_per_step(self, code, steps, expected):
        energy = folding_energy(["FLX", code, "FLX"], torch.tensor([0, steps, 0]))
        assert float(energy) == pytest.approx(expected)

    @pytest.mark.parametrize("code", ["FLX", "POS", "NEG", "PHO", "PHI", "A", "U"])
    def test_no_preference_contributes_zero(self, code):
        for steps in range(-2, 3):
            energy = folding_energy(["FLX", code, "FLX"], torch.tensor([0, steps, 0]))
            assert float(energy) == 0.0

    def test_end_monomers_ignored(self):
        energy = folding_energy(["L60", "FLX", "R12"], torch.tensor([0, 0, 0]))
        assert float(energy) == 0.0

    def test_at_preference_lowers_energy_by_one_step(self, chain_factory):
        straight = full_energy(chain_factory("FLX-L60-FLX", [0, 0, 0]))
        at_preference = full_energy(chain_factory("FLX-L60-FLX", [0, 1, 0]))
        assert at_preference < straight
        assert straight - at_preference == pytest.approx(0.1)


class TestSteric:

    def test_lattice_layouts_have_no_near_clash(self, mixed_chain):
        assert energy_breakdown(mixed_chain).steric == 0.0

    def test_non_bonded_clash_penalized(self):
        positions = torch.tensor([[0.0, 0.0], [1.0, 0.0], [0.3, 0.0]], dtype=torch.float64)
        energy = steric_energy(["STR"] * 3, positions)
        # Pair (0, 2) at hex distance 0.3
        assert float(energy) == pytest.approx(100.0 * math.exp(-0.3 / 0.1))

    def test_bonded_pairs_exempt(self):
        positions = torch.tensor([[0.0, 0.0], [0.2, 0.0]], dtype=torch.float64)
        assert float(steric_energy(["STR"] * 2, positions)) == 0.0

    def test_penalty_grows_as_distance_shrinks(self):
        near = torch.tensor([[0.0, 0.0], [1.0, 0.0], [0.1, 0.0]], dtype=torch.float64)
        far = torch.tensor([[0.0, 0.0], [1.0, 0.0], [0.4, 0.0]], dtype=torch.float64)
        assert float(steric_energy(["STR"] * 3, near)) > float(steric_energy(["STR"] * 3, far))


class TestFullEnergy:

    def test_overlap_gives_infinity(self, hexagon_chain):
        assert full_energy(hexagon_chain) == math.inf
        breakdown = energy_breakdown(hexagon_chain)
        assert breakdown.overlap
        assert breakdown.as_dict()["total"] == math.inf

    def test_valid_chain_is_finite(self, mixed_chain, open_ring_chain):
        assert math.isfinite(full_energy(mixed_chain))
        assert math.isfinite(full_energy(open_ring_chain))

    def test_total_is_sum_of_terms(self, mixed_chain):
        b = energy_breakdown(mixed_chain)
        assert b.total == pytest.approx(b.electrostatic + b.hydrophobic + b.folding + b.steric)
        assert full_energy(mixed_chain) == pytest.approx(b.total)

    def test_unknown_codes_contribute_zero(self):
        assert full_energy(Chain(("XXX", "YYY", "ZZZ"), (0, 1, 0))) == 0.0

    def test_batch_matches_single(self, mixed_chain, hexagon_chain):
        folds = torch.tensor([list(mixed_chain.fold_states), [0, 0, 0, 0, 0, 0]])
        energies = full_energy_batch(mixed_chain.sequence, folds)
        assert energies.shape == (2,)
        assert float(energies[0]) == pytest.approx(full_energy(mixed_chain))
        assert float(energies[1]) == pytest.approx(full_energy(Chain(mixed_chain.sequence)))

        overlap = full_energy_batch(hexagon_chain.sequence, hexagon_chain.fold_tensor())
        assert float(overlap[0]) == math.inf

    def test_chunked_batch_matches_unchunked(self, hexagon_chain, open_ring_chain):
        rows = torch.tensor([
            list(hexagon_chain.fold_states),
            list(open_ring_chain.fold_states),
            [0, 0, 0, 0, 0, 0, 0],
            [0, -1, 2, 0, 1, -2, 0],
            [0, 2, 2, 0, 0, 0, 0],
        ])
        sequence = hexagon_chain.sequence
        whole = full_energy_batch(sequence, rows, SimulationConfig(batch_size=1000))
        for batch_size in (1, 2, 3):
            chunked = full_energy_batch(sequence, rows, SimulationConfig(batch_size=batch_size))
            assert chunked.shape == whole.shape
            assert torch.equal(torch.isinf(chunked), torch.isinf(whole))
            finite = torch.isfinite(whole)
            assert torch.allclose(chunked[finite], whole[finite])
        assert float(whole[0]) == math.inf

    def test_long_chain_batch_in_small_chunks(self):
        sequence = ("STR",) * 200
        rows = torch.zeros((40, 200), dtype=torch.int64)
        rows[torch.arange(40), torch.arange(1, 41)] = 1
        energies = full_energy_batch(sequence, rows, SimulationConfig(batch_size=8))
        assert energies.shape == (40,)
        assert torch.isfinite(energies).all()

    def test_empty_batch(self):
        energies = full_energy_batch(["STR", "STR"], torch.zeros((0, 2), dtype=torch.int64))
        assert energies.shape == (0,)
        assert energies.dtype == torch.float64

    def test_batch_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            full_energy_batch(["STR", "STR"], torch.tensor([[0, 0, 0]]))
