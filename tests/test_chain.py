"""
Tests for the monomer catalogue and the Chain value type.
"""
import pytest
import torch

from hexfold import Chain
from hexfold.chain import split_sequence
from hexfold.monomers import (
    AMINO_ACIDS,
    CATALOGUE,
    DEFAULT_MASS,
    Hydropathy,
    charge_of,
    fold_energy,
    hydropathy_of,
    mass_of,
    masses,
    preferred_steps_of,
)


class TestCatalogue:

    def test_amino_acid_codes(self):
        assert set(AMINO_ACIDS) == {
            "STR", "L60", "R60", "L12", "R12", "FLX", "POS", "NEG", "PHO", "PHI"
        }

    def test_nucleotides_present(self):
        for code in "ACGTU":
            assert code in CATALOGUE
            assert preferred_steps_of(code) is None
            assert charge_of(code) == 0

    def test_preferences(self):
        assert preferred_steps_of("STR") == 0
        assert preferred_steps_of("L60") == 1
        assert preferred_steps_of("R60") == -1
        assert preferred_steps_of("L12") == 2
        assert preferred_steps_of("R12") == -2
        assert preferred_steps_of("FLX") is None

    def test_charges_and_hydropathy(self):
        assert charge_of("POS") == 1
        assert charge_of("NEG") == -1
        assert hydropathy_of("PHO") is Hydropathy.HYDROPHOBIC
        assert hydropathy_of("POS") is Hydropathy.HYDROPHILIC
        assert hydropathy_of("STR") is Hydropathy.NEUTRAL

    def test_catalogue_is_read_only(self):
        with pytest.raises(TypeError):
            CATALOGUE["XXX"] = CATALOGUE["STR"]

    def test_unknown_codes_are_inert(self):
        assert mass_of("ZZZ") == DEFAULT_MASS
        assert charge_of("ZZZ") == 0
        assert hydropathy_of("ZZZ") is Hydropathy.NEUTRAL
        assert fold_energy("ZZZ", 2) == 0.0

    def test_fold_energy(self):
        assert fold_energy("L60", 1) == 0.0
        assert fold_energy("L60", 0) == pytest.approx(0.1)
        assert fold_energy("R12", 2) == pytest.approx(0.4)
        assert fold_energy("FLX", -2) == 0.0

    def test_masses_tensor(self):
        m = masses(["STR", "FLX", "A"])
        assert m.dtype == torch.float64
        assert m.tolist() == [89.0, 75.0, 313.2]


class TestChain:

    def test_default_fold_states(self):
        chain = Chain(("STR", "FLX", "STR"))
        assert chain.fold_states == (0, 0, 0)
        assert len(chain) == 3

    def test_parse(self):
        chain = Chain.parse("FLX-L60-FLX", [0, 1, 0])
        assert chain.sequence == ("FLX", "L60", "FLX")
        assert chain.fold_states == (0, 1, 0)
        assert chain.kind == "protein"
        assert chain.label == "FLX-L60-FLX"

    def test_split_sequence(self):
        assert split_sequence("STR-L60") == ("STR", "L60")
        assert split_sequence("ACGU") == ("A", "C", "G", "U")

    def test_dash_free_text_splits_per_character(self):
        # A single multi-letter code needs a tuple, not a string
        assert Chain.parse("STR").sequence == ("S", "T", "R")
        assert Chain(("STR",)).sequence == ("STR",)

    def test_kind_inference(self):
        assert Chain.parse("ACGT").kind == "dna"
        assert Chain.parse("ACGU").kind == "rna"
        assert Chain.parse("XYZ").kind == "other"
        assert Chain.rna("ACG").kind == "rna"
        assert Chain.protein("STR-FLX").kind == "protein"

    def test_kind_does_not_affect_equality(self):
        assert Chain.parse("ACG") == Chain.rna("ACG")

    def test_empty_sequence_raises(self):
        with pytest.raises(ValueError):
            Chain(())

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            Chain(("STR", "STR"), (0, 0, 0))

    def test_fold_state_out_of_range_raises(self):
        with pytest.raises(ValueError):
            Chain(("STR", "STR", "STR"), (0, 3, 0))

    def test_fractional_fold_state_raises(self):
        with pytest.raises(ValueError):
            Chain(("STR", "L60", "STR"), (0, 1.7, 0))

    def test_integral_float_fold_state_accepted(self):
        assert Chain(("STR", "L60", "STR"), (0, 1.0, 0)).fold_states == (0, 1, 0)

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            Chain(("STR",), kind="lipid")

    def test_pivots(self):
        assert list(Chain.parse("STR-STR-STR-STR").pivots) == [1, 2]
        assert list(Chain.parse("STR-STR").pivots) == []
        assert list(Chain(("STR",)).pivots) == []

    def test_accessors_out_of_range(self):
        chain = Chain.parse("STR-FLX", [0, 0])
        assert chain.type_at(1) == "FLX"
        assert chain.type_at(2) is None
        assert chain.fold_at(-1) is None

    def test_with_fold_returns_new_chain(self):
        chain = Chain.parse("STR-FLX-STR")
        folded = chain.with_fold(1, -2)
        assert folded.fold_states == (0, -2, 0)
        assert chain.fold_states == (0, 0, 0)

    def test_with_fold_validates(self):
        chain = Chain.parse("STR-FLX-STR")
        with pytest.raises(ValueError):
            chain.with_fold(3, 1)
        with pytest.raises(ValueError):
            chain.with_fold(1, 5)

    def test_chain_is_immutable(self):
        chain = Chain.parse("STR-FLX-STR")
        with pytest.raises(AttributeError):
            chain.fold_states = (0, 1, 0)

    def test_fold_tensor(self):
        folds = Chain.parse("STR-FLX-STR", [0, -1, 0]).fold_tensor()
        assert folds.dtype == torch.int64
        assert folds.tolist() == [0, -1, 0]
