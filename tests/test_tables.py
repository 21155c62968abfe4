"""Tests for basis enumeration, blade simplification and product tables.

Covers:
- canonical basis order and axis labelling (e0 for null generators)
- blade simplification signs, including degenerate contraction
- geometric / outer / contraction tables and the Cayley text form
- explicit bases, grades and Cayley tables from configuration
"""

import numpy as np
import pytest

from core.algebra import CliffordAlgebra
from core.basis import Basis, blade_name, enumerate_basis, parse_blade_name
from core.blade import BladeResolver, simplify
from core.config import load_config, normalize_signature
from core.errors import ConfigurationError
from core.tables import build_tables


def _tables(**options):
    return build_tables(normalize_signature(load_config(options)))


# ── Basis ─────────────────────────────────────────────────────────────

class TestBasis:

    def test_three_dimensional_order(self):
        assert enumerate_basis(3) == ["1", "e1", "e2", "e3", "e12", "e13", "e23", "e123"]

    def test_zero_dimensions(self):
        assert enumerate_basis(0) == ["1"]

    def test_low_label_zero(self):
        assert enumerate_basis(2, low=0) == ["1", "e0", "e1", "e01"]

    def test_labels_past_nine_are_letters(self):
        names = enumerate_basis(10)
        assert "ea" in names
        assert names[-1] == "e123456789a"

    def test_too_many_dimensions(self):
        with pytest.raises(ConfigurationError):
            enumerate_basis(13)

    def test_negative_dimensions(self):
        with pytest.raises(ConfigurationError):
            enumerate_basis(-1)

    def test_blade_names_round_trip(self):
        assert blade_name(()) == "1"
        assert blade_name((1, 2)) == "e12"
        assert parse_blade_name("e31") == (3, 1)
        assert parse_blade_name("1") == ()

    def test_parse_rejects_repeated_axis(self):
        with pytest.raises(ConfigurationError):
            parse_blade_name("e11")

    def test_grade_start_and_index(self):
        basis = Basis.from_signature(normalize_signature(load_config({"p": 3})))
        assert basis.grade_start == (0, 1, 4, 7, 8)
        assert basis.index["e23"] == 6
        assert basis.index["s"] == 0
        assert basis.dim == 8
        assert basis.canonical

    def test_pga_puts_null_generator_first(self):
        algebra = CliffordAlgebra(2, 0, 1)
        assert algebra.basis == ["1", "e0", "e1", "e2", "e01", "e02", "e12", "e012"]
        assert algebra.metric[:4] == [1, 0, 1, 1]


# ── Blade simplification ──────────────────────────────────────────────

class TestSimplify:

    @staticmethod
    def euclidean(_):
        return 1

    def test_anticommute(self):
        assert simplify((2, 1), self.euclidean) == (-1, (1, 2))

    def test_contract(self):
        assert simplify((1, 2, 1), self.euclidean) == (-1, (2,))

    def test_negative_square(self):
        assert simplify((1, 1), lambda _: -1) == (-1, ())

    def test_null_square_vanishes(self):
        assert simplify((0, 1, 0), lambda a: 0 if a == 0 else 1) == (0, ())

    def test_three_cycle(self):
        # e3 e1 e2 = e1 e2 e3 (two swaps)
        assert simplify((3, 1, 2), self.euclidean) == (1, (1, 2, 3))

    def test_resolver_handles_reordered_member(self):
        cfg = load_config({"basis": ["1", "e1", "e2", "e3", "e12", "e31", "e23", "e123"]})
        basis = Basis.from_signature(normalize_signature(cfg))
        resolver = BladeResolver(basis, lambda _: 1)
        # e1 e3 = -e31
        assert resolver.product(1, 3) == (-1, 5)
        # e3 e1 = e31
        assert resolver.product(3, 1) == (1, 5)

    def test_resolver_rejects_missing_blade(self):
        cfg = load_config({"basis": ["1", "e1", "e2", "e12"]})
        basis = Basis.from_signature(normalize_signature(cfg))
        with pytest.raises(ConfigurationError):
            BladeResolver(basis, lambda _: 1).resolve(1, (3,))


# ── Tables ────────────────────────────────────────────────────────────

class TestTables:

    def test_complex_numbers(self):
        tables = _tables(q=1)
        assert tables.entry(1, 1) == "-1"
        assert tables.entry(0, 1) == "e1"

    def test_degenerate_entry_is_zero(self):
        tables = _tables(r=1)
        assert tables.entry(1, 1) == "0"
        assert int(tables.gp_sign[1, 1]) == 0

    def test_outer_product_drops_contractions(self):
        tables = _tables(p=3)
        assert tables.entry(1, 1, outer=True) == "0"
        assert tables.entry(1, 2, outer=True) == "e12"
        assert tables.entry(2, 1, outer=True) == "-e12"

    def test_left_contraction(self):
        tables = _tables(p=3)
        e1, e12 = 1, 4
        # e1 . e12 = e2, e12 . e1 = 0
        assert int(tables.dot_sign[e1, e12]) == 1
        assert tables.basis.names[int(tables.gp_index[e1, e12])] == "e2"
        assert int(tables.dot_sign[e12, e1]) == 0

    def test_tables_are_read_only(self):
        tables = _tables(p=2)
        with pytest.raises(ValueError):
            tables.gp_sign[0, 0] = 5

    def test_bitmask_matches_simplifier(self):
        tables = _tables(p=2, q=1, r=1)
        resolver = BladeResolver(tables.basis, tables.signature.metric_of)
        for i in range(tables.dim):
            for j in range(tables.dim):
                sign, index = resolver.product(i, j)
                assert int(tables.gp_sign[i, j]) == sign
                if sign:
                    assert int(tables.gp_index[i, j]) == index

    def test_reordered_basis_signs(self):
        tables = _tables(basis=["1", "e1", "e2", "e3", "e12", "e31", "e23", "e123"])
        assert tables.entry(3, 1) == "e31"
        assert tables.entry(1, 3) == "-e31"

    def test_explicit_cayley(self):
        tables = _tables(basis=["1", "i"], Cayley=[["1", "i"], ["i", "-1"]])
        assert tables.entry(1, 1) == "-1"
        assert tables.entry(0, 1) == "i"

    def test_explicit_cayley_unknown_entry(self):
        with pytest.raises(ConfigurationError):
            _tables(basis=["1", "i"], Cayley=[["1", "i"], ["i", "-j"]])

    def test_describe_lists_everything(self):
        text = _tables(q=1).describe()
        lines = text.splitlines()
        assert lines[0] == "Basis"
        assert lines[1] == "1,e1"
        assert lines[3] == "-1"
        assert lines[4] == "Cayley"
        assert lines[-1].split() == ["e1", "-1"]

    def test_dual_remap_is_a_permutation(self):
        tables = _tables(p=3, r=1)
        assert sorted(tables.dual_index.tolist()) == list(range(tables.dim))
        assert set(np.unique(tables.dual_sign).tolist()) <= {-1, 1}
        # Scalar <-> pseudoscalar
        assert int(tables.dual_index[0]) == tables.dim - 1
