"""Tests for the generated operations of numeric and symbolic algebras.

Covers:
- products, involutions and grade maps
- dual / undual for degenerate and non-degenerate metrics, regressive product
- closed-form and solved inverses, powers, exponentials and norms
- symbolic coefficients, named (mix) access and the large-algebra kernel
"""

import math

import pytest
import torch

from core.algebra import CliffordAlgebra
from core.coefficients import CoefficientKind, Sym
from core.errors import SingularElementError, UnsupportedOperationError
from core.multivector import Multivector
from core.synth import BINARY_OPERATIONS, OperationSet


def _close(a, b, atol=1e-5):
    return torch.allclose(torch.as_tensor(a, dtype=torch.float64),
                          torch.as_tensor(b, dtype=torch.float64), atol=atol)


def _one(algebra):
    return algebra.scalar(1.0)


# ── Products and involutions ──────────────────────────────────────────

class TestProducts:

    @pytest.fixture
    def algebra(self):
        return CliffordAlgebra(3)

    def test_generated_source_lists_components(self):
        algebra = CliffordAlgebra(0, 1)
        algebra.ops.mul
        source = algebra.ops.sources["mul"]
        assert "a[..., 0]*b[..., 0] - a[..., 1]*b[..., 1]" in source

    def test_complex_multiplication(self):
        algebra = CliffordAlgebra(0, 1)
        result = algebra.mul([3.0, 2.0], [1.0, 4.0])
        assert result.tolist() == [-5.0, 14.0]

    def test_wedge_and_dot(self, algebra):
        e1, e2 = algebra.blade("e1"), algebra.blade("e2")
        assert algebra.wedge(e1, e2)[algebra.index["e12"]].item() == 1.0
        assert algebra.wedge(e1, e1).abs().sum().item() == 0.0
        assert algebra.dot(e1, e1)[0].item() == 1.0
        e12 = algebra.wedge(e1, e2)
        # e1 . e12 = e2
        assert _close(algebra.dot(e1, e12), e2)

    def test_scalars_lift(self, algebra):
        result = algebra.add(2, algebra.blade("e3"))
        assert result[0].item() == 2.0
        assert result[algebra.index["e3"]].item() == 1.0

    def test_zero_product_keeps_batch_shape(self, algebra):
        a = torch.zeros(4, algebra.dim)
        b = torch.zeros(4, algebra.dim)
        assert algebra.wedge(a, b).shape == (4, algebra.dim)

    def test_reverse_involute_conjugate(self, algebra):
        x = torch.arange(1.0, 9.0)
        assert algebra.reverse(x).tolist() == [1, 2, 3, 4, -5, -6, -7, -8]
        assert algebra.involute(x).tolist() == [1, -2, -3, -4, 5, 6, 7, -8]
        assert algebra.conjugate(x).tolist() == [1, -2, -3, -4, -5, -6, -7, 8]

    def test_grade_map(self, algebra):
        x = torch.ones(algebra.dim)
        assert algebra.grade_map(x, 2).tolist() == [1, 1, 1, 1, -1, -1, -1, 1]

    def test_grade_projection_and_even(self, algebra):
        x = torch.arange(1.0, 9.0)
        assert algebra.grade_projection(x, 1).tolist() == [0, 2, 3, 4, 0, 0, 0, 0]
        assert algebra.even(x).tolist() == [1, 0, 0, 0, 5, 6, 7, 0]

    def test_reverse_is_anti_automorphism(self, algebra):
        torch.manual_seed(0)
        a, b = torch.randn(2, algebra.dim, dtype=torch.float64)
        lhs = algebra.reverse(algebra.mul(a, b))
        rhs = algebra.mul(algebra.reverse(b), algebra.reverse(a))
        assert _close(lhs, rhs, atol=1e-10)

    def test_associativity_mixed_signature(self):
        algebra = CliffordAlgebra(2, 1, 1, dtype="float64")
        torch.manual_seed(1)
        a, b, c = torch.randn(3, algebra.dim, dtype=torch.float64)
        lhs = algebra.mul(algebra.mul(a, b), c)
        rhs = algebra.mul(a, algebra.mul(b, c))
        assert _close(lhs, rhs, atol=1e-10)


# ── Duality ───────────────────────────────────────────────────────────

class TestDuality:

    def test_double_dual_negates_in_3d(self):
        algebra = CliffordAlgebra(3)
        v = algebra.vector(1.0, 2.0, 3.0)
        assert _close(algebra.dual(algebra.dual(v)), -v)

    def test_dual_is_pseudoscalar_product(self):
        algebra = CliffordAlgebra(3)
        v = algebra.blade("e1")
        assert _close(algebra.dual(v), algebra.mul(algebra.pseudoscalar(), v))

    def test_degenerate_dual_uses_remap(self):
        algebra = CliffordAlgebra(2, 0, 1)
        d = algebra.dual(algebra.blade("e0"))
        expected = algebra.blade("e12")
        assert _close(d, expected)
        assert algebra.dual(algebra.scalar(1.0))[algebra.dim - 1].item() == 1.0

    def test_undual_inverts_dual(self):
        algebra = CliffordAlgebra(3, 0, 1)
        x = torch.arange(1.0, algebra.dim + 1)
        assert _close(algebra.undual(algebra.dual(x)), x)

    def test_vee_meets_planes_in_a_line(self):
        algebra = CliffordAlgebra(3)
        meet = algebra.vee(algebra.blade("e12"), algebra.blade("e23"))
        e2 = algebra.index["e2"]
        assert abs(meet[e2].item()) == 1.0
        others = [i for i in range(algebra.dim) if i != e2]
        assert meet[others].abs().sum().item() == 0.0

    def test_vee_with_pseudoscalar_is_identity(self):
        algebra = CliffordAlgebra(2, 0, 1)
        x = torch.arange(1.0, algebra.dim + 1)
        assert _close(algebra.vee(algebra.pseudoscalar(), x), x)


# ── Inverse, power, exponential ───────────────────────────────────────

class TestInverse:

    @pytest.mark.parametrize("signature", [
        (1, 0, 0), (0, 1, 0), (2, 0, 0), (1, 1, 0), (3, 0, 0), (2, 0, 1),
        (4, 0, 0), (1, 3, 0), (4, 1, 0), (3, 0, 1),
    ])
    def test_closed_form_inverse(self, signature):
        algebra = CliffordAlgebra(*signature, dtype="float64")
        torch.manual_seed(sum(signature))
        a = 0.3 * torch.randn(algebra.dim, dtype=torch.float64)
        a[0] = 3.0
        inv = algebra.inverse(a)
        assert _close(algebra.mul(a, inv), _one(algebra), atol=1e-8)

    def test_solved_inverse_above_five_dimensions(self):
        algebra = CliffordAlgebra(6, dtype="float64")
        a = algebra.add(2.0, algebra.blade("e1"))
        inv = algebra.inverse(a)
        assert _close(algebra.mul(a, inv), _one(algebra), atol=1e-8)

    def test_null_vector_is_singular(self):
        algebra = CliffordAlgebra(2, 0, 1)
        with pytest.raises(SingularElementError):
            algebra.inverse(algebra.blade("e0"))

    def test_zero_is_singular(self):
        algebra = CliffordAlgebra(2)
        with pytest.raises(SingularElementError):
            algebra.inverse(algebra.zeros())

    def test_rounded_null_element_is_singular(self):
        # 1 + 0.6e1 + 0.8e2 squares to 0; float32 leaves a normaliser of ~1e-8
        algebra = CliffordAlgebra(3)
        with pytest.raises(SingularElementError):
            algebra.inverse([1.0, 0.6, 0.8, 0.0, 0.0, 0.0, 0.0, 0.0])

    def test_small_elements_stay_invertible(self):
        algebra = CliffordAlgebra(3)
        a = torch.tensor([1e-3, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        assert _close(algebra.inverse(a), [1e3, 0, 0, 0, 0, 0, 0, 0], atol=1e-2)

    def test_division(self):
        algebra = CliffordAlgebra(0, 1)
        a = torch.tensor([1.0, 2.0])
        b = torch.tensor([3.0, -1.0])
        q = algebra.div(a, b)
        assert _close(algebra.mul(q, b), a)

    def test_left_division(self):
        algebra = CliffordAlgebra(2)
        a = torch.tensor([1.0, 2.0, 0.0, 1.0])
        b = torch.tensor([2.0, 0.0, 1.0, 0.0])
        q = algebra.ldiv(a, b)
        assert _close(algebra.mul(b, q), a)
        assert not _close(q, algebra.div(a, b))

    def test_pow(self):
        algebra = CliffordAlgebra(0, 1)
        z = torch.tensor([1.0, 1.0])
        # (1+i)^4 = -4
        assert _close(algebra.pow(z, 4), [-4.0, 0.0])
        assert _close(algebra.pow(z, 0), [1.0, 0.0])
        assert _close(algebra.pow(z, -1), algebra.inverse(z))
        with pytest.raises(UnsupportedOperationError):
            algebra.pow(z, 0.5)


class TestExp:

    def test_complex_exponential(self):
        algebra = CliffordAlgebra(0, 1)
        z = algebra.exp(torch.tensor([0.0, math.pi / 2]))
        assert _close(z, [0.0, 1.0], atol=1e-6)

    def test_scalar_part_factors_out(self):
        algebra = CliffordAlgebra(0, 1, dtype="float64")
        z = algebra.exp(torch.tensor([1.0, math.pi], dtype=torch.float64))
        assert _close(z, [-math.e, 0.0], atol=1e-8)

    def test_hyperbolic(self):
        algebra = CliffordAlgebra(1, dtype="float64")
        z = algebra.exp(torch.tensor([0.0, 0.5], dtype=torch.float64))
        assert _close(z, [math.cosh(0.5), math.sinh(0.5)], atol=1e-10)

    def test_null_bivector_translator(self):
        algebra = CliffordAlgebra(2, 0, 1)
        B = algebra.blade("e01", 0.5)
        T = algebra.exp(B)
        assert _close(T, algebra.add(1.0, B))

    def test_non_simple_bivector_uses_series(self):
        algebra = CliffordAlgebra(4, dtype="float64")
        B = algebra.add(algebra.blade("e12", 0.4), algebra.blade("e34", 0.7))
        product = algebra.mul(algebra.exp(B), algebra.exp(-B))
        assert _close(product, _one(algebra), atol=1e-8)

    def test_batched_mix_of_simple_and_series(self):
        algebra = CliffordAlgebra(4, dtype="float64")
        simple = algebra.blade("e12", 0.3)
        compound = algebra.add(algebra.blade("e12", 0.4), algebra.blade("e34", 0.7))
        out = algebra.exp(torch.stack([simple, compound]))
        assert _close(out[0], algebra.exp(simple), atol=1e-8)
        assert _close(out[1], algebra.exp(compound), atol=1e-8)


class TestNorms:

    def test_vector_length(self):
        algebra = CliffordAlgebra(2)
        assert algebra.length(algebra.vector(3.0, 4.0)).item() == pytest.approx(5.0)

    def test_vlength_ignores_metric(self):
        algebra = CliffordAlgebra(0, 2)
        assert algebra.vlength(algebra.vector(3.0, 4.0)).item() == pytest.approx(5.0)

    def test_normalized(self):
        algebra = CliffordAlgebra(3)
        n = algebra.normalized(algebra.vector(0.0, 3.0, 4.0))
        assert algebra.length(n).item() == pytest.approx(1.0)

    def test_normalized_null_element_is_unchanged(self):
        algebra = CliffordAlgebra(2, 0, 1)
        e0 = algebra.blade("e0", 2.0)
        assert _close(algebra.normalized(e0), e0)


# ── Symbolic coefficients ─────────────────────────────────────────────

class TestSymbolic:

    @pytest.fixture
    def algebra(self):
        return CliffordAlgebra(2, coefficients="symbolic")

    def test_vector_product(self, algebra):
        a = algebra.vector("a1", "a2")
        b = algebra.vector("b1", "b2")
        product = algebra.wrap(algebra.mul(a, b))
        assert product.to_string() == "a1*b1+a2*b2+(a1*b2-a2*b1)*e12"

    def test_numbers_and_symbols_mix(self, algebra):
        result = algebra.wrap(algebra.mul(2, algebra.vector("x", "y")))
        assert result.to_string() == "2*x*e1+2*y*e2"

    def test_inverse(self):
        algebra = CliffordAlgebra(1, coefficients="symbolic")
        inv = algebra.wrap(algebra.inverse(algebra.element("a", "b")))
        assert inv.to_string() == "a/(a*a-b*b)-b/(a*a-b*b)*e1"

    def test_zero_normaliser_is_singular(self, algebra):
        with pytest.raises(SingularElementError):
            algebra.inverse(algebra.zeros())

    def test_exp_is_unsupported(self, algebra):
        with pytest.raises(UnsupportedOperationError):
            algebra.exp(algebra.vector("x", "y"))

    def test_length_is_unsupported(self, algebra):
        with pytest.raises(UnsupportedOperationError):
            algebra.length(algebra.vector("x", "y"))

    def test_scale(self, algebra):
        v = algebra.vector("x", "y")
        assert algebra.wrap(algebra.scale(v, -1)).to_string() == "-x*e1-y*e2"
        assert algebra.wrap(algebra.scale(v, 3)).to_string() == "3*x*e1+3*y*e2"

    def test_sym_folding(self):
        assert str(Sym.total([(1, "a"), (-1, "b+c")])) == "a-(b+c)"
        assert str(Sym.mul("-x", "-y")) == "x*y"
        assert Sym.mul("0", "y").is_zero
        with pytest.raises(ZeroDivisionError):
            Sym.div("x", 0)


# ── Named access and the kernel path ──────────────────────────────────

class TestMixAndKernel:

    def test_subalgebra_elements_combine(self):
        plane = CliffordAlgebra(2)
        space = CliffordAlgebra(3, mix=True)
        v2 = plane.wrap(plane.vector(1.0, 2.0))
        v3 = space.wrap(space.vector(0.0, 0.0, 3.0))
        result = space.mul(v2, v3)
        assert result[space.index["e13"]].item() == 3.0
        assert result[space.index["e23"]].item() == 6.0

    def test_mix_accepts_any_named_object(self):
        class Point:
            def component(self, name):
                return {"e1": 1.0, "e2": 1.0}.get(name, 0)

        space = CliffordAlgebra(2, mix=True)
        result = space.mul(Point(), Point())
        assert result[0].item() == 2.0

    def test_foreign_element_without_mix(self):
        plane = CliffordAlgebra(2)
        space = CliffordAlgebra(3)
        with pytest.raises(TypeError):
            space.mul(plane.wrap(plane.vector(1.0, 0.0)), space.vector(1.0, 0.0, 0.0))

    def test_kernel_above_codegen_limit(self):
        algebra = CliffordAlgebra(7)
        result = algebra.mul(algebra.blade("e1"), algebra.blade("e2"))
        assert result[algebra.index["e12"]].item() == 1.0
        assert result.abs().sum().item() == 1.0
        assert algebra.ops.sources["mul"].startswith("# mul: index_add kernel")

    def test_binary_operations_compiled_at_construction(self):
        ops = OperationSet(CliffordAlgebra(1).tables, CoefficientKind.SYMBOLIC)
        assert set(BINARY_OPERATIONS) <= set(ops.sources)
        assert "reverse" not in ops.sources


# ── Multivector wrapper ───────────────────────────────────────────────

class TestMultivector:

    @pytest.fixture
    def algebra(self):
        return CliffordAlgebra(3)

    def test_operators(self, algebra):
        e1 = algebra.wrap(algebra.blade("e1"))
        e2 = algebra.wrap(algebra.blade("e2"))
        assert (e1 ^ e2).to_string() == "e12"
        assert (e2 * e1).to_string() == "-e12"
        assert (e1 << (e1 ^ e2)).to_string() == "e2"
        assert (2 * e1 + 1).to_string() == "1+2e1"
        assert (-e1).to_string() == "-e1"
        assert (~(e1 * e2)).to_string() == "-e12"
        assert (e1 ** 2).to_string() == "1"

    def test_component_access(self, algebra):
        x = algebra.wrap(algebra.vector(1.0, 2.0, 3.0))
        assert x["e2"].item() == 2.0
        x["e12"] = 5.0
        assert x[4].item() == 5.0
        assert x.component("e9") == 0
        with pytest.raises(KeyError):
            x["e9"]

    def test_equality(self, algebra):
        a = algebra.wrap(algebra.vector(1.0, 2.0, 3.0))
        assert a == algebra.vector(1.0, 2.0, 3.0)
        assert not (a == algebra.vector(1.0, 2.0, 4.0))

    def test_to_string_formatting(self, algebra):
        x = algebra.wrap(algebra.coeff(0, 0.5, "e23", -2.0, "e123", 1.0))
        assert x.to_string() == "0.5-2e23+e123"
        assert algebra.wrap(algebra.zeros()).to_string() == "0"

    def test_to_string_rejects_batches(self, algebra):
        with pytest.raises(ValueError):
            algebra.wrap(algebra.zeros(2)).to_string()

    def test_derived_elements(self, algebra):
        v = algebra.wrap(algebra.vector(0.0, 3.0, 4.0))
        assert v.length() == pytest.approx(5.0)
        assert v.normalized.length() == pytest.approx(1.0)
        assert _close((v * v.inverse).data, _one(algebra))
        assert v.grade(1) == v
