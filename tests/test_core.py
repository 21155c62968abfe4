# Cayley: Clifford Algebra Generator and Literal Translator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.

import torch
import unittest
import math
from core.algebra import CliffordAlgebra
from core.metric import induced_norm, inner_product

class TestCliffordAlgebra(unittest.TestCase):
    def setUp(self):
        self.device = 'cpu'

    def test_euclidean_2d_cayley(self):
        # E2: e1*e1=1, e2*e2=1
        # Basis: 1, e1, e2, e12
        alg = CliffordAlgebra(p=2, q=0, device=self.device)
        self.assertEqual(alg.basis, ['1', 'e1', 'e2', 'e12'])

        # 1 * 2 (e1 * e2) -> 3 (e12), sign +
        self.assertEqual(int(alg.tables.gp_index[1, 2]), 3)
        self.assertEqual(int(alg.tables.gp_sign[1, 2]), 1)

        # 2 * 1 (e2 * e1) -> 3 (e12), sign -
        self.assertEqual(int(alg.tables.gp_index[2, 1]), 3)
        self.assertEqual(int(alg.tables.gp_sign[2, 1]), -1)

    def test_geometric_product_simple(self):
        alg = CliffordAlgebra(p=2, q=0, device=self.device)

        # A = 2*e1
        A = torch.zeros(1, 4)
        A[0, 1] = 2.0

        # B = 3*e2
        B = torch.zeros(1, 4)
        B[0, 2] = 3.0

        # C = A*B = 6*e12
        C = alg.geometric_product(A, B)
        self.assertEqual(C.shape, (1, 4))
        self.assertEqual(C[0, 3].item(), 6.0)
        self.assertEqual(C[0, 0].item(), 0.0)

    def test_rotor_exp(self):
        # Rotation in 2D plane by 90 degrees
        # R = exp(-theta/2 * e12), theta = pi/2
        alg = CliffordAlgebra(p=2, q=0, device=self.device)

        B = torch.zeros(1, 4)
        B[0, 3] = 1.0 # unit bivector

        theta = math.pi / 2
        R = alg.exp(-0.5 * theta * B)

        # R = cos(pi/4) - sin(pi/4)e12
        val = math.cos(math.pi/4)
        self.assertAlmostEqual(R[0, 0].item(), val, places=5)
        self.assertAlmostEqual(R[0, 3].item(), -val, places=5)

        # Rotate e1 -> e2
        v = torch.zeros(1, 4)
        v[0, 1] = 1.0

        v_prime = alg.geometric_product(alg.geometric_product(R, v), alg.reverse(R))
        self.assertAlmostEqual(v_prime[0, 1].item(), 0.0, places=5)
        self.assertAlmostEqual(v_prime[0, 2].item(), 1.0, places=5)

        # sandwich uses the Clifford conjugate, identical to the reverse here
        w = alg.sandwich(R, v)
        self.assertTrue(torch.allclose(w, v_prime, atol=1e-6))

    def test_batched_product_broadcasts(self):
        alg = CliffordAlgebra(p=3, device=self.device)
        A = torch.randn(5, 1, alg.dim)
        B = torch.randn(1, 4, alg.dim)
        C = alg.mul(A, B)
        self.assertEqual(C.shape, (5, 4, alg.dim))
        self.assertTrue(torch.allclose(C[2, 3], alg.mul(A[2, 0], B[0, 3]), atol=1e-5))

    def test_induced_norm_of_rotor(self):
        alg = CliffordAlgebra(p=3, device=self.device)
        B = torch.zeros(alg.dim)
        B[4] = 0.3
        B[6] = -0.7
        R = alg.exp(B)
        self.assertAlmostEqual(induced_norm(alg, R).item(), 1.0, places=5)
        self.assertAlmostEqual(inner_product(alg, R, alg.reverse(R)).item(), 1.0, places=5)

if __name__ == '__main__':
    unittest.main()
