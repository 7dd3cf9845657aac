from __future__ import annotations

import unittest

import numpy as np

from coding_gain.channel import bpsk
from coding_gain.code_linear import (
    DEFAULT_GENERATOR,
    LinearBlockCode,
    default_code,
    enumerate_vectors,
)
from coding_gain.errors import CodeConstructionError, DimensionMismatchError


class TestEnumerateVectors(unittest.TestCase):
    def test_counting_order(self) -> None:
        np.testing.assert_array_equal(enumerate_vectors(2), [[0, 0], [0, 1], [1, 0], [1, 1]])

    def test_row_is_binary_representation_of_index(self) -> None:
        vectors = enumerate_vectors(6)
        self.assertEqual(vectors.shape, (64, 6))
        for i, v in enumerate(vectors):
            self.assertEqual(int("".join(map(str, v.tolist())), 2), i)

    def test_size_zero_is_empty(self) -> None:
        self.assertEqual(len(enumerate_vectors(0)), 0)

    def test_negative_size(self) -> None:
        with self.assertRaises(ValueError):
            enumerate_vectors(-1)


class TestDefaultCode(unittest.TestCase):
    def setUp(self) -> None:
        self.code = default_code()

    def test_parameters(self) -> None:
        self.assertEqual((self.code.n, self.code.k), (10, 6))
        self.assertAlmostEqual(self.code.rate, 0.6)
        self.assertEqual(len(self.code), 64)
        self.assertEqual(len(self.code.codebook), 64)
        self.assertIs(default_code(), self.code)

    def test_encode_zero_and_unit_vectors(self) -> None:
        np.testing.assert_array_equal(self.code.encode([0] * 6), [0] * 10)
        np.testing.assert_array_equal(self.code.encode([1, 0, 0, 0, 0, 0]), DEFAULT_GENERATOR[0])

    def test_encode_wrong_length(self) -> None:
        with self.assertRaises(DimensionMismatchError):
            self.code.encode([1, 0, 1])

    def test_noiseless_round_trip(self) -> None:
        for message in self.code.messages:
            codeword = self.code.encode(message)
            np.testing.assert_array_equal(self.code.decode_hard(codeword), codeword)
            np.testing.assert_array_equal(self.code.decode_soft(bpsk(codeword)), codeword)
            np.testing.assert_array_equal(self.code.decode(codeword), message)
            np.testing.assert_array_equal(self.code.source_of(codeword), message)

    def test_min_distance(self) -> None:
        self.assertEqual(self.code.min_distance, 3)
        self.assertEqual(self.code.correctable_errors, 1)

    def test_corrects_every_single_bit_error(self) -> None:
        for message, codeword in zip(self.code.messages, self.code.codewords):
            for pos in range(self.code.n):
                received = codeword.copy()
                received[pos] ^= 1
                np.testing.assert_array_equal(self.code.decode(received, decoder="hard"), message)

    def test_batch_decode(self) -> None:
        idx = self.code.decode_hard_index(self.code.codewords)
        np.testing.assert_array_equal(idx, np.arange(64))
        idx = self.code.decode_soft_index(bpsk(self.code.codewords))
        np.testing.assert_array_equal(idx, np.arange(64))

    def test_parity_check(self) -> None:
        self.assertTrue(np.all(self.code.is_codeword(self.code.codewords)))
        received = self.code.codewords[5].copy()
        received[2] ^= 1
        self.assertFalse(self.code.is_codeword(received))
        self.assertTrue(np.any(self.code.syndrome(received)))

    def test_source_of_non_codeword(self) -> None:
        with self.assertRaises(KeyError):
            self.code.source_of([1] + [0] * 9)

    def test_decode_rejects_wrong_width(self) -> None:
        with self.assertRaises(DimensionMismatchError):
            self.code.decode_hard([0] * 9)
        with self.assertRaises(DimensionMismatchError):
            self.code.decode_soft(np.zeros((3, 11)))

    def test_hard_decode_rejects_non_binary_input(self) -> None:
        with self.assertRaises(ValueError):
            self.code.decode_hard([0.9] * 10)
        with self.assertRaises(ValueError):
            self.code.decode_hard_index([0.5] + [0] * 9)
        with self.assertRaises(ValueError):
            self.code.decode([[2] * 10], decoder="hard")

    def test_unknown_decoder(self) -> None:
        with self.assertRaises(ValueError):
            self.code.decode([0] * 10, decoder="chase")


class TestCodeConstruction(unittest.TestCase):
    def test_rank_deficient_generator_is_rejected(self) -> None:
        with self.assertRaises(CodeConstructionError):
            LinearBlockCode([[1, 0, 1, 1], [1, 0, 1, 1]])

    def test_parity_check_must_annihilate_code(self) -> None:
        with self.assertRaises(CodeConstructionError):
            LinearBlockCode(DEFAULT_GENERATOR, [[1] + [0] * 9])

    def test_syndrome_needs_parity_check(self) -> None:
        code = LinearBlockCode(DEFAULT_GENERATOR)
        with self.assertRaises(ValueError):
            code.syndrome([0] * 10)

    def test_ties_go_to_first_codeword(self) -> None:
        code = LinearBlockCode([[1, 1, 0, 0], [0, 0, 1, 1]])
        # 1000 is one flip from both 0000 and 1100
        self.assertEqual(code.decode_hard_index([1, 0, 0, 0]), 0)
        self.assertEqual(code.decode_soft_index([0.0, 0.0, 0.0, 0.0]), 0)
        # 0011 and 1111 correlate equally with this
        self.assertEqual(code.decode_soft_index([0.0, 0.0, 1.0, 1.0]), 1)


if __name__ == "__main__":
    unittest.main()
