"""
Tests for matching.similarity
"""
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from matching.similarity import levenshtein_distance, similarity


class TestLevenshteinDistance(unittest.TestCase):
    def test_identical(self):
        self.assertEqual(levenshtein_distance('山田太郎', '山田太郎'), 0)

    def test_unit_costs(self):
        self.assertEqual(levenshtein_distance('kitten', 'sitting'), 3)
        self.assertEqual(levenshtein_distance('', 'abc'), 3)
        self.assertEqual(levenshtein_distance('abc', ''), 3)

    def test_single_substitution_in_kanji(self):
        self.assertEqual(levenshtein_distance('山田太郎', '山田大郎'), 1)


class TestSimilarity(unittest.TestCase):
    def test_both_empty_is_identical(self):
        self.assertEqual(similarity('', ''), 1.0)

    def test_one_empty(self):
        self.assertEqual(similarity('', 'abc'), 0.0)

    def test_normalized_by_longer_string(self):
        self.assertAlmostEqual(similarity('山田太郎', '山田大郎'), 0.75)

    def test_symmetric(self):
        self.assertEqual(similarity('abcd', 'abx'), similarity('abx', 'abcd'))

    def test_range(self):
        for a, b in [('a', 'b'), ('abc', 'abd'), ('佐藤', '佐藤花子')]:
            value = similarity(a, b)
            self.assertGreaterEqual(value, 0.0)
            self.assertLessEqual(value, 1.0)


if __name__ == '__main__':
    unittest.main()
