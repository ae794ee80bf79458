"""
=========================
QuorumTest
=========================

Last update: October 2026

Tests of the 2f + 1 quorum arithmetic and majority selection.
"""

import unittest

from pbftsim.Quorum import Quorum

class QuorumTest(unittest.TestCase):

    def test_threshold_table(self):
        expected = {4: (1, 3), 7: (2, 5), 10: (3, 7), 13: (4, 9)}
        for n_nodes, (f, threshold) in expected.items():
            quorum = Quorum(n_nodes)
            self.assertEqual(quorum.fault_tolerance, f)
            self.assertEqual(quorum.threshold, threshold)
            self.assertEqual(Quorum.get_threshold(n_nodes), 2 * ((n_nodes - 1) // 3) + 1)

    def test_small_clusters_have_threshold_one(self):
        for n_nodes in (1, 2, 3):
            self.assertEqual(Quorum(n_nodes).fault_tolerance, 0)
            self.assertEqual(Quorum(n_nodes).threshold, 1)

    def test_single_node_reaches_quorum_alone(self):
        self.assertEqual(Quorum(1).check_threshold(["B"]), "B")

    def test_quorum_reached(self):
        quorum = Quorum(4)
        self.assertEqual(quorum.check_threshold(["A", "A", "B", "A"]), "A")

    def test_quorum_not_reached_on_split(self):
        quorum = Quorum(4)
        self.assertIsNone(quorum.check_threshold(["A", "B", "B", "A"]))

    def test_missing_values_are_not_counted(self):
        quorum = Quorum(4)
        # Only two nodes hold a value, the threshold is still computed for all four
        self.assertIsNone(quorum.check_threshold(["A", None, None, "A"]))
        self.assertEqual(quorum.get_majority([None, "A", None, "A"]), ("A", 2))

    def test_no_values(self):
        quorum = Quorum(4)
        self.assertEqual(quorum.get_majority([None, None, None, None]), (None, 0))
        self.assertIsNone(quorum.check_threshold([None, None, None, None]))

    def test_ties_go_to_first_encountered_value(self):
        quorum = Quorum(4)
        self.assertEqual(quorum.get_majority(["B", "A", "A", "B"]), ("B", 2))
        self.assertEqual(quorum.get_majority(["A", "B", "B", "A"]), ("A", 2))

    def test_byzantine_fault_tolerance(self):
        quorum = Quorum(7)
        self.assertTrue(quorum.is_byzantine_fault_tolerant(0))
        self.assertTrue(quorum.is_byzantine_fault_tolerant(2))
        self.assertFalse(quorum.is_byzantine_fault_tolerant(3))

if __name__ == '__main__':
    unittest.main()
