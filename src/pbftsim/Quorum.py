"""
=========================
Quorum
=========================

Last update: October 2026

Quorum class. Byzantine-fault-tolerant quorum arithmetic for a cluster of N nodes.

A cluster of N = 3f + 1 nodes tolerates f = floor((N - 1) / 3) Byzantine nodes. A value is certified when at
least 2f + 1 nodes report it: even if all f tolerated Byzantine nodes are among them, the honest supporters still
outnumber the Byzantine ones.
"""
from collections import Counter

from pbftsim.Log import log

class Quorum():

    def __init__(self, n_nodes):
        assert n_nodes >= 1, 'A quorum needs at least one node'
        self.n_nodes = n_nodes

        log.quorum.info('Initialized quorum for %d nodes, f = %d, threshold = %d.',
                        self.n_nodes, self.fault_tolerance, self.threshold)

    def __repr__(self):
        return '[Quorum: n_nodes=%d, f=%d, threshold=%d]' % (self.n_nodes, self.fault_tolerance, self.threshold)

    @staticmethod
    def get_fault_tolerance(n_nodes):
        """
        numNodes = 3f + 1, so f = (numNodes - 1) / 3 rounded down.
        """
        return (n_nodes - 1) // 3

    @classmethod
    def get_threshold(cls, n_nodes):
        return 2 * cls.get_fault_tolerance(n_nodes) + 1

    @property
    def fault_tolerance(self):
        return self.get_fault_tolerance(self.n_nodes)

    @property
    def threshold(self):
        return self.get_threshold(self.n_nodes)

    def is_byzantine_fault_tolerant(self, byzantine_count):
        return byzantine_count <= self.fault_tolerance

    @staticmethod
    def count_values(values):
        # Counter keeps first-encounter order, which is what the tie-break below relies on
        return Counter(value for value in values if value is not None)

    def get_majority(self, values):
        """
        Return (value, count) for the most frequent value, or (None, 0) if no node holds a value.
        Ties go to the value encountered first in `values`.
        """
        counts = self.count_values(values)
        if not counts:
            return None, 0
        majority, count = counts.most_common(1)[0]
        return majority, count

    def check_threshold(self, values):
        """
        Return the majority value if it reaches the 2f + 1 threshold, otherwise None.
        """
        majority, count = self.get_majority(values)

        if majority is not None and count >= self.threshold:
            log.quorum.info('Quorum reached on %s with %d/%d votes (threshold %d).',
                            majority, count, self.n_nodes, self.threshold)
            return majority

        log.quorum.warning('No quorum: majority %s has %d/%d votes, threshold is %d.',
                           majority, count, self.n_nodes, self.threshold)
        return None
