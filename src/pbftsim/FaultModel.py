"""
=========================
FaultModel
=========================

Last update: October 2026

FaultModel class. Decides which nodes are Byzantine and how a Byzantine node falsifies the value it holds.

The only adversarial strategy is value inversion. For the default two-valued domain ("A", "B") inversion maps a
value to its complement. For larger domains a value is mapped to the next value of the domain (cyclically), which
keeps the transform deterministic but means that applying it twice is no longer the identity.
"""

import numpy as np

from pbftsim.Log import log

VALUES_DEFAULT = ("A", "B")

class FaultModel():

    def __init__(self, values=VALUES_DEFAULT, rng=None, seed=None):

        assert len(set(values)) >= 2, 'Fault model needs at least two distinct values'

        self._values = tuple(values)
        self._rng = rng if rng is not None else np.random.default_rng(seed)

        log.fault.info('Initialized fault model, values = %s.', self._values)

    def __repr__(self):
        return '[FaultModel, values = %s]' % (self._values,)

    @property
    def values(self):
        return self._values

    @property
    def rng(self):
        return self._rng

    def decide_byzantine(self, probability):
        """
        Bernoulli trial with success probability `probability`.
        """
        assert 0.0 <= probability <= 1.0
        is_byzantine = bool(self._rng.random() < probability)
        log.fault.debug('Byzantine draw with p = %s -> %s', probability, is_byzantine)
        return is_byzantine

    def invert(self, value):
        if value not in self._values:
            raise ValueError(f"Value {value!r} is not part of the domain {self._values}.")
        index = self._values.index(value)
        inverted = self._values[(index + 1) % len(self._values)]
        log.fault.debug('Inverted value %s -> %s', value, inverted)
        return inverted

    def report(self, value, is_byzantine):
        # What a node actually reports when it holds `value`
        return self.invert(value) if is_byzantine else value
