"""
=========================
Ledger
=========================

Last update: October 2026

Ledger class. Append-only decision log ("blockchain") of the values the cluster agreed on.
"""

import pandas as pd

from pbftsim.Block import Block
from pbftsim.Log import log

COLUMNS = ['number', 'value', 'is_subverted', 'view']

class Ledger():

    def __init__(self):
        self._blocks = []

        log.ledger.info('Initialized ledger.')

    def __repr__(self):
        return '[Ledger, blocks = %s]' % self._blocks

    def __len__(self):
        return len(self._blocks)

    def __iter__(self):
        return iter(self._blocks.copy())

    def __getitem__(self, index):
        return self._blocks[index]

    def append(self, value, submitted_value, view=0):
        """
        Append the agreed value as a new block. The block number is the length of the log at append time.
        """
        block = Block(number=len(self._blocks),
                      value=value,
                      is_subverted=value != submitted_value,
                      view=view)
        self._blocks.append(block)

        if block.is_subverted:
            log.ledger.warning('Block %d appended with value %s, but the client submitted %s!',
                               block.number, value, submitted_value)
        else:
            log.ledger.info('Block %d appended with value %s.', block.number, value)
        return block

    @property
    def blocks(self):
        return self._blocks.copy()

    @property
    def subverted_blocks(self):
        return [block for block in self._blocks if block.is_subverted]

    def get_tip(self):
        if not self._blocks:
            return None
        return self._blocks[-1]

    def to_dataframe(self):
        return pd.DataFrame([block.to_dict() for block in self._blocks], columns=COLUMNS)
