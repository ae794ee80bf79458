"""
=========================
Phase
=========================

Last update: October 2026

Round-level phases of the consensus engine and the local state of a single node.
"""

import enum

class Phase(enum.Enum):
    IDLE = "idle"
    PROPOSE = "propose"
    PRE_PREPARE = "pre-prepare"
    PREPARE = "prepare"
    COMMIT = "commit"
    VIEW_CHANGE = "view-change"

    def __repr__(self):
        return self.name


class NodeState(enum.Enum):
    IDLE = "idle"
    PROPOSED = "proposed"
    PRE_PREPARED = "pre-prepared"
    PREPARED = "prepared"
    COMMITTED = "committed"

    @property
    def order(self):
        return list(self.__class__).index(self)

    def can_advance_to(self, other):
        # A node may skip states (non-leaders never pass through PROPOSED) but never go back
        return other.order > self.order

    def __repr__(self):
        return self.name
