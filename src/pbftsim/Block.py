"""
=========================
Block
=========================

Last update: October 2026

Block class. One entry of the decision log.
"""

from pbftsim.Log import log

class Block():
    """
    A decided value:
      - number: position in the decision log
      - value: the quorum-agreed value
      - is_subverted: True when the agreed value differs from the value the client submitted,
        i.e. the Byzantine nodes forced a different outcome
      - view: view under which the value was decided
    """

    __slots__ = ('_number', '_value', '_is_subverted', '_view')

    def __init__(self, *, number, value, is_subverted, view=0):
        object.__setattr__(self, '_number', number)
        object.__setattr__(self, '_value', value)
        object.__setattr__(self, '_is_subverted', is_subverted)
        object.__setattr__(self, '_view', view)

        log.ledger.debug('Created %s', self)

    def __setattr__(self, name, value):
        raise AttributeError(f"Block is immutable, cannot set {name}")

    def __repr__(self):
        return f"[Block  number={self._number}  value={self._value}  subverted={self._is_subverted}]"

    def __eq__(self, other):
        if not isinstance(other, Block):
            return False
        return (
            self._number == other._number and
            self._value == other._value and
            self._is_subverted == other._is_subverted and
            self._view == other._view
        )

    def __hash__(self):
        return hash((self._number, self._value, self._is_subverted, self._view))

    @property
    def number(self):
        return self._number

    @property
    def value(self):
        return self._value

    @property
    def is_subverted(self):
        return self._is_subverted

    @property
    def view(self):
        return self._view

    def to_dict(self):
        return {'number': self._number,
                'value': self._value,
                'is_subverted': self._is_subverted,
                'view': self._view}
