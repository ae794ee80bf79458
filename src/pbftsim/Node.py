"""
=========================
Node
=========================

Last update: October 2026

Node class. One participant of the PBFT cluster.

A node holds the round-local state of a participant (its NodeState and the value it reports) and emits the
messages of each phase. The leader is an ordinary node with the `is_leader` flag set; the only thing the flag
changes is that the leader fans the proposed value out to its peers at pre-prepare.

Documentation:

[1] Miguel Castro and Barbara Liskov, Practical Byzantine Fault Tolerance, OSDI 1999.
"""
from collections import namedtuple

from pbftsim.FaultModel import FaultModel
from pbftsim.Log import log
from pbftsim.Message import Message, MessageType
from pbftsim.Phase import NodeState

NodeSnapshot = namedtuple('NodeSnapshot', ['id', 'state', 'value', 'is_byzantine', 'view', 'is_leader'])


class Node():

    def __init__(self, node_id, fault_model=None, is_byzantine=False, view=0):
        self._id = node_id
        self.fault_model = fault_model if fault_model is not None else FaultModel()
        self.is_byzantine = is_byzantine
        self.is_leader = False
        self.view = view

        self._state = NodeState.IDLE
        self._value = None
        # The value this node actually holds: the submitted value for the leader, the pre-prepared one otherwise
        self._received_value = None

        log.node.info('Initialized node %s, byzantine = %s, view = %s.', self._id, self.is_byzantine, self.view)

    def __repr__(self):
        return '[Node: %s]' % self._id

    def __eq__(self, other):
        if isinstance(other, Node):
            return self._id == other._id
        return self._id == other

    def __hash__(self):
        return hash(self._id)

    @property
    def id(self):
        return self._id

    @property
    def state(self):
        return self._state

    @property
    def value(self):
        return self._value

    @property
    def received_value(self):
        return self._received_value

    def snapshot(self):
        return NodeSnapshot(self._id, self._state, self._value, self.is_byzantine, self.view, self.is_leader)

    def _advance(self, new_state):
        if not self._state.can_advance_to(new_state):
            raise RuntimeError(f"Node {self._id} cannot move from {self._state.value} back to {new_state.value}")
        log.node.debug('Node %s: %s -> %s', self._id, self._state.value, new_state.value)
        self._state = new_state

    def _fan_out(self, message_type, value, peers):
        return [Message(self._id, peer, message_type, value, self.view) for peer in peers if peer != self._id]

    def reset(self):
        self._state = NodeState.IDLE
        self._value = None
        self._received_value = None
        log.node.debug('Node %s reset.', self._id)

    def propose(self, value):
        assert self.is_leader, f"Node {self._id} is not the leader and cannot propose"

        self._advance(NodeState.PROPOSED)
        self._received_value = value
        # A Byzantine leader lies from the very first broadcast
        self._value = self.fault_model.report(value, self.is_byzantine)

        log.node.info('Node %s proposed %s (client value %s).', self._id, self._value, value)

    def pre_prepare(self, value, peers=()):
        """
        The leader broadcasts its stored value to every peer. Any other node just stores the value it received.
        """
        if self.is_leader:
            messages = self._fan_out(MessageType.PRE_PREPARE, self._value, peers)
            self._advance(NodeState.PRE_PREPARED)
            log.node.info('Leader %s sent %d pre-prepare messages with value %s.',
                          self._id, len(messages), self._value)
            return messages

        self._advance(NodeState.PRE_PREPARED)
        self._received_value = value
        self._value = value
        return []

    def prepare(self, value, peers):
        reported = self.fault_model.report(value, self.is_byzantine)
        self._advance(NodeState.PREPARED)
        self._value = reported

        messages = self._fan_out(MessageType.PREPARE, reported, peers)
        log.node.debug('Node %s prepared %s, sent %d messages.', self._id, reported, len(messages))
        return messages

    def commit(self, value, peers):
        reported = self.fault_model.report(value, self.is_byzantine)
        self._advance(NodeState.COMMITTED)
        self._value = reported

        messages = self._fan_out(MessageType.COMMIT, reported, peers)
        log.node.debug('Node %s committed %s, sent %d messages.', self._id, reported, len(messages))
        return messages
