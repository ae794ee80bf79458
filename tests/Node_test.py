"""
=========================
NodeTest
=========================

Last update: October 2026

Tests of the per-node phase transitions and of the messages a node emits.
"""

import unittest

from pbftsim.FaultModel import FaultModel
from pbftsim.Message import MessageType
from pbftsim.Node import Node
from pbftsim.Phase import NodeState

PEERS = [0, 1, 2, 3]

class NodeTest(unittest.TestCase):

    def setUp(self):
        self.fault_model = FaultModel(seed=1)
        self.leader = Node(0, fault_model=self.fault_model)
        self.leader.is_leader = True
        self.honest = Node(1, fault_model=self.fault_model)
        self.byzantine = Node(2, fault_model=self.fault_model, is_byzantine=True)

    def test_node_state_order(self):
        self.assertEqual([state.order for state in NodeState], [0, 1, 2, 3, 4])
        self.assertTrue(NodeState.IDLE.can_advance_to(NodeState.PRE_PREPARED))
        self.assertFalse(NodeState.COMMITTED.can_advance_to(NodeState.IDLE))
        self.assertFalse(NodeState.PREPARED.can_advance_to(NodeState.PREPARED))

    def test_initial_state(self):
        self.assertEqual(self.honest.state, NodeState.IDLE)
        self.assertIsNone(self.honest.value)
        self.assertFalse(self.honest.is_leader)

    def test_honest_leader_propose_and_fan_out(self):
        self.leader.propose("A")
        self.assertEqual(self.leader.state, NodeState.PROPOSED)
        self.assertEqual(self.leader.value, "A")

        messages = self.leader.pre_prepare("A", PEERS)
        self.assertEqual(self.leader.state, NodeState.PRE_PREPARED)
        self.assertEqual([message.recipient for message in messages], [1, 2, 3])
        self.assertTrue(all(message.type == MessageType.PRE_PREPARE for message in messages))
        self.assertTrue(all(message.value == "A" and message.sender == 0 for message in messages))

    def test_byzantine_leader_lies_at_propose(self):
        self.byzantine.is_leader = True
        self.byzantine.propose("A")
        self.assertEqual(self.byzantine.value, "B")
        self.assertEqual(self.byzantine.received_value, "A")

        messages = self.byzantine.pre_prepare("A", PEERS)
        self.assertTrue(all(message.value == "B" for message in messages))

    def test_only_leader_can_propose(self):
        with self.assertRaises(AssertionError):
            self.honest.propose("A")

    def test_receiver_pre_prepare_emits_nothing(self):
        messages = self.honest.pre_prepare("A", PEERS)
        self.assertEqual(messages, [])
        self.assertEqual(self.honest.state, NodeState.PRE_PREPARED)
        self.assertEqual(self.honest.value, "A")

    def test_prepare_and_commit_fan_out(self):
        self.honest.pre_prepare("A")
        prepare_messages = self.honest.prepare("A", PEERS)
        self.assertEqual(self.honest.state, NodeState.PREPARED)
        self.assertEqual(len(prepare_messages), len(PEERS) - 1)
        self.assertNotIn(1, [message.recipient for message in prepare_messages])

        commit_messages = self.honest.commit("A", PEERS)
        self.assertEqual(self.honest.state, NodeState.COMMITTED)
        self.assertTrue(all(message.type == MessageType.COMMIT for message in commit_messages))
        self.assertEqual(len(commit_messages), len(PEERS) - 1)

    def test_byzantine_reports_are_inverted_consistently(self):
        self.byzantine.pre_prepare("A")
        prepare_messages = self.byzantine.prepare(self.byzantine.received_value, PEERS)
        commit_messages = self.byzantine.commit(self.byzantine.received_value, PEERS)

        self.assertTrue(all(message.value == "B" for message in prepare_messages + commit_messages))
        self.assertEqual(self.byzantine.value, "B")

    def test_state_never_regresses(self):
        self.honest.pre_prepare("A")
        self.honest.prepare("A", PEERS)
        self.honest.commit("A", PEERS)
        with self.assertRaises(RuntimeError):
            self.honest.prepare("A", PEERS)
        with self.assertRaises(RuntimeError):
            self.honest.pre_prepare("A")
        self.assertEqual(self.honest.state, NodeState.COMMITTED)

    def test_reset(self):
        self.byzantine.view = 3
        self.byzantine.pre_prepare("A")
        self.byzantine.reset()
        self.assertEqual(self.byzantine.state, NodeState.IDLE)
        self.assertIsNone(self.byzantine.value)
        self.assertIsNone(self.byzantine.received_value)
        # Byzantine flag and view survive a reset
        self.assertTrue(self.byzantine.is_byzantine)
        self.assertEqual(self.byzantine.view, 3)

    def test_messages_carry_node_view(self):
        self.honest.view = 2
        self.honest.pre_prepare("A")
        messages = self.honest.prepare("A", PEERS)
        self.assertTrue(all(message.view == 2 for message in messages))

    def test_snapshot(self):
        self.honest.pre_prepare("A")
        snapshot = self.honest.snapshot()
        self.assertEqual(snapshot.id, 1)
        self.assertEqual(snapshot.state, NodeState.PRE_PREPARED)
        self.assertEqual(snapshot.value, "A")
        self.assertFalse(snapshot.is_byzantine)

if __name__ == '__main__':
    unittest.main()
