"""
=========================
Network
=========================

Last update: October 2026

Network class. Sets up the PBFT cluster: creates the nodes, draws which of them are Byzantine and connects every
node to every other node.
"""
import networkx as nx

from pbftsim.FaultModel import FaultModel
from pbftsim.Log import log
from pbftsim.Node import Node

class Network():

    def __init__(self, nodes):
        self._nodes = list(nodes)

        # Every node talks to every other node
        self._graph = nx.complete_graph([node.id for node in self._nodes])

        log.network.info('Initialized network with %d nodes and %d links.',
                         self._graph.number_of_nodes(), self._graph.number_of_edges())

    def __repr__(self):
        return '[Network: nodes=%s]' % self._nodes

    def __len__(self):
        return len(self._nodes)

    @property
    def nodes(self):
        return self._nodes

    @property
    def graph(self):
        return self._graph

    def get_node(self, node_id):
        return self._nodes[node_id]

    def peers(self, node_id):
        """
        Ids of every node `node_id` sends to, in ascending order.
        """
        return sorted(self._graph.neighbors(node_id))

    @property
    def byzantine_count(self):
        return sum(1 for node in self._nodes if node.is_byzantine)

    @staticmethod
    def _is_byzantine(node_id, byzantine_probability, all_honest, fault_model, byzantine_ids):
        if all_honest:
            return False
        if byzantine_ids is not None:
            return node_id in byzantine_ids
        return fault_model.decide_byzantine(byzantine_probability)

    @classmethod
    def generate_nodes(cls, n_nodes, byzantine_probability=0.0, all_honest=False, fault_model=None,
                       byzantine_ids=None, view=0):

        assert n_nodes > 0

        fault_model = fault_model if fault_model is not None else FaultModel()
        byzantine_ids = set(byzantine_ids) if byzantine_ids is not None else None

        if byzantine_ids is not None:
            unknown = byzantine_ids - set(range(n_nodes))
            if unknown:
                raise ValueError(f"Byzantine node ids {sorted(unknown)} are outside 0..{n_nodes - 1}.")

        nodes = []
        for i in range(n_nodes):
            is_byzantine = cls._is_byzantine(i, byzantine_probability, all_honest, fault_model, byzantine_ids)
            nodes.append(Node(i, fault_model=fault_model, is_byzantine=is_byzantine, view=view))
            log.network.debug('Node created: %s, byzantine = %s', nodes[-1], is_byzantine)

        network = cls(nodes)
        log.network.info('Generated %d nodes, %d of them Byzantine.', n_nodes, network.byzantine_count)
        return network

    def redraw_byzantine(self, byzantine_probability, all_honest=False, byzantine_ids=None):
        """
        Draw the Byzantine flag of every node again, keeping the nodes themselves.
        """
        byzantine_ids = set(byzantine_ids) if byzantine_ids is not None else None
        for node in self._nodes:
            node.is_byzantine = self._is_byzantine(node.id, byzantine_probability, all_honest,
                                                   node.fault_model, byzantine_ids)
        log.network.info('Redrew Byzantine flags, %d of %d nodes Byzantine.', self.byzantine_count, len(self))
