"""
=========================
PBFTConsensus
=========================

Last update: October 2026

PBFTConsensus class. Round coordinator of the PBFT cluster.

The coordinator owns the nodes, the message log and the ledger, and drives one round through the phases
PROPOSE -> PRE_PREPARE -> PREPARE -> COMMIT. A client value is submitted in PROPOSE; the remaining phases need no
further input and, with `auto_advance`, run in one sweep. Commit values are checked against the 2f + 1 quorum
threshold. A failed quorum is retried in PROPOSE until `max_failures` consecutive failures, which trigger a view
change. The cluster resumes in PROPOSE after `view_change_delay` seconds.

Every public operation holds the coordinator lock, so a phase advance is atomic from the caller's point of view,
also when the view change resumption fires on a timer thread.
"""
import threading

from pbftsim.ConfigurationManager import ConfigManager, ConfigurationError
from pbftsim.FaultModel import FaultModel
from pbftsim.Ledger import Ledger
from pbftsim.Log import log
from pbftsim.Message import BROADCAST, SYSTEM_SENDER, Message, MessageType
from pbftsim.MessageLog import MessageLog
from pbftsim.Network import Network
from pbftsim.Phase import Phase
from pbftsim.Quorum import Quorum
from pbftsim.Scheduler import SimulationScheduler, ThreadingScheduler

IN_FLIGHT_PHASES = (Phase.PRE_PREPARE, Phase.PREPARE, Phase.COMMIT)

CONSENSUS_FAILED = "Consensus failed"

class PBFTConsensus:

    def __init__(self, config=None, scheduler=None, fault_model=None):

        self.config = config if config is not None else ConfigManager()
        self.config.validate()

        self._lock = threading.RLock()

        if scheduler is not None:
            self._scheduler = scheduler
        elif self.config.get('scheduler') == 'simulated':
            self._scheduler = SimulationScheduler()
        else:
            self._scheduler = ThreadingScheduler()

        self._fault_model = fault_model if fault_model is not None else FaultModel(
            values=self.config.get('values'), seed=self.config.get('seed'))

        self._message_log = MessageLog()
        self._ledger = Ledger()

        self._phase = Phase.IDLE
        self._view = 0
        self._view_changes = 0
        self._failure_count = 0
        self._current_leader = None
        self._submitted_value = None

        # Bumped whenever a round is started or aborted, so a stale view change resumption can recognise itself
        self._generation = 0
        self._pending_resume = None

        self._network = None
        self._quorum = None
        self._byzantine_ids = None

        self.configure()

        log.consensus.info('Initialized PBFT consensus with %d nodes.', len(self._network))

    def __repr__(self):
        return '[PBFTConsensus: phase=%s, view=%d, leader=%s, nodes=%d, blocks=%d]' % (
            self._phase.value, self._view, self._current_leader, len(self._network), len(self._ledger))

    ##########################
    # CONFIGURATION          #
    ##########################

    def configure(self, n_nodes=None, byzantine_probability=None, all_honest=None, byzantine_ids=None):
        """
        Rebuild the node set. Any round in flight is aborted and a pending view change resumption is cancelled.

        `byzantine_ids` forces exactly those nodes to be Byzantine instead of drawing them with
        `byzantine_probability`. `all_honest` overrides both.
        """
        with self._lock:
            params = self.config.get_simulation_params()
            if n_nodes is not None:
                params['n_nodes'] = n_nodes
            if byzantine_probability is not None:
                params['byzantine_probability'] = byzantine_probability
            if all_honest is not None:
                params['all_honest'] = all_honest

            candidate = ConfigManager(**params)
            candidate.validate()

            byzantine_ids = set(byzantine_ids) if byzantine_ids is not None else None
            if byzantine_ids is not None and not byzantine_ids <= set(range(params['n_nodes'])):
                raise ConfigurationError(
                    f"Byzantine node ids {sorted(byzantine_ids)} are outside 0..{params['n_nodes'] - 1}.")

            # Nothing below may fail once the running round has been aborted
            network = Network.generate_nodes(n_nodes=params['n_nodes'],
                                             byzantine_probability=params['byzantine_probability'],
                                             all_honest=params['all_honest'],
                                             fault_model=self._fault_model,
                                             byzantine_ids=byzantine_ids,
                                             view=self._view)

            self._abort_round()

            self.config = candidate
            self._byzantine_ids = byzantine_ids
            self._network = network
            self._quorum = Quorum(params['n_nodes'])

            self._failure_count = 0
            self._current_leader = None
            self._submitted_value = None
            self._set_phase(Phase.IDLE)

            log.consensus.info('Configured %d nodes, p = %s, all honest = %s, %d Byzantine (tolerated: %d).',
                               params['n_nodes'], params['byzantine_probability'], params['all_honest'],
                               self._network.byzantine_count, self._quorum.fault_tolerance)

    def _abort_round(self):
        self._generation += 1
        if self._pending_resume is not None:
            self._pending_resume.cancel()
            self._pending_resume = None

    ##########################
    # ROUND DRIVING          #
    ##########################

    def start_round(self):
        with self._lock:
            self._abort_round()

            self._reset_nodes()
            if self.config.get('redraw_byzantine_each_round'):
                self._network.redraw_byzantine(self.config.get('byzantine_probability'),
                                               all_honest=self.config.get('all_honest'),
                                               byzantine_ids=self._byzantine_ids)

            self._rotate_leader()
            self._submitted_value = None
            self._set_phase(Phase.PROPOSE)

            log.consensus.info('Started round in view %d with leader %d.', self._view, self._current_leader)

    def submit_value(self, value):
        """
        Submit the client value to the leader. Only accepted in PROPOSE; in any other phase the call is ignored and
        False is returned.
        """
        with self._lock:
            if self._phase != Phase.PROPOSE:
                log.consensus.warning('Ignoring value %s submitted in phase %s.', value, self._phase.value)
                return False

            if value not in self._fault_model.values:
                raise ValueError(f"Value {value!r} is not one of {self._fault_model.values}.")

            self._submitted_value = value
            leader = self._leader_node

            leader.propose(value)
            messages = leader.pre_prepare(value, self._network.peers(leader.id))
            self._message_log.add_messages(messages)

            # Delivery is synchronous: every peer holds the leader's value once the fan-out is done
            for message in messages:
                self._network.get_node(message.recipient).pre_prepare(message.value)

            self._set_phase(Phase.PRE_PREPARE)

            if self.config.get('auto_advance'):
                while self._phase in IN_FLIGHT_PHASES:
                    self._advance_phase()
            return True

    def step(self):
        """
        Execute the current phase and move to the next one. Returns False if no round is in flight.
        """
        with self._lock:
            if self._phase not in IN_FLIGHT_PHASES:
                log.consensus.debug('Nothing to step in phase %s.', self._phase.value)
                return False
            self._advance_phase()
            return True

    def run_round(self, value):
        with self._lock:
            self.start_round()
            return self.submit_value(value)

    def advance_time(self, seconds):
        with self._lock:
            return self._scheduler.advance(seconds)

    def _advance_phase(self):

        match self._phase:

            case Phase.PRE_PREPARE:
                # Non-leaders were already updated by the leader's fan-out
                self._set_phase(Phase.PREPARE)

            case Phase.PREPARE:
                for node in self._network.nodes:
                    if node.is_leader:
                        continue
                    self._message_log.add_messages(node.prepare(node.received_value, self._network.peers(node.id)))
                self._set_phase(Phase.COMMIT)

            case Phase.COMMIT:
                for node in self._network.nodes:
                    self._message_log.add_messages(node.commit(node.received_value, self._network.peers(node.id)))
                self._decide()

    def _decide(self):
        agreed_value = self._quorum.check_threshold([node.value for node in self._network.nodes])

        if agreed_value is not None:
            self._ledger.append(agreed_value, self._submitted_value, view=self._view)
            self._failure_count = 0
            self._set_phase(Phase.IDLE)
            return

        log.consensus.warning('Consensus failed in view %d with leader %d.', self._view, self._current_leader)
        self._message_log.add_messages(
            [Message(SYSTEM_SENDER, node.id, MessageType.ERROR, CONSENSUS_FAILED, self._view)
             for node in self._network.nodes])
        self._handle_failure()

    ##########################
    # FAILURES / VIEW CHANGE #
    ##########################

    def _handle_failure(self):
        self._failure_count += 1

        if self._failure_count >= self.config.get('max_failures'):
            self._initiate_view_change()
            return

        log.consensus.info('Retrying with leader %d, %d consecutive failures.',
                           self._current_leader, self._failure_count)
        # Nodes go back to IDLE so the next attempt moves them forward again
        self._reset_nodes()
        self._submitted_value = None
        self._set_phase(Phase.PROPOSE)

    def _initiate_view_change(self):
        self._view += 1
        self._view_changes += 1
        self._failure_count = 0
        self._submitted_value = None
        self._set_phase(Phase.VIEW_CHANGE)

        self._message_log.add_messages(Message(SYSTEM_SENDER, BROADCAST, MessageType.VIEW_CHANGE,
                                               f"View changed to {self._view}", self._view))

        self._reset_nodes()
        for node in self._network.nodes:
            node.view = self._view

        if self.config.get('rotate_leader_on_view_change'):
            self._rotate_leader()

        log.consensus.warning('View change to view %d, leader is %d.', self._view, self._current_leader)

        self._pending_resume = self._scheduler.schedule(self.config.get('view_change_delay'),
                                                        self._resume_after_view_change,
                                                        name='view-change-resume',
                                                        generation=self._generation)

    def _resume_after_view_change(self, generation):
        with self._lock:
            if generation != self._generation or self._phase != Phase.VIEW_CHANGE:
                log.consensus.debug('Dropping stale view change resumption (generation %d, current %d).',
                                    generation, self._generation)
                return
            self._pending_resume = None
            self._set_phase(Phase.PROPOSE)
            log.consensus.info('View %d ready, waiting for a proposal.', self._view)

    ##########################
    # HELPERS                #
    ##########################

    def _set_phase(self, phase):
        if phase != self._phase:
            log.consensus.debug('Phase %s -> %s', self._phase.value, phase.value)
        self._phase = phase

    def _reset_nodes(self):
        for node in self._network.nodes:
            node.reset()

    def _rotate_leader(self):
        n_nodes = len(self._network)
        self._current_leader = 0 if self._current_leader is None else (self._current_leader + 1) % n_nodes
        for node in self._network.nodes:
            node.is_leader = node.id == self._current_leader

    @property
    def _leader_node(self):
        return self._network.get_node(self._current_leader)

    ##########################
    # READ ACCESSORS         #
    ##########################

    @property
    def phase(self):
        return self._phase

    @property
    def view(self):
        return self._view

    @property
    def view_changes(self):
        return self._view_changes

    @property
    def current_leader(self):
        return self._current_leader

    @property
    def failure_count(self):
        return self._failure_count

    @property
    def submitted_value(self):
        return self._submitted_value

    @property
    def n_nodes(self):
        return len(self._network)

    @property
    def nodes(self):
        with self._lock:
            return [node.snapshot() for node in self._network.nodes]

    @property
    def messages(self):
        with self._lock:
            return self._message_log.messages

    @property
    def message_log(self):
        return self._message_log

    def messages_for_node(self, node_id):
        with self._lock:
            return self._message_log.for_node(node_id)

    @property
    def blocks(self):
        with self._lock:
            return self._ledger.blocks

    @property
    def ledger(self):
        return self._ledger

    @property
    def byzantine_count(self):
        return self._network.byzantine_count

    @property
    def fault_tolerance(self):
        return self._quorum.fault_tolerance

    @property
    def quorum_threshold(self):
        return self._quorum.threshold

    @property
    def is_byzantine_fault_tolerant(self):
        return self._quorum.is_byzantine_fault_tolerant(self.byzantine_count)

    @property
    def view_change_pending(self):
        return self._pending_resume is not None and self._pending_resume.pending
