"""
================================================
Simulator
================================================

Last update: October 2026

Command line (CLI) interface for the PBFT simulator. Runs a number of consensus rounds in one automatic sweep and
reports how many of them ended in an honest, a subverted or no decision.

Verbosity levels and logging levels (higher includes lower):
0 - No output
1 - CRITICAL
2 - ERROR
3 - WARNING
4 - INFO
5 - DEBUG
"""

import argparse
import time

import numpy as np

from pbftsim.ConfigurationManager import ConfigManager
from pbftsim.Log import log
from pbftsim.PBFTConsensus import PBFTConsensus
from pbftsim.Phase import Phase
from pbftsim.Scheduler import SimulationScheduler

N_ROUNDS_DEFAULT = 10
# Give up on a round after this many attempts (retries plus attempts after view changes)
MAX_ATTEMPTS_DEFAULT = 9

class Simulator:
    '''
    Command line (CLI) interface for the simulator.
    '''

    def __init__(self, config=None, n_rounds=N_ROUNDS_DEFAULT, value=None, max_attempts=MAX_ATTEMPTS_DEFAULT,
                 byzantine_ids=None):

        # Work on a copy, the caller's parameters keep their scheduler
        self.config = ConfigManager(**config.get_simulation_params()) if config is not None else ConfigManager()
        self.config.set('scheduler', 'simulated')
        self.config.validate()

        self._n_rounds = n_rounds
        self._value = value
        self._max_attempts = max_attempts

        self._set_logging()

        self._scheduler = SimulationScheduler()
        self._consensus = PBFTConsensus(config=self.config, scheduler=self._scheduler)
        if byzantine_ids is not None:
            self._consensus.configure(byzantine_ids=byzantine_ids)

        self._rng = np.random.default_rng(self.config.get('seed'))
        self._undecided_rounds = 0

        # Total elapsed time doesn't include initialization!
        self.timeStart = time.time()

    @property
    def consensus(self):
        return self._consensus

    @property
    def undecided_rounds(self):
        return self._undecided_rounds

    def _set_logging(self):

        # Setting logger and verbosity level
        log.set_verbosity(self.config.get('verbosity'))

    def _next_value(self):
        if self._value is not None:
            return self._value
        return str(self._rng.choice(self.config.get('values')))

    def run_round(self, value):
        """
        Drive one round until a block is appended, re-submitting after failed attempts and waiting out view changes.
        Returns True if the round was decided.
        """
        consensus = self._consensus
        consensus.start_round()

        for attempt in range(self._max_attempts):
            if consensus.phase == Phase.VIEW_CHANGE:
                consensus.advance_time(self.config.get('view_change_delay'))

            ledger_size = len(consensus.ledger)
            consensus.submit_value(value)
            while consensus.step():
                pass

            if len(consensus.ledger) > ledger_size:
                log.simulator.info('Round decided after %d attempt(s).', attempt + 1)
                return True

        log.simulator.warning('Giving up on value %s after %d attempts.', value, self._max_attempts)
        return False

    def run(self):

        log.simulator.info('Started simulation with %d nodes (%d Byzantine) for %d rounds.',
                           self._consensus.n_nodes, self._consensus.byzantine_count, self._n_rounds)

        for round_number in range(self._n_rounds):
            value = self._next_value()
            log.simulator.info('Round %d: client submits %s.', round_number, value)
            if not self.run_round(value):
                self._undecided_rounds += 1

        log.simulator.info('Simulation finished in %.3f seconds.', time.time() - self.timeStart)
        return self.summary()

    def summary(self):
        consensus = self._consensus
        return {
            'nodes': consensus.n_nodes,
            'byzantine_nodes': consensus.byzantine_count,
            'fault_tolerance': consensus.fault_tolerance,
            'quorum_threshold': consensus.quorum_threshold,
            'byzantine_fault_tolerant': consensus.is_byzantine_fault_tolerant,
            'rounds': self._n_rounds,
            'blocks': len(consensus.ledger),
            'subverted_blocks': len(consensus.ledger.subverted_blocks),
            'undecided_rounds': self._undecided_rounds,
            'view_changes': consensus.view_changes,
            'final_view': consensus.view,
            'messages': len(consensus.message_log),
        }

    def export(self, blocks_csv=None, messages_csv=None, log_file=None):
        if blocks_csv:
            self._consensus.ledger.to_dataframe().to_csv(blocks_csv, index=False)
            print(f"Blocks exported to {blocks_csv}")
        if messages_csv:
            self._consensus.message_log.to_dataframe().to_csv(messages_csv, index=False)
            print(f"Messages exported to {messages_csv}")
        if log_file:
            log.export_logs_to_txt(log_file)


def build_config(args):
    config = ConfigManager(config_file=args.config)
    if args.nodes is not None:
        config.set('n_nodes', args.nodes)
    if args.probability is not None:
        config.set('byzantine_probability', args.probability)
    if args.all_honest:
        config.set('all_honest', True)
    if args.seed is not None:
        config.set('seed', args.seed)
    if args.verbosity is not None:
        config.set('verbosity', args.verbosity)
    return config


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Interactive PBFT simulation, run as an automatic sweep.")
    parser.add_argument("--config", "-c", type=str, default=None, help="JSON file with simulation parameters.")
    parser.add_argument("--nodes", "-n", type=int, default=None, help="Number of nodes.")
    parser.add_argument("--probability", "-p", type=float, default=None,
                        help="Probability that a node is Byzantine.")
    parser.add_argument("--all-honest", action="store_true", help="Disable Byzantine nodes.")
    parser.add_argument("--byzantine", type=int, nargs="*", default=None,
                        help="Ids of the nodes forced to be Byzantine.")
    parser.add_argument("--rounds", "-r", type=int, default=N_ROUNDS_DEFAULT, help="Number of rounds.")
    parser.add_argument("--value", type=str, default=None, help="Value submitted in every round (default: random).")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument("--verbosity", "-v", type=int, default=None, help="Verbosity level (0-5).")
    parser.add_argument("--blocks-csv", type=str, default=None, help="Write the decided blocks to this CSV file.")
    parser.add_argument("--messages-csv", type=str, default=None, help="Write the message log to this CSV file.")
    parser.add_argument("--log-file", type=str, default=None, help="Write the simulation log to this file.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    simulator = Simulator(config=build_config(args), n_rounds=args.rounds, value=args.value,
                          byzantine_ids=args.byzantine)
    summary = simulator.run()

    for key, value in summary.items():
        print(f"{key}: {value}")

    simulator.export(blocks_csv=args.blocks_csv, messages_csv=args.messages_csv, log_file=args.log_file)
    return summary


if __name__=='__main__':
    main()
