"""
=========================
Log
=========================

Last update: October 2026

Named loggers for every part of the simulator, with an in-memory copy of the log so a run can be exported.
"""

import logging
import sys
from io import StringIO

class Log:

    def __init__(self):

        self.verbosityDict = {0: False,
                              1: logging.CRITICAL,
                              2: logging.ERROR,
                              3: logging.WARNING,
                              4: logging.INFO,
                              5: logging.DEBUG}

        self.log_stream = StringIO()  # Memory stream for logs

        self.simulator = logging.getLogger('SIMULATOR')
        self.consensus = logging.getLogger('CONSENSUS')
        self.node = logging.getLogger('NODE')
        self.fault = logging.getLogger('FAULT')
        self.quorum = logging.getLogger('QUORUM')
        self.ledger = logging.getLogger('LEDGER')
        self.message = logging.getLogger('MESSAGE')
        self.network = logging.getLogger('NETWORK')
        self.scheduler = logging.getLogger('SCHEDULER')
        self.config = logging.getLogger('CONFIG')
        self.test = logging.getLogger('TEST')

        self.log_format = '%(msecs).2f - %(name)s - %(levelname)s - %(message)s'

        # Stream handler for console output
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(self.log_format))
        logging.basicConfig(handlers=[console_handler], format=self.log_format)

        # Memory handler to store logs in memory
        memory_handler = logging.StreamHandler(self.log_stream)
        memory_handler.setFormatter(logging.Formatter(self.log_format))

        for logger in self.loggers:
            logger.addHandler(memory_handler)

    @property
    def loggers(self):
        return [self.simulator, self.consensus, self.node, self.fault, self.quorum, self.ledger,
                self.message, self.network, self.scheduler, self.config, self.test]

    def set_level(self, level):
        for logger in self.loggers:
            logger.setLevel(level)
        return

    def set_verbosity(self, verbosity):
        """
        Translate a 0-5 verbosity into a logging level. Verbosity 0 silences every logger.
        """
        if verbosity not in self.verbosityDict:
            raise KeyError(f"Unknown verbosity level {verbosity}.")
        level = self.verbosityDict[verbosity]
        self.set_level(level if level else logging.CRITICAL + 1)

    def export_logs_to_txt(self, file_path):
        with open(file_path, 'w') as log_file:
            log_file.write(self.log_stream.getvalue())
        print(f"Logs exported to {file_path}")

log = Log()
