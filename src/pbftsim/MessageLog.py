"""
=========================
MessageLog
=========================

Last update: October 2026

MessageLog class. Append-only record of every protocol message emitted during the simulation, in emission order.
"""

import pandas as pd

from pbftsim.Log import log
from pbftsim.Message import Message

COLUMNS = ['message_id', 'from', 'to', 'type', 'value', 'view']

class MessageLog:

    def __init__(self):
        self._messages = []

        log.message.info('Initialized message log.')

    def __repr__(self):
        return '[MessageLog, messages = %d]' % len(self._messages)

    def __len__(self):
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages.copy())

    def __getitem__(self, index):
        return self._messages[index]

    def add_messages(self, messages):

        # If there is only one message as input, convert it to list so that we can iterate over it
        if isinstance(messages, Message):
            messages = [messages]

        for message in messages:
            assert isinstance(message, Message)
            self._messages.append(message)
            log.message.debug('Appended message %s', message)
        return

    @property
    def messages(self):
        # Messages are immutable, so a shallow copy is enough to keep the log append-only
        return self._messages.copy()

    def for_node(self, node_id):
        return [message for message in self._messages if message.involves(node_id)]

    def by_type(self, message_type):
        return [message for message in self._messages if message.type == message_type]

    def to_dataframe(self):
        return pd.DataFrame([message.to_dict() for message in self._messages], columns=COLUMNS)
