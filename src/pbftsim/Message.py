"""
=========================
Message
=========================

Last update: October 2026

Message class. One directed or broadcast protocol message. Messages are read-only once created.
"""

import enum
import uuid

from pbftsim.Log import log

UUID_LENGTH = 10

# Recipient marker for messages addressed to every node
BROADCAST = "all"
# Sender id of messages that originate from the system rather than from a node
SYSTEM_SENDER = -1

class MessageType(enum.Enum):
    PRE_PREPARE = "pre-prepare"
    PREPARE = "prepare"
    COMMIT = "commit"
    ERROR = "error"
    VIEW_CHANGE = "view-change"

    def __repr__(self):
        return self.name


class Message():

    __slots__ = ('_message_id', '_sender', '_recipient', '_type', '_value', '_view')

    def __init__(self, sender, recipient, message_type, value, view):
        assert isinstance(message_type, MessageType)

        object.__setattr__(self, '_message_id', uuid.uuid4().hex[:UUID_LENGTH])
        object.__setattr__(self, '_sender', sender)
        object.__setattr__(self, '_recipient', recipient)
        object.__setattr__(self, '_type', message_type)
        object.__setattr__(self, '_value', value)
        object.__setattr__(self, '_view', view)

        log.message.debug('Created message %s', self)

    def __setattr__(self, name, value):
        raise AttributeError(f"Message is immutable, cannot set {name}")

    def __repr__(self):
        return '[%s message %s -> %s, value = %s, view = %s]' % (
            self._type.value, self._sender, self._recipient, self._value, self._view)

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return other._message_id == self._message_id
        else:
            return False

    def __hash__(self):
        return hash(self._message_id)

    @property
    def message_id(self):
        return self._message_id

    @property
    def sender(self):
        return self._sender

    @property
    def recipient(self):
        return self._recipient

    @property
    def type(self):
        return self._type

    @property
    def value(self):
        return self._value

    @property
    def view(self):
        return self._view

    @property
    def broadcasted(self):
        return self._recipient == BROADCAST

    def involves(self, node_id):
        """
        True if the node sent the message, received it directly, or received it as part of a broadcast.
        """
        return self._sender == node_id or self._recipient == node_id or self._recipient == BROADCAST

    def to_dict(self):
        return {'message_id': self._message_id,
                'from': self._sender,
                'to': self._recipient,
                'type': self._type.value,
                'value': self._value,
                'view': self._view}
