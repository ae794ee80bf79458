"""
=========================
Event
=========================

Last update: October 2026

Event class. A fire-once callback scheduled for a given time, which can be cancelled until it fires.
"""

from pbftsim.Log import log

class Event:
    def __init__(self, name, time, callback, **kvargs):

        self.name = name
        self.time = time
        self.callback = callback

        # Event parameters - additional data passed to the callback when the event fires.
        self.event_params = kvargs['event_params'] if 'event_params' in kvargs else {}

        self._cancelled = False
        self._fired = False
        # Backing handle of the scheduler (e.g. a threading.Timer), if any
        self.handle = None

        log.scheduler.debug('Initialized event %s at time %.3f, event_params = %s.',
                            self.name, self.time, self.event_params)

    def __repr__(self):
        return '[Event %s, time = %.3f, cancelled = %s, fired = %s]' % (
            self.name, self.time, self._cancelled, self._fired)

    @property
    def cancelled(self):
        return self._cancelled

    @property
    def fired(self):
        return self._fired

    @property
    def pending(self):
        return not (self._cancelled or self._fired)

    def cancel(self):
        if not self.pending:
            return False
        self._cancelled = True
        if self.handle is not None:
            self.handle.cancel()
        log.scheduler.info('Cancelled event %s.', self.name)
        return True

    def fire(self):
        if not self.pending:
            return False
        self._fired = True
        log.scheduler.info('Firing event %s at time %.3f.', self.name, self.time)
        self.callback(**self.event_params)
        return True
