"""
=========================
Scheduler
=========================

Last update: October 2026

Schedulers for time-deferred events such as the resumption after a view change.

SimulationScheduler runs on a virtual clock that only moves when advance() is called, which keeps simulations
deterministic. ThreadingScheduler fires events in real time on timer threads.
"""
import threading

from pbftsim.Event import Event
from pbftsim.Log import log

class SimulationScheduler:

    def __init__(self, start_time=0.0):
        self.time = start_time
        self._events = []

        log.scheduler.info('Initialized simulation scheduler at time %.3f.', self.time)

    def __repr__(self):
        return '[SimulationScheduler, time = %.3f, pending = %d]' % (self.time, len(self.pending()))

    def schedule(self, delay, callback, name='event', **event_params):
        assert delay >= 0
        event = Event(name, self.time + delay, callback, event_params=event_params)
        self._events.append(event)
        log.scheduler.info('Scheduled %s at time %.3f.', name, event.time)
        return event

    def pending(self):
        return [event for event in self._events if event.pending]

    def advance(self, seconds):
        """
        Move the clock forward and fire every event that became due, earliest first.
        """
        assert seconds >= 0
        target = self.time + seconds

        while True:
            due = [event for event in self.pending() if event.time <= target]
            if not due:
                break
            event = min(due, key=lambda e: e.time)
            self.time = event.time
            event.fire()

        self.time = target
        self._events = self.pending()
        return self.time

    def cancel_all(self):
        for event in self.pending():
            event.cancel()
        self._events = []


class ThreadingScheduler:

    def __init__(self):
        self._events = []
        self._lock = threading.Lock()

        log.scheduler.info('Initialized real-time scheduler.')

    def __repr__(self):
        return '[ThreadingScheduler, pending = %d]' % len(self.pending())

    def schedule(self, delay, callback, name='event', **event_params):
        assert delay >= 0
        event = Event(name, delay, callback, event_params=event_params)
        timer = threading.Timer(delay, event.fire)
        timer.daemon = True
        event.handle = timer

        with self._lock:
            self._events = [e for e in self._events if e.pending]
            self._events.append(event)

        timer.start()
        log.scheduler.info('Scheduled %s in %.3f seconds.', name, delay)
        return event

    def pending(self):
        with self._lock:
            return [event for event in self._events if event.pending]

    def advance(self, seconds):
        # Real time moves on its own
        return None

    def cancel_all(self):
        for event in self.pending():
            event.cancel()
