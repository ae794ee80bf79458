"""
=========================
SchedulerTest
=========================

Last update: October 2026

Tests of the virtual-clock and real-time schedulers.
"""

import threading
import unittest

from pbftsim.Scheduler import SimulationScheduler, ThreadingScheduler

class SimulationSchedulerTest(unittest.TestCase):

    def setUp(self):
        self.scheduler = SimulationScheduler()
        self.fired = []

    def test_event_fires_when_due(self):
        self.scheduler.schedule(2.0, lambda: self.fired.append('resume'), name='resume')
        self.scheduler.advance(1.5)
        self.assertEqual(self.fired, [])
        self.scheduler.advance(0.5)
        self.assertEqual(self.fired, ['resume'])
        self.assertAlmostEqual(self.scheduler.time, 2.0)

    def test_events_fire_in_time_order(self):
        self.scheduler.schedule(3.0, lambda: self.fired.append('late'))
        self.scheduler.schedule(1.0, lambda: self.fired.append('early'))
        self.scheduler.advance(5.0)
        self.assertEqual(self.fired, ['early', 'late'])

    def test_event_params_are_passed(self):
        self.scheduler.schedule(0.5, lambda generation: self.fired.append(generation), generation=7)
        self.scheduler.advance(1.0)
        self.assertEqual(self.fired, [7])

    def test_cancelled_event_never_fires(self):
        event = self.scheduler.schedule(1.0, lambda: self.fired.append('resume'))
        self.assertTrue(event.cancel())
        self.scheduler.advance(2.0)
        self.assertEqual(self.fired, [])
        self.assertTrue(event.cancelled)
        self.assertFalse(event.cancel())

    def test_event_fires_once(self):
        event = self.scheduler.schedule(1.0, lambda: self.fired.append('resume'))
        self.scheduler.advance(1.0)
        self.scheduler.advance(1.0)
        self.assertEqual(self.fired, ['resume'])
        self.assertTrue(event.fired)
        self.assertEqual(self.scheduler.pending(), [])


class ThreadingSchedulerTest(unittest.TestCase):

    def test_event_fires_in_real_time(self):
        scheduler = ThreadingScheduler()
        done = threading.Event()
        scheduler.schedule(0.05, done.set, name='resume')
        self.assertTrue(done.wait(timeout=5.0))

    def test_cancel(self):
        scheduler = ThreadingScheduler()
        done = threading.Event()
        event = scheduler.schedule(0.2, done.set)
        event.cancel()
        self.assertFalse(done.wait(timeout=0.5))
        self.assertEqual(scheduler.pending(), [])

if __name__ == '__main__':
    unittest.main()
