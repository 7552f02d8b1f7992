import threading
import unittest
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sbk_ladder.confirmation import ConfirmationState, ConfirmationTimer


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class TestConfirmationTimer(unittest.TestCase):

    def setUp(self):
        self.timers = []
        self.expired = []

        def factory(interval, function, args=()):
            timer = FakeTimer(interval, function, args)
            self.timers.append(timer)
            return timer

        self.confirm = ConfirmationTimer(timeout_ms=3000, on_expire=self.expired.append, timer_factory=factory)

    def test_first_tap_arms(self):
        self.assertFalse(self.confirm.tap("a"))
        self.assertEqual(self.confirm.state, ConfirmationState.PENDING)
        self.assertEqual(self.confirm.ladder_id, "a")
        self.assertEqual(len(self.timers), 1)
        self.assertTrue(self.timers[0].started)
        self.assertEqual(self.timers[0].interval, 3.0)

    def test_second_tap_confirms(self):
        self.confirm.tap("a")
        self.assertTrue(self.confirm.tap("a"))
        self.assertEqual(self.confirm.state, ConfirmationState.READY)
        self.assertTrue(self.timers[0].cancelled)

    def test_expiry_returns_to_ready(self):
        self.confirm.tap("a")
        self.timers[0].fire()
        self.assertEqual(self.confirm.state, ConfirmationState.READY)
        self.assertEqual(self.expired, ["a"])
        # Next tap starts over
        self.assertFalse(self.confirm.tap("a"))

    def test_stale_timer_after_confirm_is_noop(self):
        self.confirm.tap("a")
        self.confirm.tap("a")
        self.timers[0].fire()
        self.assertEqual(self.expired, [])
        self.assertEqual(self.confirm.state, ConfirmationState.READY)

    def test_reset_cancels_pending(self):
        self.confirm.tap("a")
        self.confirm.reset()
        self.assertEqual(self.confirm.state, ConfirmationState.READY)
        self.assertTrue(self.timers[0].cancelled)
        self.timers[0].fire()
        self.assertEqual(self.expired, [])
        # A fresh tap after reset must not confirm
        self.assertFalse(self.confirm.tap("a"))

    def test_tap_for_other_ladder_rearms(self):
        self.confirm.tap("a")
        self.assertFalse(self.confirm.tap("b"))
        self.assertEqual(self.confirm.ladder_id, "b")
        self.assertTrue(self.timers[0].cancelled)
        self.timers[0].fire()
        self.assertEqual(self.expired, [])
        self.assertTrue(self.confirm.tap("b"))

    def test_real_timer_expires(self):
        done = threading.Event()
        confirm = ConfirmationTimer(timeout_ms=20, on_expire=lambda ladder_id: done.set())
        confirm.tap("a")
        self.assertTrue(done.wait(2.0))
        self.assertEqual(confirm.state, ConfirmationState.READY)
        confirm.close()


if __name__ == '__main__':
    unittest.main()
