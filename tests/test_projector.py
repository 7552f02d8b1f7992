import unittest
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sbk_ladder.errors import ComputationError, LadderValidationError
from sbk_ladder.projector import create_ladder, project_ladder, projection_reaches_goal


class TestProjectLadder(unittest.TestCase):

    def test_compounds_until_goal(self):
        # 100 -> 250 -> 625 -> 1562.5 (goal 1000)
        steps = project_ladder(100, 1000, "+150")
        self.assertEqual(len(steps), 3)

        first = steps[0]
        self.assertEqual(first.day_number, 1)
        self.assertEqual(first.stake, 100)
        self.assertEqual(first.profit, 150.0)
        self.assertEqual(first.next_balance, 250.0)
        self.assertFalse(first.is_goal_day)

        last = steps[-1]
        self.assertTrue(last.is_goal_day)
        self.assertEqual(last.next_balance, 1562.5)
        self.assertGreaterEqual(last.next_balance, 1000)

    def test_single_step_ladder(self):
        steps = project_ladder(100, 150, "-110")
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].profit, 90.91)
        self.assertAlmostEqual(steps[0].next_balance, 190.91)
        self.assertTrue(steps[0].is_goal_day)

    def test_steps_chain_and_only_last_is_goal(self):
        steps = project_ladder(25, 5000, "-110")
        self.assertTrue(projection_reaches_goal(steps))
        self.assertEqual(steps[0].stake, 25)
        for i, step in enumerate(steps):
            self.assertEqual(step.day_number, i + 1)
            self.assertEqual(step.is_goal_day, i == len(steps) - 1)
            if i > 0:
                self.assertEqual(step.stake, steps[i - 1].next_balance)

    def test_zero_profit_runs_to_ceiling(self):
        steps = project_ladder(100, 1000, "+0")
        self.assertEqual(len(steps), 500)
        self.assertFalse(steps[-1].is_goal_day)
        self.assertFalse(projection_reaches_goal(steps))

    def test_custom_ceiling_truncates(self):
        # 100 -> 110 -> 121 -> 133.1 -> 146.41 -> 161.05
        steps = project_ladder(100, 1000, "+10", max_steps=5)
        self.assertEqual(len(steps), 5)
        self.assertAlmostEqual(steps[-1].next_balance, 161.05)
        self.assertFalse(steps[-1].is_goal_day)

    def test_balance_is_stake_plus_profit(self):
        # profit rounds to 10.0, balance keeps the sub-cent stake: 20.004 >= 20.003
        steps = project_ladder(10.004, 20.003, "+100")
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].profit, 10.0)
        self.assertEqual(steps[0].next_balance, steps[0].stake + steps[0].profit)
        self.assertTrue(steps[0].is_goal_day)

        for step in project_ladder(0.37, 900, "-115"):
            self.assertEqual(step.next_balance, step.stake + step.profit)

    def test_start_at_goal_is_empty(self):
        self.assertEqual(project_ladder(100, 100, "+150"), [])
        self.assertFalse(projection_reaches_goal([]))


class TestCreateLadder(unittest.TestCase):

    def test_creates_fresh_ladder(self):
        now = datetime(2026, 10, 17, tzinfo=timezone.utc)
        ladder = create_ladder("Weekend", 100, 1000, "+150", now=now)

        self.assertTrue(ladder.id)
        self.assertEqual(ladder.name, "Weekend")
        self.assertEqual(ladder.current_amount, 100)
        self.assertEqual(ladder.current_step_index, 0)
        self.assertEqual(ladder.total_steps, 3)
        self.assertEqual(ladder.last_updated, now)
        self.assertEqual(ladder.created_at, now)

    def test_ids_are_unique(self):
        a = create_ladder("A", 100, 1000, "+150")
        b = create_ladder("B", 100, 1000, "+150")
        self.assertNotEqual(a.id, b.id)

    def test_raw_text_input_is_cleaned(self):
        ladder = create_ladder("  Weekend ", "$100", "$1,000", " +150 ")
        self.assertEqual(ladder.name, "Weekend")
        self.assertEqual(ladder.start_stake, 100.0)
        self.assertEqual(ladder.goal_amount, 1000.0)
        self.assertEqual(ladder.odds, "+150")

    def test_rejects_bad_input(self):
        cases = [
            ("", "100", "1000", "+150"),
            ("   ", "100", "1000", "+150"),
            ("x", "abc", "1000", "+150"),
            ("x", "0", "1000", "+150"),
            ("x", "-5", "1000", "+150"),
            ("x", "100", "100", "+150"),
            ("x", "100", "50", "+150"),
            ("x", "100", "", "+150"),
            ("x", "100", "1000", "150"),
            ("x", "100", "1000", "+1.5"),
            ("x", "100", "1000", ""),
        ]
        for args in cases:
            with self.assertRaises(LadderValidationError, msg=str(args)):
                create_ladder(*args)

    def test_invalid_odds_never_reach_projection(self):
        with mock.patch("sbk_ladder.projector.project_ladder") as project:
            with self.assertRaises(LadderValidationError):
                create_ladder("x", 100, 1000, "abc")
            project.assert_not_called()

    def test_validation_message(self):
        with self.assertRaises(LadderValidationError) as ctx:
            create_ladder("x", 100, 1000, "abc")
        self.assertTrue(str(ctx.exception).startswith("Invalid input."))

    def test_non_converging_is_computation_error(self):
        with self.assertRaises(ComputationError) as ctx:
            create_ladder("x", 100, 1000, "+0")
        self.assertTrue(str(ctx.exception).startswith("Calculation error."))

        with self.assertRaises(ComputationError):
            create_ladder("x", 100, 1000, "+10", max_steps=5)


if __name__ == '__main__':
    unittest.main()
