"""Tests for the interactive strategy menu."""

from __future__ import annotations

import io
import unittest
from unittest.mock import patch

from rich.console import Console

from claude_prune.analyzer import SessionAnalyzer
from claude_prune.interactive import InteractiveUI, group_descriptions, short_phase_desc
from claude_prune.phases import DEBUGGING, GENERAL, IMPLEMENTATION, SETUP
from claude_prune.types import PruneSelection

from factories import conversation, make_code, make_edit

PROMPT = "claude_prune.interactive.Prompt.ask"
CONFIRM = "claude_prune.interactive.Confirm.ask"


class TestInteractiveUI(unittest.TestCase):
    def setUp(self):
        self.output = io.StringIO()
        self.analyzer = SessionAnalyzer(conversation(20))
        self.ui = InteractiveUI(self.analyzer, console=Console(file=self.output, width=120))

    def test_pick_recent(self):
        with patch(PROMPT, side_effect=["1"]):
            selection = self.ui.select_strategy()
        self.assertEqual(selection.indices_to_keep, list(range(13, 21)))
        self.assertEqual(selection.strategy, "Keep last 8 messages")

    def test_pick_smart(self):
        with patch(PROMPT, side_effect=["3"]):
            selection = self.ui.select_strategy()
        self.assertEqual(selection.indices_to_keep, self.analyzer.find_key_messages())

    def test_header_shows_counts_and_phases(self):
        with patch(PROMPT, side_effect=["q"]):
            self.ui.select_strategy()
        text = self.output.getvalue()
        self.assertIn("20 messages", text)
        self.assertIn("Setup", text)
        self.assertIn("Custom range selection", text)

    def test_quit_returns_none(self):
        with patch(PROMPT, side_effect=["q"]):
            self.assertIsNone(self.ui.select_strategy())

    def test_interrupt_returns_none(self):
        with patch(PROMPT, side_effect=KeyboardInterrupt):
            self.assertIsNone(self.ui.select_strategy())

    def test_custom_range_reprompts_on_invalid_input(self):
        with patch(PROMPT, side_effect=["4", "abc", "99", "1-3,20"]) as ask:
            selection = self.ui.select_strategy()
        self.assertEqual(selection.indices_to_keep, [1, 2, 3, 20])
        self.assertEqual(selection.strategy, "Custom (1-3,20)")
        self.assertEqual(ask.call_count, 4)
        self.assertIn("Invalid format", self.output.getvalue())
        self.assertIn("No valid indices found", self.output.getvalue())

    def test_custom_range_missing_comma_reprompts(self):
        with patch(PROMPT, side_effect=["4", "1-23-4", "2-3"]):
            selection = self.ui.select_strategy()
        self.assertEqual(selection.indices_to_keep, [2, 3])
        self.assertIn("Invalid format", self.output.getvalue())

    def test_custom_range_empty_cancels(self):
        with patch(PROMPT, side_effect=["4", ""]):
            self.assertIsNone(self.ui.select_strategy())

    def test_details_then_back_to_menu(self):
        with patch(PROMPT, side_effect=["5", "", "2"]):
            selection = self.ui.select_strategy()
        self.assertIn("Message 1-20", self.output.getvalue())
        self.assertEqual(selection.strategy, "Bookends (first 2 + last 6)")

    def test_confirm_prune(self):
        selection = PruneSelection(indices_to_keep=[1, 2, 3, 4, 5], strategy="s")
        with patch(CONFIRM, return_value=True):
            self.assertTrue(self.ui.confirm_prune(selection))
        self.assertIn("Will keep 5 of 20 messages (frees ~75% context)", self.output.getvalue())
        with patch(CONFIRM, return_value=False):
            self.assertFalse(self.ui.confirm_prune(selection))


class TestDisplayHelpers(unittest.TestCase):
    def test_short_phase_desc(self):
        self.assertEqual(short_phase_desc(SETUP), "Setup")
        self.assertEqual(short_phase_desc(IMPLEMENTATION), "Build")
        self.assertEqual(short_phase_desc(DEBUGGING), "Debug")
        self.assertEqual(short_phase_desc(GENERAL), "Work")

    def test_group_descriptions(self):
        lines = conversation(3) + [make_code(), make_code(), make_edit()]
        turns = SessionAnalyzer(lines).turns
        self.assertEqual(
            group_descriptions(turns),
            [(0, 2, "Discussion"), (3, 4, "Code implementation"), (5, 5, "File modifications")],
        )


if __name__ == "__main__":
    unittest.main()
