"""Tests for the pruning transform, cache fix-up and legacy mode."""

from __future__ import annotations

import json
import unittest

from claude_prune.helpers import is_turn_record, parse_line
from claude_prune.pruner import (
    apply_cache_fixup,
    find_last_cache_read_line,
    prune_session_lines,
    prune_with_indices,
)
from claude_prune.strategies.legacy import legacy_selection

from factories import make_assistant, make_tool_result, make_user, meta


def non_turn_lines(lines: list[str]) -> list[str]:
    return [ln for pos, ln in enumerate(lines) if pos > 0 and not is_turn_record(parse_line(ln, pos))]


def cache_value(line: str) -> int:
    obj = json.loads(line)
    usage = obj.get("usage") or obj["message"]["usage"]
    return usage["cache_read_input_tokens"]


class TestPruneWithIndices(unittest.TestCase):
    def test_prunes_based_on_indices(self):
        lines = [meta(), make_user("1"), make_assistant("2"), make_user("3"), make_assistant("4"), make_user("5")]
        result = prune_with_indices(lines, [1, 4, 5], "test strategy")
        self.assertEqual(result.kept, 3)
        self.assertEqual(result.dropped, 2)
        self.assertEqual(result.strategy, "test strategy")
        self.assertEqual(result.out_lines, [lines[0], lines[1], lines[4], lines[5]])

    def test_preserves_non_turn_lines(self):
        lines = [
            meta(),
            make_user("1"),
            make_tool_result(),
            make_assistant("2"),
            "non-json diagnostic",
            make_user("3"),
        ]
        result = prune_with_indices(lines, [1, 3], "test")
        self.assertEqual(result.kept, 2)
        self.assertEqual(result.dropped, 1)
        self.assertEqual(result.out_lines, lines[:5])

    def test_non_turns_invariant_under_any_selection(self):
        lines = [
            meta(),
            make_user("a"),
            make_tool_result("r1"),
            "diagnostic",
            make_assistant("b"),
            json.dumps({"type": "summary", "summary": "s"}),
            "[1, 2]",
            make_user("c"),
            make_assistant("d"),
        ]
        expected = non_turn_lines(lines)
        turns = [pos for pos, ln in enumerate(lines) if is_turn_record(parse_line(ln, pos))]
        for selection in ([], turns, [1], [4, 8], [0, 2, 3, 99]):
            with self.subTest(selection=selection):
                result = prune_with_indices(lines, selection, "s")
                self.assertEqual(non_turn_lines(result.out_lines), expected)
                self.assertEqual(result.kept + result.dropped, len(turns))

    def test_empty_selection_keeps_only_metadata(self):
        lines = [meta(), make_user("1"), make_assistant("2")]
        result = prune_with_indices(lines, [], "empty")
        self.assertEqual(result.kept, 0)
        self.assertEqual(result.dropped, 2)
        self.assertEqual(result.out_lines, [lines[0]])

    def test_metadata_line_preserved_even_if_turn_shaped(self):
        lines = [json.dumps({"type": "user", "content": "important"}), make_user("1")]
        result = prune_with_indices(lines, [], "test")
        self.assertEqual(result.out_lines, [lines[0]])
        self.assertEqual(result.dropped, 1)

    def test_metadata_only_session(self):
        lines = [meta()]
        result = prune_with_indices(lines, [1, 2, 3], "any")
        self.assertEqual(result.out_lines, lines)
        self.assertEqual((result.kept, result.dropped), (0, 0))

    def test_empty_input(self):
        result = prune_with_indices([], [1], "none")
        self.assertEqual(result.out_lines, [])

    def test_input_lines_not_mutated(self):
        lines = [meta(), make_assistant("x", message={"usage": {"cache_read_input_tokens": 5}})]
        snapshot = list(lines)
        prune_with_indices(lines, [1], "s")
        self.assertEqual(lines, snapshot)


class TestCacheFixup(unittest.TestCase):
    def setUp(self):
        self.lines = [meta()]
        for pos in range(1, 11):
            factory = make_user if pos % 2 else make_assistant
            if pos == 2:
                self.lines.append(factory("x", usage={"cache_read_input_tokens": 100}))
            elif pos == 5:
                self.lines.append(factory("x", message={"usage": {"cache_read_input_tokens": 200}}))
            elif pos == 7:
                self.lines.append(factory("x", message={"usage": {"cache_read_input_tokens": 0}}))
            elif pos == 9:
                self.lines.append(factory("x", message={"usage": {"cache_read_input_tokens": 300}}))
            else:
                self.lines.append(factory("x"))

    def test_targets_last_positive_line(self):
        self.assertEqual(find_last_cache_read_line(self.lines), 9)

    def test_only_last_positive_line_is_zeroed(self):
        fixed = apply_cache_fixup(self.lines)
        self.assertEqual(cache_value(fixed[9]), 0)
        self.assertEqual(fixed[2], self.lines[2])
        self.assertEqual(fixed[5], self.lines[5])
        self.assertEqual(cache_value(fixed[2]), 100)
        self.assertEqual(cache_value(fixed[5]), 200)
        changed = [pos for pos in range(len(fixed)) if fixed[pos] != self.lines[pos]]
        self.assertEqual(changed, [9])

    def test_fixup_visible_when_target_kept(self):
        result = prune_with_indices(self.lines, [2, 5, 9], "s")
        self.assertEqual([cache_value(ln) for ln in result.out_lines[1:]], [100, 200, 0])

    def test_earlier_values_untouched_when_target_dropped(self):
        result = prune_with_indices(self.lines, [2, 5], "s")
        self.assertEqual([cache_value(ln) for ln in result.out_lines[1:]], [100, 200])

    def test_non_turn_target_is_rewritten(self):
        lines = self.lines + [json.dumps({"type": "summary", "usage": {"cache_read_input_tokens": 50}})]
        result = prune_with_indices(lines, [], "s")
        self.assertEqual(cache_value(result.out_lines[-1]), 0)

    def test_no_positive_values_means_no_rewrite(self):
        lines = [meta(), make_user("a", usage={"cache_read_input_tokens": 0}), "junk"]
        self.assertEqual(find_last_cache_read_line(lines), -1)
        self.assertEqual(apply_cache_fixup(lines), lines)

    def test_other_usage_fields_preserved(self):
        line = make_assistant("x", message={"usage": {"input_tokens": 7, "cache_read_input_tokens": 9}})
        fixed = apply_cache_fixup([meta(), line])
        usage = json.loads(fixed[1])["message"]["usage"]
        self.assertEqual(usage, {"input_tokens": 7, "cache_read_input_tokens": 0})


class TestLegacyMode(unittest.TestCase):
    def setUp(self):
        self.lines = [
            meta(),
            make_user("1"),
            make_assistant("2"),
            make_user("3"),
            make_assistant("4"),
            make_user("5"),
            make_assistant("6"),
        ]

    def test_keep_last_two_assistant_turns(self):
        result = prune_session_lines(self.lines, 2)
        self.assertEqual(result.kept, 3)
        self.assertEqual(result.dropped, 3)
        self.assertEqual(result.assistant_count, 3)
        self.assertEqual(result.out_lines, [self.lines[0]] + self.lines[4:])
        self.assertEqual(result.strategy, "Keep last 2 assistant messages")

    def test_keep_more_than_available_keeps_all(self):
        result = prune_session_lines(self.lines, 3)
        self.assertEqual((result.kept, result.dropped), (6, 0))

    def test_keep_zero_drops_every_turn(self):
        result = prune_session_lines(self.lines, 0)
        self.assertEqual((result.kept, result.dropped), (0, 6))
        self.assertEqual(result.out_lines, [self.lines[0]])

    def test_non_turn_lines_survive(self):
        lines = self.lines[:2] + ["diag", make_tool_result()] + self.lines[2:]
        result = prune_session_lines(lines, 1)
        self.assertIn("diag", result.out_lines)
        self.assertEqual(result.kept, 1)
        self.assertEqual(result.dropped, 5)

    def test_selection_helper(self):
        self.assertEqual(legacy_selection([1, 2, 3, 4], [2, 4], 1), [4])
        self.assertEqual(legacy_selection([1, 2, 3, 4], [2, 4], 2), [1, 2, 3, 4])
        self.assertEqual(legacy_selection([1, 2, 3, 4], [2, 4], 0), [])
        self.assertEqual(legacy_selection([1, 2, 3, 4], [2, 4], -3), [])
        self.assertEqual(legacy_selection([1, 3], [], 0), [1, 3])


if __name__ == "__main__":
    unittest.main()
