# -*- coding: utf-8 -*-
"""Test cases for dataset generation, storage and duplicate checks."""
import json
import tempfile
import unittest
from pathlib import Path

from sudoku_dataset import (
    check_dataset_duplicates,
    find_duplicate_puzzles,
    generate_dataset,
    load_dataset,
    main,
    save_dataset,
)
from sudoku_generator import Difficulty
from sudoku_solver import has_unique_solution


class TestDataset(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.output_dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_generate_save_and_load(self):
        entries, metadata = generate_dataset("easy", 3, seed=7)
        self.assertEqual(len(entries), 3)
        self.assertEqual(metadata["difficulty"], "easy")
        self.assertEqual(metadata["target_removed"], 40)
        self.assertEqual(metadata["seed"], 7)

        path = save_dataset(entries, self.output_dir, Difficulty.EASY, metadata=metadata)
        self.assertEqual(path.name, "sudoku_easy.json")

        with path.open("r", encoding="utf-8") as fp:
            payload = json.load(fp)
        self.assertEqual(payload["count"], 3)
        self.assertEqual(payload["metadata"]["seed"], 7)
        self.assertEqual(payload["puzzles"], entries)

        puzzles = load_dataset(path)
        self.assertEqual(len(puzzles), 3)
        for puzzle, entry in zip(puzzles, entries):
            self.assertEqual(puzzle.values(), entry["puzzle"])
            self.assertTrue(has_unique_solution(puzzle.values()))

    def test_duplicates(self):
        entries, _ = generate_dataset(Difficulty.EASY, 2, seed=3)
        self.assertEqual(find_duplicate_puzzles(entries), [])

        path = save_dataset(entries + [entries[0]], self.output_dir, "easy")
        self.assertEqual(check_dataset_duplicates(path), [(0, 2)])

    def test_bad_payloads(self):
        path = self.output_dir / "broken.json"
        path.write_text(json.dumps({"count": 0}), encoding="utf-8")
        self.assertRaises(ValueError, load_dataset, path)
        self.assertRaises(FileNotFoundError, load_dataset, self.output_dir / "missing.json")
        self.assertRaises(ValueError, find_duplicate_puzzles, [{"solution": []}])

    def test_cli_writes_requested_files(self):
        main(
            [
                "--num-easy",
                "1",
                "--num-medium",
                "0",
                "--num-hard",
                "0",
                "--output-dir",
                str(self.output_dir),
                "--log-level",
                "WARNING",
            ]
        )
        self.assertTrue((self.output_dir / "sudoku_easy.json").exists())
        self.assertFalse((self.output_dir / "sudoku_medium.json").exists())
        self.assertEqual(len(load_dataset(self.output_dir / "sudoku_easy.json")), 1)


if __name__ == "__main__":
    unittest.main()
