# -*- coding: utf-8 -*-
"""Test cases for the placement check and the bounded solution counter."""
import unittest

from sudoku_solver import (
    SudokuSolver,
    board_to_text,
    count_solutions,
    find_conflicts,
    has_unique_solution,
    is_complete_grid,
    is_consistent,
    is_valid_placement,
    solve_grid,
    validate_board_shape,
)
from tests.tools import EXAMPLE_PUZZLE, EXAMPLE_SOLUTION, copy_board, empty_board


class TestPlacementCheck(unittest.TestCase):
    def test_own_cell_is_ignored(self):
        for r in range(9):
            for c in range(9):
                with self.subTest(row=r, col=c):
                    self.assertTrue(
                        is_valid_placement(EXAMPLE_SOLUTION, r, c, EXAMPLE_SOLUTION[r][c])
                    )

    def test_row_column_and_box_conflicts(self):
        # 3 sits in row 0 at (0, 1) and in column 0 at (8, 0)
        self.assertFalse(is_valid_placement(EXAMPLE_SOLUTION, 0, 0, 3))
        self.assertEqual(find_conflicts(EXAMPLE_SOLUTION, 0, 0, 3), {(0, 1), (8, 0)})

        board = empty_board()
        board[1][1] = 7
        self.assertFalse(is_valid_placement(board, 0, 0, 7))
        self.assertTrue(is_valid_placement(board, 0, 3, 7))
        self.assertFalse(is_valid_placement(board, 5, 1, 7))
        self.assertEqual(find_conflicts(board, 0, 0, 7), {(1, 1)})

    def test_repeated_calls_agree(self):
        board = copy_board(EXAMPLE_PUZZLE)
        first = [is_valid_placement(board, 2, 3, v) for v in range(1, 10)]
        second = [is_valid_placement(board, 2, 3, v) for v in range(1, 10)]
        self.assertEqual(first, second)
        self.assertEqual(board, EXAMPLE_PUZZLE)

    def test_board_predicates(self):
        self.assertTrue(is_complete_grid(EXAMPLE_SOLUTION))
        self.assertFalse(is_complete_grid(EXAMPLE_PUZZLE))
        self.assertTrue(is_consistent(EXAMPLE_PUZZLE))
        self.assertTrue(is_consistent(empty_board()))

        broken = copy_board(EXAMPLE_SOLUTION)
        broken[0][1] = 5
        self.assertFalse(is_consistent(broken))
        self.assertFalse(is_complete_grid(broken))

    def test_shape_validation(self):
        self.assertRaises(ValueError, validate_board_shape, [[0] * 9] * 8)
        self.assertRaises(ValueError, validate_board_shape, [[0] * 8] * 9)
        bad_value = empty_board()
        bad_value[4][4] = 10
        self.assertRaises(ValueError, validate_board_shape, bad_value)
        self.assertFalse(is_complete_grid([[1] * 9]))

    def test_board_to_text(self):
        text = board_to_text(EXAMPLE_PUZZLE)
        self.assertEqual(text.splitlines()[0], "5 3 . . 7 . . . .")
        self.assertEqual(len(text.splitlines()), 9)


class TestSolutionCounter(unittest.TestCase):
    def test_unique_puzzle(self):
        self.assertEqual(count_solutions(EXAMPLE_PUZZLE), 1)
        self.assertTrue(has_unique_solution(EXAMPLE_PUZZLE))
        self.assertEqual(solve_grid(EXAMPLE_PUZZLE), EXAMPLE_SOLUTION)

    def test_caller_board_is_untouched(self):
        board = copy_board(EXAMPLE_PUZZLE)
        count_solutions(board)
        solve_grid(board)
        self.assertEqual(board, EXAMPLE_PUZZLE)

    def test_full_valid_grid_counts_once(self):
        solver = SudokuSolver(EXAMPLE_SOLUTION)
        self.assertEqual(solver.count_solutions(limit=2), 1)
        self.assertEqual(solver.steps, 1)
        self.assertEqual(count_solutions(EXAMPLE_SOLUTION), 1)

    def test_full_grid_with_duplicate_has_no_solution(self):
        broken = copy_board(EXAMPLE_SOLUTION)
        broken[0][1] = 5
        self.assertEqual(count_solutions(broken), 0)
        self.assertFalse(has_unique_solution(broken))
        self.assertIsNone(solve_grid(broken))
        self.assertRaises(ValueError, SudokuSolver, broken)

    def test_empty_grid_stops_at_second_solution(self):
        solver = SudokuSolver(empty_board())
        self.assertEqual(solver.count_solutions(limit=2), 2)
        # full enumeration would need billions of nodes
        self.assertLess(solver.steps, 100_000)
        self.assertFalse(has_unique_solution(empty_board()))

    def test_under_constrained_grid(self):
        board = empty_board()
        board[0] = list(EXAMPLE_SOLUTION[0])
        self.assertEqual(count_solutions(board), 2)
        self.assertEqual(count_solutions(board, limit=5), 5)

    def test_unsolvable_consistent_grid(self):
        # no row/col/box duplicate, yet (0, 8) has no candidate left
        board = empty_board()
        board[0] = [1, 2, 3, 4, 5, 6, 7, 8, 0]
        board[5][8] = 9
        self.assertTrue(is_consistent(board))
        self.assertEqual(count_solutions(board), 0)
        self.assertIsNone(solve_grid(board))

    def test_solve_in_place(self):
        solver = SudokuSolver(EXAMPLE_PUZZLE)
        self.assertTrue(solver.solve())
        self.assertEqual(solver.get_solution(), EXAMPLE_SOLUTION)

    def test_invalid_limit(self):
        solver = SudokuSolver(EXAMPLE_PUZZLE)
        self.assertRaises(ValueError, solver.count_solutions, 0)


if __name__ == "__main__":
    unittest.main()
