"""
Sudoku rules and backtracking solver.

Provides the placement check shared by the generator and the solver, a few
whole-board predicates, and `SudokuSolver`, a backtracking search that can
stop as soon as a given number of solutions has been found (used to test
whether a puzzle is uniquely solvable).
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set, Tuple

SIZE = 9
BOX_SIZE = 3
DIGITS = tuple(range(1, SIZE + 1))

Board = List[List[int]]


def validate_board_shape(board: Sequence[Sequence[int]]) -> None:
    """
    Make sure the board is a 9x9 matrix of integers in 0..9.

    Raises:
        ValueError: if the board has the wrong shape or an out-of-range value.
    """
    if len(board) != SIZE or any(len(row) != SIZE for row in board):
        raise ValueError(f"Sudoku board must be {SIZE}x{SIZE}.")

    for r, row in enumerate(board):
        for c, value in enumerate(row):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Cell ({r}, {c}) is not an integer: {value!r}.")
            if value != 0 and value not in DIGITS:
                raise ValueError(f"Cell ({r}, {c}) contains invalid value {value}.")


def is_valid_placement(
    board: Sequence[Sequence[int]], row: int, col: int, value: int
) -> bool:
    """
    Check whether `value` may be placed at (row, col).

    Only the other 80 cells are looked at, so whatever currently sits in
    (row, col) does not affect the answer.

    Args:
        board: 9x9 board, 0 marks an empty cell
        row: row index
        col: column index
        value: candidate digit (1-9)

    Returns:
        bool: True if no other cell in the row, column or box holds `value`.
    """
    for c in range(SIZE):
        if c != col and board[row][c] == value:
            return False

    for r in range(SIZE):
        if r != row and board[r][col] == value:
            return False

    start_row = (row // BOX_SIZE) * BOX_SIZE
    start_col = (col // BOX_SIZE) * BOX_SIZE
    for r in range(start_row, start_row + BOX_SIZE):
        for c in range(start_col, start_col + BOX_SIZE):
            if (r != row or c != col) and board[r][c] == value:
                return False

    return True


def find_conflicts(
    board: Sequence[Sequence[int]], row: int, col: int, value: int
) -> Set[Tuple[int, int]]:
    """Return every other cell in the row, column or box that already holds `value`."""
    conflicts: Set[Tuple[int, int]] = set()

    for c in range(SIZE):
        if c != col and board[row][c] == value:
            conflicts.add((row, c))

    for r in range(SIZE):
        if r != row and board[r][col] == value:
            conflicts.add((r, col))

    start_row = (row // BOX_SIZE) * BOX_SIZE
    start_col = (col // BOX_SIZE) * BOX_SIZE
    for r in range(start_row, start_row + BOX_SIZE):
        for c in range(start_col, start_col + BOX_SIZE):
            if (r != row or c != col) and board[r][c] == value:
                conflicts.add((r, c))

    return conflicts


def is_consistent(board: Sequence[Sequence[int]]) -> bool:
    """True if no filled cell clashes with another filled cell. Empty cells are allowed."""
    for r in range(SIZE):
        for c in range(SIZE):
            value = board[r][c]
            if value and not is_valid_placement(board, r, c, value):
                return False
    return True


def is_complete_grid(board: Sequence[Sequence[int]]) -> bool:
    """True if every row, column and box of the board is a permutation of 1..9."""
    try:
        validate_board_shape(board)
    except ValueError:
        return False

    digits = set(DIGITS)
    for i in range(SIZE):
        if set(board[i]) != digits:
            return False
        if {board[r][i] for r in range(SIZE)} != digits:
            return False

    for box_row in range(0, SIZE, BOX_SIZE):
        for box_col in range(0, SIZE, BOX_SIZE):
            box = {
                board[r][c]
                for r in range(box_row, box_row + BOX_SIZE)
                for c in range(box_col, box_col + BOX_SIZE)
            }
            if box != digits:
                return False

    return True


def board_to_text(board: Sequence[Sequence[int]]) -> str:
    """Render the board as text, empty cells shown as '.'."""

    return "\n".join(
        " ".join(str(value) if value else "." for value in row) for row in board
    )


def format_board(board: Sequence[Sequence[int]]) -> str:
    """Render the board with separators between the 3x3 boxes."""
    lines = ["=" * 25]
    for i, row in enumerate(board):
        if i % BOX_SIZE == 0 and i != 0:
            lines.append("-" * 25)

        row_str = ""
        for j, value in enumerate(row):
            if j % BOX_SIZE == 0 and j != 0:
                row_str += " | "
            row_str += (str(value) if value else ".") + " "
        lines.append(row_str.rstrip())
    lines.append("=" * 25)
    return "\n".join(lines)


class SudokuSolver:
    """Backtracking Sudoku solver with bounded solution counting."""

    def __init__(self, board: Sequence[Sequence[int]]) -> None:
        validate_board_shape(board)

        self.board: Board = [list(row) for row in board]

        self.rows = [set() for _ in range(SIZE)]
        self.cols = [set() for _ in range(SIZE)]
        self.boxes = [set() for _ in range(SIZE)]

        for r in range(SIZE):
            for c in range(SIZE):
                value = self.board[r][c]
                if value == 0:
                    continue
                box_index = self._box_index(r, c)
                if (
                    value in self.rows[r]
                    or value in self.cols[c]
                    or value in self.boxes[box_index]
                ):
                    raise ValueError(
                        f"Duplicate value {value} detected at cell ({r}, {c})."
                    )
                self.rows[r].add(value)
                self.cols[c].add(value)
                self.boxes[box_index].add(value)

        self.solution_counter = 0
        self.first_solution: Optional[Board] = None
        self.steps = 0
        self._solution_limit = 1

    def count_solutions(self, limit: int = 2) -> int:
        """
        Count solutions of the board, stopping once `limit` have been found.

        Args:
            limit: Maximum number of solutions to search for. Use 2 to test
                uniqueness: the search unwinds as soon as a second solution
                turns up.

        Returns:
            int: Number of solutions found, never more than `limit`.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1.")

        self.solution_counter = 0
        self.first_solution = None
        self.steps = 0
        self._solution_limit = limit
        self._backtrack()
        return self.solution_counter

    def solve(self) -> bool:
        """
        Solve the puzzle in place.

        Returns:
            bool: True if a solution was found; `board` then holds it.
        """
        if self.count_solutions(limit=1) and self.first_solution is not None:
            self.board = [row[:] for row in self.first_solution]
            return True
        return False

    def get_solution(self) -> Board:
        """Return a deep copy of the current board state."""
        return [row[:] for row in self.board]

    # Internal helpers -----------------------------------------------------

    def _box_index(self, row: int, col: int) -> int:
        return (row // BOX_SIZE) * BOX_SIZE + (col // BOX_SIZE)

    def _candidate_list(self, row: int, col: int) -> List[int]:
        used = (
            self.rows[row]
            | self.cols[col]
            | self.boxes[self._box_index(row, col)]
        )
        return [digit for digit in DIGITS if digit not in used]

    def _select_unassigned_cell(self) -> Optional[Tuple[int, int, List[int]]]:
        best_cell: Optional[Tuple[int, int]] = None
        best_candidates: Optional[List[int]] = None
        min_candidate_count = SIZE + 1

        for r in range(SIZE):
            row = self.board[r]
            for c in range(SIZE):
                if row[c] != 0:
                    continue
                candidates = self._candidate_list(r, c)
                candidate_count = len(candidates)

                if candidate_count == 0:
                    return (r, c, [])

                if candidate_count < min_candidate_count:
                    min_candidate_count = candidate_count
                    best_cell = (r, c)
                    best_candidates = candidates
                    if candidate_count == 1:
                        return (r, c, candidates)

        if best_cell is None or best_candidates is None:
            return None

        return (best_cell[0], best_cell[1], best_candidates)

    def _place_value(self, row: int, col: int, value: int) -> None:
        self.board[row][col] = value
        self.rows[row].add(value)
        self.cols[col].add(value)
        self.boxes[self._box_index(row, col)].add(value)

    def _remove_value(self, row: int, col: int, value: int) -> None:
        self.board[row][col] = 0
        self.rows[row].remove(value)
        self.cols[col].remove(value)
        self.boxes[self._box_index(row, col)].remove(value)

    def _backtrack(self) -> bool:
        self.steps += 1
        selection = self._select_unassigned_cell()
        if selection is None:
            self.solution_counter += 1
            if self.first_solution is None:
                self.first_solution = [row[:] for row in self.board]
            return self.solution_counter >= self._solution_limit

        row, col, candidates = selection
        if not candidates:
            return False

        for value in candidates:
            self._place_value(row, col, value)
            should_stop = self._backtrack()
            self._remove_value(row, col, value)
            if should_stop:
                return True

        return False


def count_solutions(board: Sequence[Sequence[int]], limit: int = 2) -> int:
    """
    Count the completions of a board, up to `limit`.

    A board whose filled cells already break a rule has no completion, so 0 is
    returned for it instead of raising. The caller's board is left untouched.
    """
    validate_board_shape(board)
    if not is_consistent(board):
        return 0
    return SudokuSolver(board).count_solutions(limit=limit)


def has_unique_solution(board: Sequence[Sequence[int]]) -> bool:
    return count_solutions(board, limit=2) == 1


def solve_grid(board: Sequence[Sequence[int]]) -> Optional[Board]:
    """Return one solution of the board, or None if it has none."""
    validate_board_shape(board)
    if not is_consistent(board):
        return None
    solver = SudokuSolver(board)
    if not solver.solve():
        return None
    return solver.get_solution()


__all__ = [
    "SudokuSolver",
    "count_solutions",
    "has_unique_solution",
    "solve_grid",
    "is_valid_placement",
    "find_conflicts",
    "is_consistent",
    "is_complete_grid",
    "validate_board_shape",
    "board_to_text",
    "format_board",
    "Board",
    "SIZE",
    "BOX_SIZE",
    "DIGITS",
]
