"""
Sudoku puzzle generator.

A complete grid is built by seeding the three diagonal 3x3 boxes with random
permutations and filling the rest with randomized backtracking. Cells are then
removed one at a time in random order; a removal is kept only if the puzzle
still has exactly one solution. Removals are never revisited, so a puzzle may
end up with fewer empty cells than its difficulty asks for.
"""

from __future__ import annotations

import argparse
import random
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from loguru import logger

from sudoku_solver import (
    BOX_SIZE,
    DIGITS,
    SIZE,
    Board,
    format_board,
    has_unique_solution,
    is_complete_grid,
    is_valid_placement,
    validate_board_shape,
)


class SudokuGenerationError(RuntimeError):
    """Raised when the grid completer cannot finish a grid. Indicates a bug."""


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def cells_to_remove(self) -> int:
        return DIFFICULTY_PROFILES[self].cells_to_remove

    @classmethod
    def parse(
        cls, value: Union[str, "Difficulty"], *, strict: bool = False
    ) -> "Difficulty":
        """
        Turn user input into a Difficulty.

        Matching is case-insensitive. Unknown names fall back to EASY with a
        warning, unless `strict` is set, in which case ValueError is raised.
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError as exc:
            if strict:
                raise ValueError(f"Unknown difficulty: {value!r}") from exc
            logger.warning(
                "Unknown difficulty {!r}; falling back to {}", value, cls.EASY.value
            )
            return cls.EASY


@dataclass(frozen=True)
class DifficultyProfile:
    cells_to_remove: int


DIFFICULTY_PROFILES: Dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(cells_to_remove=40),
    Difficulty.MEDIUM: DifficultyProfile(cells_to_remove=50),
    Difficulty.HARD: DifficultyProfile(cells_to_remove=60),
}


@dataclass(frozen=True)
class PuzzleCell:
    value: int
    is_given: bool

    @property
    def is_empty(self) -> bool:
        return self.value == 0


@dataclass(frozen=True)
class Puzzle:
    """A generated puzzle: 81 cells in row-major order plus the grid it was carved from."""

    cells: Tuple[PuzzleCell, ...]
    solution: Tuple[Tuple[int, ...], ...]
    difficulty: Difficulty
    target_removed: int
    removed_count: int

    def cell(self, row: int, col: int) -> PuzzleCell:
        return self.cells[row * SIZE + col]

    def values(self) -> Board:
        return [
            [self.cells[r * SIZE + c].value for c in range(SIZE)] for r in range(SIZE)
        ]

    def givens(self) -> List[List[bool]]:
        return [
            [self.cells[r * SIZE + c].is_given for c in range(SIZE)]
            for r in range(SIZE)
        ]

    @property
    def given_count(self) -> int:
        return sum(cell.is_given for cell in self.cells)

    @property
    def reached_target(self) -> bool:
        return self.removed_count >= self.target_removed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty.value,
            "target_removed": self.target_removed,
            "removed_count": self.removed_count,
            "puzzle": self.values(),
            "solution": [list(row) for row in self.solution],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Puzzle":
        """
        Rebuild a puzzle from `to_dict` output.

        Non-empty cells are treated as givens and must agree with the solution.
        """
        try:
            values = payload["puzzle"]
            solution = payload["solution"]
        except KeyError as exc:
            raise ValueError(f"Puzzle payload missing {exc.args[0]!r}.") from exc

        validate_board_shape(values)
        if not is_complete_grid(solution):
            raise ValueError("Puzzle payload carries an invalid solution grid.")

        cells: List[PuzzleCell] = []
        for r in range(SIZE):
            for c in range(SIZE):
                value = values[r][c]
                if value and value != solution[r][c]:
                    raise ValueError(
                        f"Given {value} at cell ({r}, {c}) does not match the solution."
                    )
                cells.append(PuzzleCell(value=value, is_given=value != 0))

        difficulty = Difficulty.parse(payload.get("difficulty", Difficulty.EASY))
        removed_count = sum(1 for cell in cells if not cell.is_given)
        return cls(
            cells=tuple(cells),
            solution=tuple(tuple(row) for row in solution),
            difficulty=difficulty,
            target_removed=int(
                payload.get("target_removed", difficulty.cells_to_remove)
            ),
            removed_count=removed_count,
        )


class SudokuGenerator:
    """Generate Sudoku puzzles with guaranteed unique solutions."""

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.random = rng if rng is not None else random.Random(seed)

    def generate(self, difficulty: Union[str, Difficulty] = Difficulty.EASY) -> Puzzle:
        difficulty = Difficulty.parse(difficulty)
        start_time = time.perf_counter()

        complete_grid = self.generate_complete_grid()
        puzzle = self.create_puzzle(complete_grid, difficulty)

        logger.debug(
            "Generated {} puzzle: removed {}/{} cells in {:.3f}s",
            difficulty.value,
            puzzle.removed_count,
            puzzle.target_removed,
            time.perf_counter() - start_time,
        )
        return puzzle

    # Grid completer -------------------------------------------------------

    def generate_complete_grid(self) -> Board:
        grid: Board = [[0] * SIZE for _ in range(SIZE)]
        self._fill_diagonal_boxes(grid)

        if not self._fill_remaining(grid, 0, BOX_SIZE):
            raise SudokuGenerationError(
                "Failed to generate a complete Sudoku solution."
            )
        return [row[:] for row in grid]

    def _shuffled_digits(self) -> List[int]:
        numbers = list(DIGITS)
        self.random.shuffle(numbers)
        return numbers

    def _fill_diagonal_boxes(self, grid: Board) -> None:
        # Diagonal boxes share no row, column or box, so any permutation fits.
        for start in range(0, SIZE, BOX_SIZE):
            self._fill_box(grid, start, start)

    def _fill_box(self, grid: Board, row: int, col: int) -> None:
        for index, value in enumerate(self._shuffled_digits()):
            grid[row + index // BOX_SIZE][col + index % BOX_SIZE] = value

    @staticmethod
    def _next_empty(grid: Board, row: int, col: int) -> Optional[Tuple[int, int]]:
        index = row * SIZE + col
        while index < SIZE * SIZE:
            r, c = divmod(index, SIZE)
            if grid[r][c] == 0:
                return r, c
            index += 1
        return None

    def _fill_remaining(self, grid: Board, row: int, col: int) -> bool:
        cell = self._next_empty(grid, row, col)
        if cell is None:
            return True

        row, col = cell
        for value in self._shuffled_digits():
            if is_valid_placement(grid, row, col, value):
                grid[row][col] = value
                if self._fill_remaining(grid, row, col + 1):
                    return True
                grid[row][col] = 0

        return False

    # Uniqueness-checked reducer -------------------------------------------

    def create_puzzle(
        self, complete_grid: Board, difficulty: Union[str, Difficulty]
    ) -> Puzzle:
        difficulty = Difficulty.parse(difficulty)
        if not is_complete_grid(complete_grid):
            raise ValueError("create_puzzle requires a complete, valid grid.")

        target_removed = difficulty.cells_to_remove
        values = [list(row) for row in complete_grid]
        given = [[True] * SIZE for _ in range(SIZE)]

        positions = [(r, c) for r in range(SIZE) for c in range(SIZE)]
        self.random.shuffle(positions)

        removed = 0
        for row, col in positions:
            if removed >= target_removed:
                break

            original_value = values[row][col]
            values[row][col] = 0
            given[row][col] = False

            if has_unique_solution(values):
                removed += 1
            else:
                values[row][col] = original_value
                given[row][col] = True

        if removed < target_removed:
            logger.debug(
                "Removal order exhausted at {}/{} cells for {} puzzle",
                removed,
                target_removed,
                difficulty.value,
            )

        cells = tuple(
            PuzzleCell(value=values[r][c], is_given=given[r][c])
            for r in range(SIZE)
            for c in range(SIZE)
        )
        return Puzzle(
            cells=cells,
            solution=tuple(tuple(row) for row in complete_grid),
            difficulty=difficulty,
            target_removed=target_removed,
            removed_count=removed,
        )


def generate_puzzle(
    difficulty: Union[str, Difficulty] = Difficulty.EASY,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Puzzle:
    """
    Generate one puzzle.

    Args:
        difficulty: Difficulty or its name; unknown names fall back to easy.
        seed: Seed for a fresh random source, for reproducible puzzles.
        rng: Random source to use instead of `seed`.

    Returns:
        Puzzle: cells in row-major order with their given flags, plus solution.
    """
    return SudokuGenerator(seed=seed, rng=rng).generate(difficulty)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a single Sudoku puzzle with a unique solution."
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        default=Difficulty.EASY.value,
        help="easy, medium or hard (default: easy).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible puzzles.",
    )
    parser.add_argument(
        "--show-solution",
        action="store_true",
        help="Also print the solution grid.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level)

    puzzle = generate_puzzle(args.difficulty, seed=args.seed)
    logger.info(
        "Difficulty={} removed={}/{} givens={}",
        puzzle.difficulty.value,
        puzzle.removed_count,
        puzzle.target_removed,
        puzzle.given_count,
    )

    print(format_board(puzzle.values()))
    if args.show_solution:
        print("\nSolution:")
        print(format_board(puzzle.solution))


__all__ = [
    "Difficulty",
    "DifficultyProfile",
    "DIFFICULTY_PROFILES",
    "Puzzle",
    "PuzzleCell",
    "SudokuGenerator",
    "SudokuGenerationError",
    "generate_puzzle",
]


if __name__ == "__main__":
    main()
