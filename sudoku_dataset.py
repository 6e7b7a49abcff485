"""
Sudoku dataset generation utilities.

Generates batches of 9x9 puzzles per difficulty, each with a unique solution,
and saves them together with their solutions under the `sudoku_dataset`
directory.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger

from sudoku_generator import Difficulty, Puzzle, SudokuGenerator

Entry = Dict[str, Any]


def generate_dataset(
    difficulty: Union[str, Difficulty],
    count: int,
    *,
    seed: Optional[int] = None,
) -> Tuple[List[Entry], Dict[str, Any]]:
    difficulty = Difficulty.parse(difficulty)
    generator = SudokuGenerator(seed=seed)
    entries: List[Entry] = []
    shortfall = 0
    start_time = time.time()

    progress_step = max(1, count // 20)

    for index in range(count):
        puzzle = generator.generate(difficulty)
        if not puzzle.reached_target:
            shortfall += 1
        entries.append(puzzle.to_dict())

        if (index + 1) % progress_step == 0 or index == count - 1:
            logger.info(
                "[{}] Generated {}/{} puzzles.", difficulty.value, index + 1, count
            )

    elapsed = time.time() - start_time
    metadata = {
        "difficulty": difficulty.value,
        "target_removed": difficulty.cells_to_remove,
        "seed": seed,
        "shortfall_count": shortfall,
        "elapsed_seconds": round(elapsed, 2),
    }
    logger.info(
        "[{}] Dataset ready in {:.1f}s ({} puzzle(s) short of target).",
        difficulty.value,
        elapsed,
        shortfall,
    )

    return entries, metadata


def _write_board(fp, board: Sequence[Sequence[int]], indent: int) -> None:
    row_indent = " " * (indent + 2)
    fp.write("[\n")
    for row_index, row in enumerate(board):
        row_json = json.dumps(list(row), ensure_ascii=False)
        row_trailing = "," if row_index < len(board) - 1 else ""
        fp.write(f"{row_indent}{row_json}{row_trailing}\n")
    fp.write(" " * indent + "]")


def save_dataset(
    entries: List[Entry],
    output_dir: Path,
    difficulty: Union[str, Difficulty],
    metadata: Optional[Dict[str, Any]] = None,
) -> Path:
    difficulty = Difficulty.parse(difficulty)
    output_dir.mkdir(parents=True, exist_ok=True)
    dataset_path = output_dir / f"sudoku_{difficulty.value}.json"

    generated_at = time.strftime("%Y-%m-%d %H:%M:%S")
    count = len(entries)

    with dataset_path.open("w", encoding="utf-8") as fp:
        fp.write("{\n")
        fp.write(f'  "difficulty": "{difficulty.value}",\n')
        fp.write(f'  "count": {count},\n')
        fp.write(f'  "generated_at": "{generated_at}",\n')

        if metadata:
            metadata_json = json.dumps(metadata, ensure_ascii=False, indent=2)
            metadata_lines = metadata_json.splitlines()
            fp.write('  "metadata": ' + metadata_lines[0] + "\n")
            for line in metadata_lines[1:]:
                fp.write("  " + line + "\n")
            fp.write(",\n")

        fp.write('  "puzzles": [\n')
        for entry_index, entry in enumerate(entries):
            fp.write("    {\n")
            fp.write(f'      "difficulty": "{entry["difficulty"]}",\n')
            fp.write(f'      "target_removed": {entry["target_removed"]},\n')
            fp.write(f'      "removed_count": {entry["removed_count"]},\n')

            fp.write('      "puzzle": ')
            _write_board(fp, entry["puzzle"], indent=6)
            fp.write(",\n")

            fp.write('      "solution": ')
            _write_board(fp, entry["solution"], indent=6)
            fp.write("\n")

            entry_trailing = "," if entry_index < count - 1 else ""
            fp.write(f"    }}{entry_trailing}\n")
        fp.write("  ]\n")
        fp.write("}\n")

    return dataset_path


def _read_payload(dataset_path: Path) -> List[Entry]:
    dataset_path = dataset_path.resolve()
    if not dataset_path.exists():
        raise FileNotFoundError(f"Dataset file not found: {dataset_path}")

    with dataset_path.open("r", encoding="utf-8") as fp:
        payload = json.load(fp)

    puzzles = payload.get("puzzles") if isinstance(payload, dict) else None
    if not isinstance(puzzles, list):
        raise ValueError("Dataset payload missing 'puzzles' list.")
    return puzzles


def load_dataset(dataset_path: Path) -> List[Puzzle]:
    puzzles: List[Puzzle] = []
    for index, entry in enumerate(_read_payload(dataset_path)):
        if not isinstance(entry, dict):
            raise ValueError(f"Entry {index} is not an object.")
        puzzles.append(Puzzle.from_dict(entry))
    return puzzles


def find_duplicate_puzzles(entries: Sequence[Entry]) -> List[Tuple[int, int]]:
    seen: Dict[Tuple[Tuple[int, ...], ...], int] = {}
    duplicates: List[Tuple[int, int]] = []

    for index, entry in enumerate(entries):
        puzzle = entry.get("puzzle")
        if not isinstance(puzzle, list):
            raise ValueError(f"Entry {index} missing 'puzzle' grid.")

        key = tuple(tuple(int(cell) for cell in row) for row in puzzle)

        if key in seen:
            duplicates.append((seen[key], index))
        else:
            seen[key] = index

    return duplicates


def check_dataset_duplicates(dataset_path: Path) -> List[Tuple[int, int]]:
    duplicates = find_duplicate_puzzles(_read_payload(dataset_path))

    if duplicates:
        logger.warning(
            "Found {} duplicate puzzle(s) in {}", len(duplicates), dataset_path
        )
        for first_index, dup_index in duplicates:
            logger.warning(
                "  - Duplicate puzzle at indices {} and {}", first_index, dup_index
            )
    else:
        logger.info("No duplicate puzzles found in {}.", dataset_path)

    return duplicates


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate Sudoku datasets with unique solutions."
    )
    parser.add_argument(
        "--num-easy",
        type=int,
        default=100,
        help="Number of easy puzzles to generate (default: 100).",
    )
    parser.add_argument(
        "--num-medium",
        type=int,
        default=100,
        help="Number of medium puzzles to generate (default: 100).",
    )
    parser.add_argument(
        "--num-hard",
        type=int,
        default=100,
        help="Number of hard puzzles to generate (default: 100).",
    )
    parser.add_argument(
        "--seed-easy",
        type=int,
        default=2024,
        help="Random seed for easy puzzle generation.",
    )
    parser.add_argument(
        "--seed-medium",
        type=int,
        default=2025,
        help="Random seed for medium puzzle generation.",
    )
    parser.add_argument(
        "--seed-hard",
        type=int,
        default=2026,
        help="Random seed for hard puzzle generation.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd() / "sudoku_dataset",
        help="Directory to store generated datasets.",
    )
    parser.add_argument(
        "--check-file",
        type=Path,
        default=None,
        help="Check the specified dataset file for duplicate puzzles.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level for console output (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    logger.remove()
    logger.add(sys.stdout, level=args.log_level)

    if args.check_file:
        check_dataset_duplicates(args.check_file)
        return

    output_dir = args.output_dir.resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    log_sink = logger.add(output_dir / "generate.log", level="DEBUG", encoding="utf-8")

    tasks = [
        (Difficulty.EASY, args.num_easy, args.seed_easy),
        (Difficulty.MEDIUM, args.num_medium, args.seed_medium),
        (Difficulty.HARD, args.num_hard, args.seed_hard),
    ]

    overall_start = time.time()

    for difficulty, count, seed in tasks:
        if count <= 0:
            logger.info("[{}] Skipping generation (count <= 0).", difficulty.value)
            continue

        logger.info(
            "[{}] Starting generation of {} puzzles (seed={}).",
            difficulty.value,
            count,
            seed,
        )
        entries, metadata = generate_dataset(difficulty, count, seed=seed)
        metadata.update(
            {
                "requested_count": count,
                "actual_count": len(entries),
            }
        )
        path = save_dataset(entries, output_dir, difficulty, metadata=metadata)
        logger.info("[{}] Dataset saved to {}.", difficulty.value, path)

    overall_elapsed = time.time() - overall_start
    logger.info("All tasks completed in {:.1f}s.", overall_elapsed)
    logger.remove(log_sink)


if __name__ == "__main__":
    main()
