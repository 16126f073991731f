#!/usr/bin/env python3
"""
Check exported recipe files before they are loaded elsewhere.

Every file must hold a JSON array of normalized recipes, such as the body of
GET /api/recipes/export. Each recipe is checked against the NormalizedRecipe
schema and for instruction steps numbered 1..n. Across all given files, a
(externalId, sourceName) pair may appear only once.

Usage:
    python scripts/validate_recipes.py export.json [more.json ...]

Exit codes:
    0 - No problems found
    1 - At least one problem, or a file could not be read
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.validation import check_instruction_numbering, validate_recipe

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def load_export(path: Path) -> list[Any]:
    """Read one export file. Raises ValueError with a printable reason."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON at line {e.lineno}: {e.msg}") from e
    if not isinstance(data, list):
        raise ValueError("root must be a JSON array of recipes")
    return data


def check_exports(paths: list[Path]) -> list[str]:
    """Return one line per problem found in the given export files."""
    problems: list[str] = []
    first_seen: dict[tuple[str, str], str] = {}

    for path in paths:
        try:
            items = load_export(path)
        except ValueError as e:
            problems.append(f"{path}: {e}")
            continue

        for index, item in enumerate(items):
            where = f"{path} index {index}"
            recipe, errors = validate_recipe(item)
            if recipe is None:
                problems.extend(
                    f"{where}: {'.'.join(map(str, err['loc'][1:])) or 'body'}: {err['msg']}"
                    for err in errors
                )
                continue

            problems.extend(f"{where}: {msg}" for msg in check_instruction_numbering(recipe))

            key = (recipe.external_id, recipe.source_name.value)
            if key in first_seen:
                problems.append(
                    f"{where}: duplicate recipe {key[1]}/{key[0]}, first seen at {first_seen[key]}"
                )
            else:
                first_seen[key] = where

    return problems


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check exported recipe JSON files.")
    parser.add_argument("files", nargs="+", type=Path, help="export files to check")
    args = parser.parse_args(argv)

    paths = [p if p.is_absolute() else PROJECT_ROOT / p for p in args.files]
    problems = check_exports(paths)
    for line in problems:
        print(line)

    if problems:
        print(f"\n{len(problems)} problem(s) found.", file=sys.stderr)
        return 1

    print(f"Checked {len(paths)} file(s): no problems found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
