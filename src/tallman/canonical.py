"""
Runner for language-neutral canonical test cases.

A canonical test file is JSON of the form:

    {
      "tests": [
        {
          "description": "Basic conversion",
          "input": "Patient prescribed prednisone",
          "expected": "Patient prescribed predniSONE",
          "listId": "DEFAULT"
        }
      ]
    }

Each case is run through a TallmanConverter and its output compared exactly
with `expected`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .config import load_config
from .converter import TallmanConverter
from .models import DEFAULT_LIST_ID
from .registry import TallmanError
from .sources import ListSourceError, load_bundled_lists, load_directory

logger = logging.getLogger("tallman.canonical")

SCHEMA_FILE = "test-schema.json"


class CanonicalCase(BaseModel):
    """A single input/expected pair."""
    model_config = {"populate_by_name": True}

    description: str
    input: str
    expected: str
    list_id: str = Field(default=DEFAULT_LIST_ID, alias="listId")


class CanonicalSuite(BaseModel):
    """Contents of one canonical test file."""
    tests: list[CanonicalCase] = Field(..., description="Cases in file order")


@dataclass
class CaseFailure:
    """A case whose output differed from the expectation, or that raised."""
    description: str
    input: str
    expected: str
    actual: str


@dataclass
class SuiteResult:
    """Outcome of running one canonical test file."""
    path: Path
    passed: int = 0
    failures: list[CaseFailure] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.passed + self.failed

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures


def load_suite(path: Path | str) -> CanonicalSuite:
    """Parse and validate a canonical test file.

    Raises:
        ListSourceError: If the file cannot be read or is not a valid suite
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ListSourceError(f"Failed to parse test file {path}: {e}") from e
    try:
        return CanonicalSuite.model_validate(data)
    except ValidationError as e:
        raise ListSourceError(f"Schema validation failed for {path}: {e}") from e


def run_suite(suite: CanonicalSuite, converter: TallmanConverter, path: Path) -> SuiteResult:
    result = SuiteResult(path=path)
    for case in suite.tests:
        try:
            actual = converter.convert(case.input, case.list_id)
        except TallmanError as e:
            actual = f"ERROR: {e}"
        if actual == case.expected:
            result.passed += 1
        else:
            logger.debug(f"{path.name}: '{case.description}' expected {case.expected!r}, got {actual!r}")
            result.failures.append(CaseFailure(case.description, case.input, case.expected, actual))
    return result


def run_canonical_file(path: Path | str, converter: TallmanConverter) -> SuiteResult:
    """Run every case of one file; a file that fails to parse is reported, not raised."""
    path = Path(path)
    try:
        suite = load_suite(path)
    except ListSourceError as e:
        return SuiteResult(path=path, error=str(e))
    return run_suite(suite, converter, path)


def run_canonical_directory(directory: Path | str, converter: TallmanConverter) -> list[SuiteResult]:
    """Run every canonical test file in `directory`, in name order."""
    directory = Path(directory)
    files = sorted(
        p for p in directory.glob("*.json")
        if p.name != SCHEMA_FILE
    )
    return [run_canonical_file(p, converter) for p in files]


def format_summary(results: list[SuiteResult]) -> str:
    """Human readable summary of a canonical run."""
    total = sum(r.total for r in results)
    passed = sum(r.passed for r in results)
    lines = []
    for r in results:
        if r.error is not None:
            lines.append(f"✗ {r.path.name}: {r.error}")
        else:
            lines.append(f"{'✓' if r.ok else '✗'} {r.path.name}: {r.passed} passed, {r.failed} failed")
            for failure in r.failures:
                lines.append(f"    {failure.description}")
                lines.append(f"      Input:    \"{failure.input}\"")
                lines.append(f"      Expected: \"{failure.expected}\"")
                lines.append(f"      Got:      \"{failure.actual}\"")
    if total:
        lines.append(f"Total tests: {total}, passed: {passed} ({passed / total * 100:.1f}%)")
    else:
        lines.append("No tests were run")
    return "\n".join(lines)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tallman-canonical",
        description="Run canonical Tall Man test files against the converter",
    )
    parser.add_argument("directory", type=Path, help="Directory of canonical test files")
    parser.add_argument(
        "--lists-dir",
        type=Path,
        default=None,
        help="Directory of term lists (default: TALLMAN_LISTS_DIR or the bundled lists)"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the tallman-canonical command."""
    args = parse_args(argv)
    config = load_config()
    logging.basicConfig(level=config.log_level)

    lists_dir = args.lists_dir or config.lists_dir
    try:
        registry = load_directory(lists_dir) if lists_dir else load_bundled_lists()
    except TallmanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.directory.is_dir():
        print(f"Error: test directory not found: {args.directory}", file=sys.stderr)
        return 1

    results = run_canonical_directory(args.directory, TallmanConverter(registry, config.default_list))
    print(format_summary(results))
    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
