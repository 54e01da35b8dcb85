"""
Validation of term list files.

Checks each list file against the list schema and for data problems the
registry would refuse at startup (duplicate keys, blank entries), plus the
YYYYMMDD.N version convention. Produces one report per file and a manifest
summarising the valid lists.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .config import load_config
from .models import ManifestEntry, TermListFile
from .sources import ListSourceError, bundled_lists_dir, list_files_in, load_list_file
from .unicode import make_key

logger = logging.getLogger("tallman.validator")

VERSION_PATTERN = re.compile(r"^\d{8}\.\d+$")
MANIFEST_NAME = "manifest.json"


class ValidationSeverity(Enum):
    """Severity level for validation issues."""
    ERROR = "error"      # The list cannot be loaded as is
    WARNING = "warning"  # Suspicious, but loadable


@dataclass
class ValidationIssue:
    """A single problem found in a list file."""
    severity: ValidationSeverity
    type: str           # e.g., "duplicate_entry", "invalid_version"
    message: str


@dataclass
class ValidationReport:
    """
    Validation result for one list file.

    A file is valid when it has no ERROR-level issues. `list_file` is None
    when the file could not be parsed at all.
    """
    path: Path
    list_file: TermListFile | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def add(self, severity: ValidationSeverity, type: str, message: str) -> None:
        self.issues.append(ValidationIssue(severity, type, message))

    def __str__(self) -> str:
        lines = [f"Validation Report for {self.path.name}"]
        lines.append(f"Status: {'✓ VALID' if self.valid else '✗ INVALID'}")
        if self.list_file is not None:
            lines.append(f"List: {self.list_file.id} ({len(self.list_file.entries)} entries)")
        for issue in self.issues:
            lines.append(f"  - {issue.severity.value.upper()} [{issue.type}] {issue.message}")
        return "\n".join(lines)


def check_entries(report: ValidationReport, entries: list[str]) -> None:
    """Flag blank entries and entries whose keys collide."""
    seen: dict[str, int] = {}
    for index, entry in enumerate(entries):
        if not entry or not entry.strip():
            report.add(ValidationSeverity.ERROR, "empty_entry", f"Empty entry at index {index}")
            continue
        key = make_key(entry.strip())
        if key in seen:
            report.add(
                ValidationSeverity.ERROR,
                "duplicate_entry",
                f"\"{entry}\" at indices {seen[key]}, {index}",
            )
        else:
            seen[key] = index


def check_version(report: ValidationReport, version: str) -> None:
    """Check the YYYYMMDD.N version format and the plausibility of its date."""
    if not VERSION_PATTERN.match(version):
        report.add(
            ValidationSeverity.ERROR,
            "invalid_version",
            f"Invalid version format: \"{version}\" (expected YYYYMMDD.N)",
        )
        return

    date_part = version.split(".")[0]
    year, month, day = int(date_part[:4]), int(date_part[4:6]), int(date_part[6:8])
    if not (2000 <= year <= 2100 and 1 <= month <= 12 and 1 <= day <= 31):
        report.add(
            ValidationSeverity.WARNING,
            "suspicious_version_date",
            f"Version date component may be invalid: {year}-{month}-{day}",
        )


def validate_list_file(path: Path | str) -> ValidationReport:
    """Validate one list file and return its report."""
    path = Path(path)
    report = ValidationReport(path=path)

    try:
        list_file = load_list_file(path)
    except ListSourceError as e:
        report.add(ValidationSeverity.ERROR, "schema", str(e))
        return report

    report.list_file = list_file
    check_entries(report, list_file.entries)
    if path.suffix.lower() != ".txt":
        check_version(report, list_file.version)

    for issue in report.warnings:
        logger.warning(f"{path.name}: {issue.message}")
    return report


def validate_directory(directory: Path | str) -> list[ValidationReport]:
    """Validate every list file in `directory`, in name order."""
    reports = [validate_list_file(path) for path in list_files_in(directory)]

    # The same list id in two files would fail at registry load time.
    owners: dict[str, Path] = {}
    for report in reports:
        if report.list_file is None:
            continue
        list_id = report.list_file.id
        if list_id in owners:
            report.add(
                ValidationSeverity.ERROR,
                "duplicate_list_id",
                f"List id '{list_id}' is already defined in {owners[list_id].name}",
            )
        else:
            owners[list_id] = report.path
    return reports


def build_manifest(reports: list[ValidationReport]) -> list[ManifestEntry]:
    """Summarise the valid lists among `reports`."""
    return [
        ManifestEntry(
            id=r.list_file.id,
            version=r.list_file.version,
            entries=len(r.list_file.entries),
            description=r.list_file.description,
        )
        for r in reports
        if r.valid and r.list_file is not None
    ]


def write_manifest(directory: Path | str, manifest: list[ManifestEntry]) -> Path:
    """Write `manifest` as manifest.json in `directory` and return its path."""
    path = Path(directory) / MANIFEST_NAME
    data = [entry.model_dump() for entry in manifest]
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def _is_bundled(directory: Path | str) -> bool:
    return Path(directory).resolve() == bundled_lists_dir().resolve()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tallman-validate",
        description="Validate Tall Man term list files and write a manifest",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        type=Path,
        default=None,
        help="Directory of list files (default: TALLMAN_LISTS_DIR or the bundled lists)"
    )
    parser.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not write manifest.json"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the tallman-validate command."""
    args = parse_args(argv)
    config = load_config()
    logging.basicConfig(level=config.log_level)

    directory = args.directory or config.lists_dir or bundled_lists_dir()
    try:
        reports = validate_directory(directory)
    except ListSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not reports:
        print(f"No list files found in {directory}")
        return 0

    for report in reports:
        print(report)
        print()

    manifest = build_manifest(reports)
    for entry in manifest:
        print(f"  {entry.id}: {entry.entries} entries (v{entry.version})")
    if manifest and not args.no_manifest:
        if _is_bundled(directory):
            print("Bundled lists are read-only, manifest not written")
        else:
            try:
                path = write_manifest(directory, manifest)
            except OSError as e:
                print(f"Error: failed to write manifest: {e}", file=sys.stderr)
                return 1
            print(f"Manifest written to: {path}")

    if any(not r.valid for r in reports):
        print("Validation failed with errors")
        return 1
    print("All validations passed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
