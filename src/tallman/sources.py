"""
Loading term lists from files.

Supported formats:
- .json / .yaml / .yml - an object with ``id``, ``version``, ``description``
  and ``entries`` keys (see TermListFile)
- .txt - one Tall Man display form per line; blank lines and lines starting
  with ``#`` are skipped, the list id is the upper-cased file stem
"""

import json
import logging
from importlib import resources
from pathlib import Path
from threading import RLock

import yaml
from pydantic import ValidationError

from .config import load_config
from .models import TermListFile
from .registry import TallmanError, TermRegistry

logger = logging.getLogger("tallman")

SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml", ".txt"}

# Files that may sit next to the lists but are not lists themselves.
RESERVED_FILES = {"schema.json", "manifest.json"}


class ListSourceError(TallmanError):
    """Error reading or parsing a term list file."""
    pass


def parse_list_data(data: object, origin: str) -> TermListFile:
    """Validate already-decoded list data against the list file model."""
    if not isinstance(data, dict):
        raise ListSourceError(f"{origin}: term list must be an object at the top level")
    try:
        return TermListFile.model_validate(data)
    except ValidationError as e:
        raise ListSourceError(f"{origin}: invalid term list: {e}") from e


def _read_text_list(path: Path, raw_content: str) -> TermListFile:
    entries = [
        line.strip()
        for line in raw_content.splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    return parse_list_data({"id": path.stem, "entries": entries}, str(path))


def load_list_file(path: Path | str) -> TermListFile:
    """Read a single list file.

    Args:
        path: Path to a .json, .yaml, .yml or .txt file

    Returns:
        The validated TermListFile

    Raises:
        ListSourceError: If the file is missing, unsupported, malformed or
            does not match the list schema
    """
    path = Path(path)
    if not path.exists():
        raise ListSourceError(f"Term list file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ListSourceError(
            f"Unsupported file format: {suffix}. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    try:
        raw_content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ListSourceError(f"Failed to read file: {e}") from e

    if suffix == ".txt":
        return _read_text_list(path, raw_content)

    try:
        if suffix == ".json":
            data = json.loads(raw_content)
        else:
            data = yaml.safe_load(raw_content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ListSourceError(f"Failed to parse {suffix} file {path}: {e}") from e

    return parse_list_data(data, str(path))


def register_list(registry: TermRegistry, list_file: TermListFile) -> None:
    """Add a parsed list file to `registry`.

    Raises:
        ListSourceError: If an entry is blank or the id is already loaded
        DuplicateKeyError: If two entries fold to the same key
    """
    try:
        registry.load(
            list_file.id,
            list_file.entries,
            version=list_file.version or None,
            description=list_file.description,
        )
    except ValueError as e:
        raise ListSourceError(str(e)) from e


def list_files_in(directory: Path | str) -> list[Path]:
    """Return the list files of `directory`, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        raise ListSourceError(f"Term list directory not found: {directory}")
    return sorted(
        p for p in directory.iterdir()
        if p.is_file()
        and p.suffix.lower() in SUPPORTED_EXTENSIONS
        and p.name.lower() not in RESERVED_FILES
    )


def load_directory(directory: Path | str, registry: TermRegistry | None = None) -> TermRegistry:
    """Load every list file in `directory` into a registry.

    Files are loaded in name order, which is also the precedence order of the
    aggregate DEFAULT list.
    """
    registry = registry if registry is not None else TermRegistry()
    files = list_files_in(directory)
    if not files:
        logger.warning(f"No term list files found in {directory}")
    for path in files:
        register_list(registry, load_list_file(path))
    return registry


def bundled_lists_dir() -> Path:
    """Directory holding the lists shipped with the package."""
    return Path(str(resources.files("tallman") / "data" / "lists"))


def load_bundled_lists(registry: TermRegistry | None = None) -> TermRegistry:
    """Load the AU, FDA, ISMP and NZ lists shipped with the package."""
    return load_directory(bundled_lists_dir(), registry)


_default_registry: TermRegistry | None = None
_default_lock = RLock()


def get_default_registry() -> TermRegistry:
    """Return the process-wide registry, building it on first use.

    Lists come from ``TALLMAN_LISTS_DIR`` when set, otherwise from the bundled
    lists. A failure here (bad file, duplicate key) is a startup error and is
    raised to the first caller.
    """
    global _default_registry
    if _default_registry is not None:
        return _default_registry

    with _default_lock:
        if _default_registry is None:
            config = load_config()
            if config.lists_dir is not None:
                logger.info(f"Loading term lists from {config.lists_dir}")
                registry = load_directory(config.lists_dir)
            else:
                registry = load_bundled_lists()
            _default_registry = registry
    return _default_registry


def reset_default_registry() -> None:
    """Drop the cached process-wide registry so the next access rebuilds it."""
    global _default_registry
    with _default_lock:
        _default_registry = None
