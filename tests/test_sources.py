"""
Tests for loading term lists from JSON, YAML and text files.
"""

import json
from pathlib import Path

import pytest
import yaml

from tallman.registry import DuplicateKeyError, TermRegistry
from tallman.sources import (
    ListSourceError,
    bundled_lists_dir,
    get_default_registry,
    list_files_in,
    load_bundled_lists,
    load_directory,
    load_list_file,
    register_list,
)


FDA_LIST = {
    "id": "FDA",
    "version": "20230115.1",
    "description": "FDA established names",
    "entries": ["predniSONE", "prednisoLONE", "vinBLAStine"],
}

AU_LIST = {
    "id": "au",
    "version": "20230601.1",
    "entries": ["vinBLASTine", "quiNINE"],
}


def write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def lists_dir(tmp_path: Path) -> Path:
    """Directory with a JSON list, a YAML list and files to be skipped."""
    write_json(tmp_path / "FDA.json", FDA_LIST)
    (tmp_path / "AU.yaml").write_text(yaml.dump(AU_LIST), encoding="utf-8")
    write_json(tmp_path / "manifest.json", [{"id": "FDA"}])
    write_json(tmp_path / "schema.json", {"type": "object"})
    (tmp_path / "README.md").write_text("not a list", encoding="utf-8")
    return tmp_path


class TestLoadListFile:
    """Test single file parsing."""

    def test_load_json(self, tmp_path: Path) -> None:
        list_file = load_list_file(write_json(tmp_path / "fda.json", FDA_LIST))
        assert list_file.id == "FDA"
        assert list_file.version == "20230115.1"
        assert list_file.description == "FDA established names"
        assert list_file.entries == ["predniSONE", "prednisoLONE", "vinBLAStine"]

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "au.yml"
        path.write_text(yaml.dump(AU_LIST), encoding="utf-8")
        list_file = load_list_file(path)
        assert list_file.id == "AU"
        assert list_file.description is None
        assert list_file.entries == ["vinBLASTine", "quiNINE"]

    def test_load_text(self, tmp_path: Path) -> None:
        path = tmp_path / "ismp.txt"
        path.write_text(
            "# ISMP brand names\npredniSONE\n\n  SOLU-MEDROL  \nMS Contin\n",
            encoding="utf-8",
        )
        list_file = load_list_file(path)
        assert list_file.id == "ISMP"
        assert list_file.version == ""
        assert list_file.entries == ["predniSONE", "SOLU-MEDROL", "MS Contin"]

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ListSourceError, match="not found"):
            load_list_file(tmp_path / "missing.json")

    def test_unsupported_format(self, tmp_path: Path) -> None:
        path = tmp_path / "list.csv"
        path.write_text("predniSONE\n", encoding="utf-8")
        with pytest.raises(ListSourceError, match="Unsupported file format"):
            load_list_file(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ListSourceError, match="Failed to parse"):
            load_list_file(path)

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        with pytest.raises(ListSourceError, match="object at the top level"):
            load_list_file(write_json(tmp_path / "list.json", ["predniSONE"]))

    @pytest.mark.parametrize("data", [
        {"version": "20230115.1", "entries": ["predniSONE"]},
        {"id": "FDA", "entries": []},
        {"id": "FDA", "entries": "predniSONE"},
        {"id": "9FDA", "entries": ["predniSONE"]},
        {"id": "FDA LIST", "entries": ["predniSONE"]},
    ])
    def test_schema_violations(self, tmp_path: Path, data: dict) -> None:
        with pytest.raises(ListSourceError, match="invalid term list"):
            load_list_file(write_json(tmp_path / "list.json", data))

    def test_empty_text_file(self, tmp_path: Path) -> None:
        """A text file with no entries fails the non-empty entries rule."""
        path = tmp_path / "nz.txt"
        path.write_text("# nothing yet\n", encoding="utf-8")
        with pytest.raises(ListSourceError):
            load_list_file(path)


class TestLoadDirectory:
    """Test directory loading into a registry."""

    def test_list_files_in(self, lists_dir: Path) -> None:
        assert [p.name for p in list_files_in(lists_dir)] == ["AU.yaml", "FDA.json"]

    def test_load_directory(self, lists_dir: Path) -> None:
        registry = load_directory(lists_dir)
        assert registry.list_ids() == ["AU", "DEFAULT", "FDA"]
        assert registry.get("FDA").version == "20230115.1"
        assert registry.get("FDA").lookup("vinblastine") == "vinBLAStine"

    def test_name_order_is_aggregate_precedence(self, lists_dir: Path) -> None:
        """AU.yaml sorts before FDA.json, so AU's casing wins in DEFAULT."""
        registry = load_directory(lists_dir)
        assert registry.get().lookup("vinblastine") == "vinBLASTine"

    def test_into_existing_registry(self, lists_dir: Path) -> None:
        registry = TermRegistry()
        registry.load("NZ", ["cefUROXime"])
        result = load_directory(lists_dir, registry)
        assert result is registry
        assert registry.list_ids() == ["AU", "DEFAULT", "FDA", "NZ"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ListSourceError, match="directory not found"):
            load_directory(tmp_path / "nope")

    def test_empty_directory(self, tmp_path: Path) -> None:
        registry = load_directory(tmp_path)
        assert len(registry) == 0

    def test_duplicate_key_is_fatal(self, tmp_path: Path) -> None:
        write_json(tmp_path / "FDA.json", {"id": "FDA", "entries": ["predniSONE", "PREDNISONE"]})
        with pytest.raises(DuplicateKeyError):
            load_directory(tmp_path)

    def test_blank_entry(self, tmp_path: Path) -> None:
        write_json(tmp_path / "FDA.json", {"id": "FDA", "entries": ["predniSONE", "  "]})
        with pytest.raises(ListSourceError, match="Empty entry"):
            load_directory(tmp_path)

    def test_same_id_in_two_files(self, tmp_path: Path) -> None:
        write_json(tmp_path / "a.json", {"id": "FDA", "entries": ["predniSONE"]})
        write_json(tmp_path / "b.json", {"id": "fda", "entries": ["prednisoLONE"]})
        with pytest.raises(ListSourceError, match="already loaded"):
            load_directory(tmp_path)

    def test_register_list(self, tmp_path: Path) -> None:
        registry = TermRegistry()
        register_list(registry, load_list_file(write_json(tmp_path / "fda.json", FDA_LIST)))
        assert registry.get("FDA").description == "FDA established names"


class TestBundledLists:
    """Test the lists shipped with the package."""

    def test_bundled_files(self) -> None:
        names = sorted(p.name for p in bundled_lists_dir().glob("*.json"))
        assert names == ["AU.json", "FDA.json", "ISMP.json", "NZ.json"]

    def test_load_bundled_lists(self) -> None:
        registry = load_bundled_lists()
        assert registry.list_ids() == ["AU", "DEFAULT", "FDA", "ISMP", "NZ"]
        for list_id in ["AU", "FDA", "ISMP", "NZ"]:
            assert len(registry.get(list_id)) > 0
        assert registry.get("ISMP").lookup("solu-medrol") == "SOLU-MEDROL"


class TestDefaultRegistry:
    """Test the process-wide registry."""

    def test_cached(self) -> None:
        assert get_default_registry() is get_default_registry()

    def test_bundled_by_default(self) -> None:
        assert get_default_registry().list_ids() == ["AU", "DEFAULT", "FDA", "ISMP", "NZ"]

    def test_lists_dir_from_environment(self, lists_dir: Path, monkeypatch) -> None:
        monkeypatch.setenv("TALLMAN_LISTS_DIR", str(lists_dir))
        registry = get_default_registry()
        assert registry.list_ids() == ["AU", "DEFAULT", "FDA"]
