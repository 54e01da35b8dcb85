"""
Data models for term lists and list files.
"""

from pydantic import BaseModel, Field, field_validator

from .unicode import make_key

DEFAULT_LIST_ID = "DEFAULT"


class TermEntry(BaseModel):
    """A single Tall Man term.

    Attributes:
        key: Case-folded lookup key (e.g., "solu-medrol")
        display: Tall Man rendering written to the output (e.g., "SOLU-MEDROL")
    """
    model_config = {"frozen": True}

    key: str = Field(..., min_length=1, description="Case-folded lookup key")
    display: str = Field(..., min_length=1, description="Tall Man display form")

    @classmethod
    def from_display(cls, display: str) -> "TermEntry":
        """Create an entry whose key is derived from its display form."""
        return cls(key=make_key(display), display=display)

    @property
    def word_count(self) -> int:
        """Number of space- or hyphen-separated words in the key."""
        return len(self.key.replace("-", " ").split(" "))


class TermListFile(BaseModel):
    """On-disk representation of a term list (JSON or YAML).

    Example:
        {
          "id": "FDA",
          "version": "20240115.1",
          "description": "FDA established names with recommended Tall Man letters",
          "entries": ["acetaZOLAMIDE", "acetoHEXAMIDE", "buPROPion"]
        }
    """
    id: str = Field(..., pattern=r"^[A-Za-z][A-Za-z0-9_-]*$", description="List identifier")
    version: str = Field(default="", description="List version, YYYYMMDD.N")
    description: str | None = Field(default=None, description="Human readable description")
    entries: list[str] = Field(..., min_length=1, description="Tall Man display forms")

    @field_validator("id")
    @classmethod
    def _upper_id(cls, value: str) -> str:
        return value.upper()


class ManifestEntry(BaseModel):
    """Summary of one validated list, as written to manifest.json."""
    id: str
    version: str
    entries: int
    description: str | None = None
