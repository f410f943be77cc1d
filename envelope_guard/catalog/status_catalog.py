"""HTTP status categories and the immutable status catalog.

The bundled catalog is parsed from ``status_codes.yaml`` once, at import,
into typed Pydantic ``StatusInfo`` entries. Callers may load an extended
catalog from their own YAML file with the same layout::

    codes:
      418:
        category: client_error
        meaning: I'm a teapot
        error_code: IM_A_TEAPOT
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

BUNDLED_CATALOG_PATH = Path(__file__).with_name("status_codes.yaml")


class Category(str, Enum):
    """Coarse classification of an HTTP status code."""

    INFORMATIONAL = "informational"
    SUCCESS = "success"
    REDIRECTION = "redirection"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"

    @property
    def expects_success(self) -> bool | None:
        """Value of ``success`` an envelope in this category must carry.

        ``None`` for ``UNKNOWN``: no expectation can be derived.
        """
        if self is Category.UNKNOWN:
            return None
        return self in (Category.INFORMATIONAL, Category.SUCCESS, Category.REDIRECTION)


_RANGES: tuple[tuple[int, Category], ...] = (
    (100, Category.INFORMATIONAL),
    (200, Category.SUCCESS),
    (300, Category.REDIRECTION),
    (400, Category.CLIENT_ERROR),
    (500, Category.SERVER_ERROR),
)


def classify(status: object) -> Category:
    """Classify ``status`` by its hundreds range.

    Anything that is not an integer in 100-599 (booleans included) is
    ``Category.UNKNOWN``.
    """
    if isinstance(status, bool) or not isinstance(status, int):
        return Category.UNKNOWN
    for start, category in _RANGES:
        if start <= status < start + 100:
            return category
    return Category.UNKNOWN


class StatusInfo(BaseModel):
    """Catalog entry for a single status code."""

    model_config = ConfigDict(frozen=True)

    code: int = Field(ge=100, le=599)
    category: Category
    meaning: str = Field(min_length=1)
    error_code: str = Field(pattern=r"^[A-Z0-9_]+$")

    @model_validator(mode="after")
    def _category_matches_range(self) -> StatusInfo:
        if classify(self.code) is not self.category:
            raise ValueError(
                f"category {self.category.value!r} does not match status {self.code}"
            )
        return self


class StatusCatalog(Mapping[int, StatusInfo]):
    """Read-only mapping of status code to ``StatusInfo``."""

    def __init__(self, entries: Mapping[int, StatusInfo] | None = None) -> None:
        self._entries: Mapping[int, StatusInfo] = MappingProxyType(dict(entries or {}))

    def __getitem__(self, code: int) -> StatusInfo:
        return self._entries[code]

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"StatusCatalog({len(self)} codes)"

    def merged(self, other: Mapping[int, StatusInfo]) -> StatusCatalog:
        """Return a new catalog where entries from ``other`` win."""
        return StatusCatalog({**self._entries, **other})

    def describe(self, status: int) -> StatusInfo | None:
        return self._entries.get(status)

    def error_code_for(self, status: int) -> str:
        """Uppercase-snake error code for ``status``.

        Falls back to ``CLIENT_ERROR`` / ``SERVER_ERROR`` for codes the
        catalog does not list.
        """
        info = self._entries.get(status)
        if info is not None:
            return info.error_code
        if classify(status) is Category.SERVER_ERROR:
            return "SERVER_ERROR"
        return "CLIENT_ERROR"


def _parse_entries(raw: object, source: str) -> dict[int, StatusInfo] | None:
    """Turn parsed YAML into ``StatusInfo`` entries, skipping invalid ones."""
    if not isinstance(raw, dict) or not isinstance(raw.get("codes"), dict):
        logger.warning("Status catalog YAML at %s missing 'codes' mapping", source)
        return None

    entries: dict[int, StatusInfo] = {}
    for code, config in raw["codes"].items():
        try:
            info = StatusInfo.model_validate({**(config or {}), "code": code})
        except Exception as exc:
            logger.error("Invalid status catalog entry %r in %s: %s - skipping", code, source, exc)
            continue
        entries[info.code] = info
    return entries


def _read_yaml(path: Path) -> object:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _load_bundled() -> StatusCatalog:
    entries = _parse_entries(_read_yaml(BUNDLED_CATALOG_PATH), str(BUNDLED_CATALOG_PATH))
    return StatusCatalog(entries or {})


DEFAULT_CATALOG = _load_bundled()


def load_status_catalog(yaml_path: str | None = None) -> StatusCatalog:
    """Load a status catalog, layering ``yaml_path`` over the bundled one.

    Args:
        yaml_path: Optional path to a caller-supplied YAML catalog.

    Returns:
        The bundled catalog when no path is given, or when the file is
        missing or unparsable; otherwise the bundled catalog merged with the
        valid entries from the file.
    """
    if yaml_path is None:
        return DEFAULT_CATALOG

    path = Path(yaml_path)
    if not path.exists():
        logger.warning("Status catalog file not found at %s - using bundled catalog", yaml_path)
        return DEFAULT_CATALOG

    try:
        raw = _read_yaml(path)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse status catalog YAML at %s: %s", yaml_path, exc)
        return DEFAULT_CATALOG

    entries = _parse_entries(raw, yaml_path)
    if not entries:
        return DEFAULT_CATALOG
    return DEFAULT_CATALOG.merged(entries)


def describe(status: int) -> StatusInfo | None:
    """Look ``status`` up in the bundled catalog."""
    return DEFAULT_CATALOG.describe(status)


def error_code_for(status: int) -> str:
    return DEFAULT_CATALOG.error_code_for(status)
