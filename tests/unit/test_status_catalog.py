"""Unit tests for the status catalog and its YAML loader."""

from pathlib import Path

import pytest
import yaml

from envelope_guard.catalog.status_catalog import (
    BUNDLED_CATALOG_PATH,
    DEFAULT_CATALOG,
    Category,
    StatusCatalog,
    StatusInfo,
    describe,
    error_code_for,
    load_status_catalog,
)


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------


class TestCategory:
    @pytest.mark.parametrize(
        "category,expected",
        [
            (Category.INFORMATIONAL, True),
            (Category.SUCCESS, True),
            (Category.REDIRECTION, True),
            (Category.CLIENT_ERROR, False),
            (Category.SERVER_ERROR, False),
            (Category.UNKNOWN, None),
        ],
    )
    def test_expects_success(self, category, expected):
        assert category.expects_success is expected

    def test_enum_from_string(self):
        assert Category("client_error") is Category.CLIENT_ERROR


# ---------------------------------------------------------------------------
# StatusInfo model
# ---------------------------------------------------------------------------


class TestStatusInfo:
    def test_valid_entry(self):
        info = StatusInfo(code=404, category=Category.CLIENT_ERROR, meaning="Not Found", error_code="NOT_FOUND")
        assert info.code == 404

    def test_category_must_match_range(self):
        with pytest.raises(Exception):
            StatusInfo(code=404, category=Category.SUCCESS, meaning="Not Found", error_code="NOT_FOUND")

    def test_error_code_format(self):
        with pytest.raises(Exception):
            StatusInfo(code=404, category=Category.CLIENT_ERROR, meaning="Not Found", error_code="not-found")

    def test_code_range(self):
        with pytest.raises(Exception):
            StatusInfo(code=600, category=Category.UNKNOWN, meaning="x", error_code="X")

    def test_frozen(self):
        info = DEFAULT_CATALOG[200]
        with pytest.raises(Exception):
            info.meaning = "changed"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Bundled catalog
# ---------------------------------------------------------------------------


class TestBundledCatalog:
    def test_bundled_file_ships_with_package(self):
        assert BUNDLED_CATALOG_PATH.exists()

    @pytest.mark.parametrize(
        "code,category,error_code",
        [
            (200, Category.SUCCESS, "OK"),
            (201, Category.SUCCESS, "CREATED"),
            (202, Category.SUCCESS, "ACCEPTED"),
            (204, Category.SUCCESS, "NO_CONTENT"),
            (301, Category.REDIRECTION, "MOVED_PERMANENTLY"),
            (304, Category.REDIRECTION, "NOT_MODIFIED"),
            (400, Category.CLIENT_ERROR, "BAD_REQUEST"),
            (401, Category.CLIENT_ERROR, "UNAUTHORIZED"),
            (403, Category.CLIENT_ERROR, "FORBIDDEN"),
            (404, Category.CLIENT_ERROR, "NOT_FOUND"),
            (409, Category.CLIENT_ERROR, "CONFLICT"),
            (422, Category.CLIENT_ERROR, "VALIDATION_ERROR"),
            (429, Category.CLIENT_ERROR, "RATE_LIMIT_EXCEEDED"),
            (500, Category.SERVER_ERROR, "INTERNAL_SERVER_ERROR"),
            (502, Category.SERVER_ERROR, "BAD_GATEWAY"),
            (503, Category.SERVER_ERROR, "SERVICE_UNAVAILABLE"),
            (504, Category.SERVER_ERROR, "GATEWAY_TIMEOUT"),
        ],
    )
    def test_documented_codes(self, code, category, error_code):
        info = DEFAULT_CATALOG[code]
        assert info.category is category
        assert info.error_code == error_code
        assert info.meaning

    def test_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_CATALOG[418] = DEFAULT_CATALOG[400]  # type: ignore[index]

    def test_describe(self):
        assert describe(404).error_code == "NOT_FOUND"
        assert describe(418) is None

    def test_error_code_fallbacks(self):
        assert error_code_for(404) == "NOT_FOUND"
        assert error_code_for(418) == "CLIENT_ERROR"
        assert error_code_for(599) == "SERVER_ERROR"


# ---------------------------------------------------------------------------
# StatusCatalog
# ---------------------------------------------------------------------------


class TestStatusCatalog:
    def test_merged_returns_new_catalog(self):
        teapot = StatusInfo(code=418, category=Category.CLIENT_ERROR, meaning="I'm a teapot", error_code="IM_A_TEAPOT")
        merged = DEFAULT_CATALOG.merged({418: teapot})

        assert merged[418] == teapot
        assert 418 not in DEFAULT_CATALOG
        assert len(merged) == len(DEFAULT_CATALOG) + 1

    def test_merged_overrides(self):
        custom = StatusInfo(code=404, category=Category.CLIENT_ERROR, meaning="Nope", error_code="RESOURCE_MISSING")
        merged = DEFAULT_CATALOG.merged({404: custom})
        assert merged.error_code_for(404) == "RESOURCE_MISSING"
        assert DEFAULT_CATALOG.error_code_for(404) == "NOT_FOUND"

    def test_empty_catalog(self):
        catalog = StatusCatalog()
        assert len(catalog) == 0
        assert catalog.describe(200) is None


# ---------------------------------------------------------------------------
# load_status_catalog
# ---------------------------------------------------------------------------


class TestLoadStatusCatalog:
    def test_no_path_returns_bundled(self):
        assert load_status_catalog() is DEFAULT_CATALOG

    def test_loads_extra_codes(self, tmp_path: Path):
        yaml_file = tmp_path / "codes.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "codes": {
                        418: {"category": "client_error", "meaning": "I'm a teapot", "error_code": "IM_A_TEAPOT"},
                        404: {"category": "client_error", "meaning": "Missing", "error_code": "RESOURCE_MISSING"},
                    }
                }
            )
        )

        catalog = load_status_catalog(str(yaml_file))

        assert catalog[418].error_code == "IM_A_TEAPOT"
        assert catalog[404].error_code == "RESOURCE_MISSING"
        assert catalog[200].error_code == "OK"

    def test_file_not_found_returns_bundled(self):
        assert load_status_catalog("/nonexistent/path/codes.yaml") is DEFAULT_CATALOG

    def test_invalid_yaml_returns_bundled(self, tmp_path: Path):
        yaml_file = tmp_path / "broken.yaml"
        yaml_file.write_text(": : : not valid yaml [[[")

        assert load_status_catalog(str(yaml_file)) is DEFAULT_CATALOG

    def test_missing_codes_key_returns_bundled(self, tmp_path: Path):
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("some_other_key: value\n")

        assert load_status_catalog(str(yaml_file)) is DEFAULT_CATALOG

    def test_skips_invalid_entries(self, tmp_path: Path):
        yaml_file = tmp_path / "codes.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "codes": {
                        418: {"category": "client_error", "meaning": "I'm a teapot", "error_code": "IM_A_TEAPOT"},
                        299: {"category": "server_error", "meaning": "wrong range", "error_code": "WRONG"},
                        450: {"category": "client_error", "meaning": "bad code", "error_code": "lower"},
                        451: None,
                    }
                }
            )
        )

        catalog = load_status_catalog(str(yaml_file))

        assert 418 in catalog
        assert 299 not in catalog
        assert 450 not in catalog
        assert 451 not in catalog
