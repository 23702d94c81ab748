"""
Tests for environment variable validation.

Each test passes an explicit mapping, or manipulates ``os.environ`` via
``monkeypatch`` after the ``clean_env`` fixture has removed harness variables.
"""

import pytest

from connector_hub_bench.env_validation import (
    ValidationResult,
    parse_bool,
    parse_int,
    parse_positive_float,
    validate_environment,
)


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


class TestParsers:
    @pytest.mark.parametrize("value", ["true", "1", "yes", " TRUE ", "Yes"])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "NO"])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    def test_unrecognised_bool(self):
        assert parse_bool("maybe") is None

    def test_parse_int(self):
        assert parse_int("10", 1) == 10
        assert parse_int(" 0 ", 0) == 0
        assert parse_int("0", 1) is None
        assert parse_int("1.5", 0) is None

    def test_parse_positive_float(self):
        assert parse_positive_float("2.5") == 2.5
        assert parse_positive_float("0") is None
        assert parse_positive_float("soon") is None


# ---------------------------------------------------------------------------
# validate_environment
# ---------------------------------------------------------------------------


class TestValidateEnvironment:
    def test_clean_environment(self):
        result = validate_environment()
        assert result.errors == []
        assert result.warnings == []
        assert result.ok

    def test_valid_values(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HUB_BENCH_ITERATIONS", "500")
        monkeypatch.setenv("HUB_BENCH_WARMUP_ITERATIONS", "0")
        monkeypatch.setenv("HUB_BENCH_BRIDGE_ENABLED", "false")
        monkeypatch.setenv("HUB_BENCH_BRIDGE_TIMEOUT_S", "30")
        monkeypatch.setenv("HUB_BENCH_HUB_ROOT", str(tmp_path))

        result = validate_environment()

        assert result.errors == []
        assert result.warnings == []

    def test_bad_boolean_warns(self):
        result = validate_environment({"HUB_BENCH_BRIDGE_ENABLED": "perhaps"})
        assert len(result.warnings) == 1
        assert "HUB_BENCH_BRIDGE_ENABLED" in result.warnings[0]
        assert result.ok

    def test_bad_integers_warn(self):
        result = validate_environment(
            {"HUB_BENCH_ITERATIONS": "0", "HUB_BENCH_WARMUP_ITERATIONS": "-2"}
        )
        assert len(result.warnings) == 2

    def test_bad_timeout_warns(self):
        result = validate_environment({"HUB_BENCH_BRIDGE_TIMEOUT_S": "never"})
        assert any("HUB_BENCH_BRIDGE_TIMEOUT_S" in w for w in result.warnings)

    def test_missing_hub_root_warns(self, tmp_path):
        result = validate_environment({"HUB_BENCH_HUB_ROOT": str(tmp_path / "absent")})
        assert any("not a directory" in w for w in result.warnings)
        assert result.ok

    def test_missing_config_file_is_error(self, tmp_path):
        result = validate_environment({"HUB_BENCH_CONFIG": str(tmp_path / "absent.yaml")})
        assert len(result.errors) == 1
        assert not result.ok

    def test_existing_config_file(self, tmp_path):
        path = tmp_path / "bench.yaml"
        path.write_text("iterations: 5\n")
        assert validate_environment({"HUB_BENCH_CONFIG": str(path)}).ok

    def test_never_raises(self):
        result = validate_environment(
            {
                "HUB_BENCH_ITERATIONS": "",
                "HUB_BENCH_BRIDGE_ENABLED": "",
                "HUB_BENCH_BRIDGE_TIMEOUT_S": "",
                "HUB_BENCH_CONFIG": "",
            }
        )
        assert isinstance(result, ValidationResult)


def test_validation_result_ok_property():
    assert ValidationResult().ok
    assert not ValidationResult(errors=["x"]).ok
