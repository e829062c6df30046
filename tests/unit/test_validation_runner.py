"""Tests for the validation runner (validate_text, CatalogValidator, check)."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from catalint.errors import InvalidSettingError
from catalint.validation import (
    DEFAULT_RULES,
    CatalogValidator,
    Finding,
    RuleContext,
    Severity,
    ValidationRule,
    check,
    validate_text,
)

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestValidateTextScenarios:
    """End-to-end behavior of validate_text() on small catalogs."""

    @pytest.mark.unit
    def test_referenced_version_is_valid(self) -> None:
        result = validate_text(
            '[versions]\nagp="8.11.1"\n[libraries]\nlib={module="com.example:lib",version.ref="agp"}'
        )

        assert result.is_valid
        assert result.errors == ()

    @pytest.mark.unit
    def test_missing_versions_section(self) -> None:
        result = validate_text('[libraries]\nlib={module="x:y",version="1.0.0"}')

        assert not result.is_valid
        assert any("versions section is required" in e for e in result.errors)

    @pytest.mark.unit
    def test_agp_kotlin_incompatibility(self) -> None:
        result = validate_text(
            '[versions]\nagp="8.11.1"\nkotlin="1.8.0"\n[libraries]\nlib={module="x:y",version.ref="agp"}'
        )

        assert not result.is_valid
        assert "Version incompatibility: AGP 8.11.1 requires Kotlin 1.9.0+" in result.errors

    @pytest.mark.unit
    def test_bundle_with_undeclared_library(self) -> None:
        result = validate_text(
            '[versions]\nv="1.0"\n[libraries]\nlib={module="x:y",version.ref="v"}\n[bundles]\nb=["missingLib"]'
        )

        assert not result.is_valid
        assert "Invalid bundle reference: missingLib in bundle b" in result.errors

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
    def test_empty_input(self, text: str) -> None:
        result = validate_text(text)

        assert not result.is_valid
        assert result.errors == ("Empty or invalid TOML file",)
        assert result.warnings == ()

    @pytest.mark.unit
    def test_vulnerable_version_is_only_a_warning(self) -> None:
        result = validate_text(
            '[versions]\njunit="4.12"\n[libraries]\njunit-lib={module="junit:junit",version.ref="junit"}'
        )

        assert result.is_valid
        assert "Potentially vulnerable version: junit 4.12" in result.warnings

    @pytest.mark.unit
    def test_complete_catalog_is_clean(self, complete_catalog: str) -> None:
        result = validate_text(complete_catalog)

        assert result.is_valid
        assert result.errors == ()
        assert result.warnings == ()

    @pytest.mark.unit
    def test_minimal_catalog_is_clean(self, minimal_catalog: str) -> None:
        result = validate_text(minimal_catalog)
        assert (result.errors, result.warnings) == ((), ())

    @pytest.mark.unit
    def test_messages_follow_rule_order(self) -> None:
        text = "\n".join(
            [
                "[versions]",
                'bad = "not.a.version"',
                "[libraries]",
                'lib = { module = "nocolon", version.ref = "bad" }',
                "[plugins]",
                'p = { id = "plain" }',
                "[bundles]",
                'b = ["ghost"]',
            ]
        )
        result = validate_text(text)

        assert result.errors == (
            "Invalid version format: not.a.version for key bad",
            "Invalid module format: nocolon",
            "Invalid plugin ID format: plain",
            "Invalid bundle reference: ghost in bundle b",
        )
        assert result.warnings == ("Missing critical dependency: No testing dependencies found",)
        assert [f.rule_name for f in result.findings][-1] == "bundle_references"

    @pytest.mark.unit
    def test_unicode_keys_resolve(self) -> None:
        result = validate_text('[versions]\nvé="1.0"\n[libraries]\nlibé={module="x:y",version.ref="vé"}')

        assert result.is_valid
        assert not any(w.startswith("Unreferenced") for w in result.warnings)


class TestValidateTextSyntaxErrors:
    """Structural failures short-circuit to a single syntax error."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "text",
        [
            "invalid toml content [[[",
            '[versions\nagp = "1.0"\n',
            '[versions]\nagp = "1.0"\n[libraries]\nlib = { module = "x:y"\n',
            '[versions]\nagp = "1.0"\n[libraries]\nlib = { module = "x:y" version = "1.0" }\n',
            '[versions]\nagp "1.0"\n[libraries]\n',
        ],
    )
    def test_malformed_documents(self, text: str) -> None:
        result = validate_text(text)

        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Syntax error: ")
        assert result.warnings == ()
        assert result.findings[0].rule_name == "syntax"

    @pytest.mark.unit
    def test_syntax_error_carries_line(self) -> None:
        result = validate_text('[versions]\nagp = "1.0"\nbroken\n')
        assert result.errors == ("Syntax error: Expected '=' after key 'broken' (line 3)",)

    @pytest.mark.unit
    def test_duplicate_section(self) -> None:
        result = validate_text('[versions]\n[libraries]\n[versions]\n')
        assert result.errors == ("Syntax error: Duplicate section: [versions] (line 3)",)

    @pytest.mark.unit
    def test_surrogate_escape(self) -> None:
        result = validate_text('[versions]\nv = "\\uD800"\n[libraries]\n')
        assert result.errors == ("Syntax error: Invalid unicode escape: \\uD800 (line 2)",)

    @pytest.mark.unit
    def test_rule_crash_is_folded_into_result(self, minimal_catalog: str) -> None:
        class Exploding(ValidationRule):
            name = "exploding"
            severity = Severity.ERROR
            description = "Test"

            def check(self, context: RuleContext) -> list[Finding]:
                raise RuntimeError("boom")

        result = validate_text(minimal_catalog, rules=[Exploding()])
        assert result.errors == ("Syntax error: boom",)


class TestValidateTextOptions:
    """Tests for rules, key_scope and clock options."""

    @pytest.mark.unit
    def test_custom_rules(self) -> None:
        result = validate_text("[libraries]\n", rules=[DEFAULT_RULES[0]])
        assert result.errors == ("The versions section is required",)

    @pytest.mark.unit
    def test_clock(self, fixed_clock: Callable[[], datetime], minimal_catalog: str) -> None:
        assert validate_text(minimal_catalog, clock=fixed_clock).timestamp == FIXED_TIME
        assert validate_text("", clock=fixed_clock).timestamp == FIXED_TIME

    @pytest.mark.unit
    def test_unknown_key_scope(self, minimal_catalog: str) -> None:
        with pytest.raises(InvalidSettingError):
            validate_text(minimal_catalog, key_scope="global")

    @pytest.mark.unit
    def test_key_scope_changes_what_is_accepted(self, complete_catalog: str) -> None:
        assert validate_text(complete_catalog).is_valid

        result = validate_text(complete_catalog, key_scope="document")
        assert not result.is_valid
        assert "Invalid version format: org.junit.jupiter:junit-jupiter for key module" in result.errors
        assert "Duplicate key: module" in result.errors


class TestCatalogValidator:
    """Tests for file-based validation."""

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nope.toml"
        result = CatalogValidator(path).validate()

        assert result.errors == (f"TOML file does not exist: {path}",)
        assert result.warnings == ()

    @pytest.mark.unit
    def test_directory_is_unreadable(self, tmp_path: Path) -> None:
        result = CatalogValidator(tmp_path).validate()

        assert not result.is_valid
        assert result.errors[0].startswith(f"Cannot read TOML file: {tmp_path}")

    @pytest.mark.unit
    def test_empty_file(self, write_catalog: Callable[[str], Path]) -> None:
        result = CatalogValidator(write_catalog("")).validate()
        assert result.errors == ("Empty or invalid TOML file",)

    @pytest.mark.unit
    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "libs.versions.toml"
        path.write_bytes(b'[versions]\nagp = "\xff"\n')

        result = CatalogValidator(path).validate()
        assert result.errors == ("Syntax error: invalid UTF-8 encoding at byte 18",)

    @pytest.mark.unit
    def test_byte_order_mark(self, tmp_path: Path, minimal_catalog: str) -> None:
        path = tmp_path / "libs.versions.toml"
        path.write_bytes(b"\xef\xbb\xbf" + minimal_catalog.encode("utf-8"))

        assert CatalogValidator(path).validate().is_valid

    @pytest.mark.unit
    def test_real_catalog(self, real_catalog: Path) -> None:
        result = CatalogValidator(real_catalog).validate()

        assert result.errors == ()
        assert result.warnings == (
            "Unreferenced version: compileSdk",
            "Unreferenced version: minSdk",
        )

    @pytest.mark.unit
    def test_repeated_validation_rereads_file(
        self, write_catalog: Callable[[str], Path], minimal_catalog: str
    ) -> None:
        path = write_catalog(minimal_catalog)
        validator = CatalogValidator(path)
        first = validator.validate()

        path.write_text("[libraries]\n", encoding="utf-8")
        second = validator.validate()

        assert first.is_valid
        assert not second.is_valid

    @pytest.mark.unit
    def test_repeated_validation_is_stable(
        self,
        write_catalog: Callable[[str], Path],
        fixed_clock: Callable[[], datetime],
        complete_catalog: str,
    ) -> None:
        path = write_catalog(complete_catalog.replace("5.8.2", "bad"))
        validator = CatalogValidator(path, clock=fixed_clock)
        assert validator.validate() == validator.validate()

    @pytest.mark.unit
    def test_concurrent_validation(
        self,
        write_catalog: Callable[[str], Path],
        fixed_clock: Callable[[], datetime],
        complete_catalog: str,
    ) -> None:
        validator = CatalogValidator(write_catalog(complete_catalog), clock=fixed_clock)
        expected = validator.validate()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: validator.validate(), range(32)))

        assert all(result == expected for result in results)

    @pytest.mark.unit
    def test_invalid_key_scope(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidSettingError):
            CatalogValidator(tmp_path / "x.toml", key_scope="everything")

    @pytest.mark.unit
    def test_check_convenience(self, write_catalog: Callable[[str], Path]) -> None:
        path = write_catalog('[versions]\nagp = "8.0.0"\nagp = "8.1.0"\n[libraries]\n')
        result = check(path)

        assert "Duplicate key: agp" in result.errors


class TestValidateTextProperties:
    """Property tests: validate_text() never raises and stays consistent."""

    @pytest.mark.unit
    @settings(max_examples=200)
    @given(text=st.text(max_size=200))
    def test_never_raises_on_arbitrary_text(self, text: str) -> None:
        result = validate_text(text)
        assert result.is_valid == (not result.errors)

    @pytest.mark.unit
    @settings(max_examples=100)
    @given(
        lines=st.lists(
            st.sampled_from(
                [
                    "[versions]",
                    "[libraries]",
                    "[plugins]",
                    "[bundles]",
                    'agp = "8.11.1"',
                    'kotlin = "1.8.0"',
                    'junit = "4.12"',
                    'lib = { module = "x:y", version.ref = "agp" }',
                    'p = { id = "a.b", version.ref = "kotlin" }',
                    'b = ["lib", "ghost"]',
                    "# comment",
                    "",
                ]
            ),
            max_size=15,
        )
    )
    def test_never_raises_on_catalog_fragments(self, lines: list[str]) -> None:
        result = validate_text("\n".join(lines))

        assert result.is_valid == (not result.errors)
        assert all(isinstance(message, str) and message for message in result.errors)
