"""Tests for tflow.labels module."""

from __future__ import annotations

import pytest

from tflow.labels import button_name, format_label, stem_of


class TestFormatLabel:
    """Tests for format_label function."""

    def test_separators_start_new_words(self) -> None:
        """Test underscores become spaces and capitalize the next word."""
        assert format_label("my_workflow_file") == "My Workflow File"

    def test_acronym_followed_by_hyphen(self) -> None:
        """Test a leading acronym run is preserved."""
        assert format_label("SNP-calling") == "SNP Calling"

    def test_camel_case_boundaries(self) -> None:
        """Test a space is inserted before each camelCase boundary."""
        assert format_label("simpleCamelCase") == "Simple Camel Case"

    @pytest.mark.parametrize("stem", ["workflow", "kinship", "a", "x1y2z3"])
    def test_plain_stem_only_capitalizes_first(self, stem: str) -> None:
        """Test stems without separators or uppercase only get a capital first letter."""
        assert format_label(stem) == stem[0].upper() + stem[1:]

    def test_empty_stem(self) -> None:
        """Test an empty stem gives an empty label."""
        assert format_label("") == ""

    def test_space_separator(self) -> None:
        """Test spaces are kept as word separators."""
        assert format_label("run my flow") == "Run My Flow"

    def test_acronym_run_swallows_following_capital(self) -> None:
        """Test no space is inserted inside a run of capitals."""
        assert format_label("GLMAssociation") == "GLMAssociation"

    def test_capital_after_separator(self) -> None:
        """Test a capital after a separator still gets its camelCase space."""
        assert format_label("a_Bc") == "A  Bc"

    def test_consecutive_separators(self) -> None:
        """Test each separator emits its own space."""
        assert format_label("a__b") == "A  B"

    def test_trailing_separator(self) -> None:
        """Test a trailing separator leaves a trailing space."""
        assert format_label("flow_") == "Flow "

    def test_digits_after_separator(self) -> None:
        """Test digits are unaffected by capitalization."""
        assert format_label("step_2") == "Step 2"

    def test_first_character_separator(self) -> None:
        """Test the first character is emitted even when it is a separator."""
        assert format_label("_flow") == "_flow"


class TestStemOf:
    """Tests for stem_of function."""

    def test_strips_directory_and_suffix(self) -> None:
        """Test resource paths are reduced to their stem."""
        assert stem_of("/tflow/workflows/SNP-calling.xml") == "SNP-calling"

    def test_keeps_other_suffixes(self) -> None:
        """Test only the given suffix is stripped."""
        assert stem_of("/tflow/workflows/notes.txt") == "notes.txt"

    def test_custom_suffix(self) -> None:
        """Test a custom suffix is stripped."""
        assert stem_of("flows/kinship.cfg", ".cfg") == "kinship"

    def test_windows_separators(self) -> None:
        """Test backslash paths are handled."""
        assert stem_of("C:\\flows\\my_flow.xml") == "my_flow"


class TestButtonName:
    """Tests for button_name function."""

    def test_resource_path(self) -> None:
        """Test a full resource path becomes a display label."""
        assert button_name("/tflow/workflows/GLM_association.xml") == "GLM Association"

    def test_camel_case_resource(self) -> None:
        """Test camelCase filenames are split into words."""
        assert button_name("/tflow/workflows/filterGenotypes.xml") == "Filter Genotypes"
