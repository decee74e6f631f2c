"""Unit tests for the console helpers (crudgen.utils).

Tests cover:
- format_duration
- Rich output helpers (print_summary_table, print_success, etc.)
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from crudgen.utils import (
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    def test_seconds_only(self):
        assert format_duration(3.7) == "3.7s"

    @pytest.mark.unit
    def test_minutes_and_seconds(self):
        assert format_duration(65.2) == "1m 5s"

    @pytest.mark.unit
    def test_hours_minutes_seconds(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    @pytest.mark.unit
    def test_zero(self):
        assert format_duration(0.0) == "0.0s"

    @pytest.mark.unit
    def test_negative(self):
        assert format_duration(-5.0) == "0.0s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_summary_table(self):
        # Should not raise
        print_summary_table({"Command": "dao", "Tables": "order_items"}, title="crudgen")

    @pytest.mark.unit
    def test_print_success(self):
        print_success("generate 'dao' codes successfully")

    @pytest.mark.unit
    def test_print_warning(self):
        print_warning("table 'users' requested twice")

    @pytest.mark.unit
    def test_print_error_escapes_markup(self):
        with patch("crudgen.utils.console") as mock_console:
            print_error("Unsupported SQL type '[geometry]'")
        printed = mock_console.print.call_args[0][0]
        assert "\\[geometry]" in printed
        assert printed.startswith("[bold red]")

    @pytest.mark.unit
    def test_create_progress(self):
        progress = create_progress()
        assert progress is not None
