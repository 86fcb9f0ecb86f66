"""Tests for revision timetable generation (F5)."""

from unittest.mock import MagicMock

import pytest

from preptrack.core.errors import ValidationError
from preptrack.core.timetable import (
    FAILURE_MESSAGE,
    TimetableGenerationError,
    generate_revision_timetable,
)
from preptrack.llm.client import LLMResponseError


@pytest.fixture
def mock_llm_client():
    """LLM client returning a small timetable."""
    client = MagicMock()
    client.simple_json.return_value = {"timetableHtml": "<table><tr><td>Day 1</td></tr></table>"}
    return client


class TestGenerateRevisionTimetable:
    """Tests for generate_revision_timetable."""

    def test_returns_html(self, mock_llm_client):
        html = generate_revision_timetable("Physics", "NEET", client=mock_llm_client)
        assert html.startswith("<table>")

        kwargs = mock_llm_client.simple_json.call_args.kwargs
        assert "Physics" in kwargs["system_prompt"]
        assert "NEET" in kwargs["system_prompt"]
        assert kwargs["user_message"] == "Generate the Physics revision timetable for NEET."

    def test_llm_failure(self, mock_llm_client):
        mock_llm_client.simple_json.side_effect = LLMResponseError("bad")
        with pytest.raises(TimetableGenerationError, match=FAILURE_MESSAGE):
            generate_revision_timetable("Physics", "NEET", client=mock_llm_client)

    def test_missing_key(self, mock_llm_client):
        mock_llm_client.simple_json.return_value = {"html": "<p>wrong key</p>"}
        with pytest.raises(TimetableGenerationError):
            generate_revision_timetable("Physics", "NEET", client=mock_llm_client)

    def test_blank_html(self, mock_llm_client):
        mock_llm_client.simple_json.return_value = {"timetableHtml": "   "}
        with pytest.raises(TimetableGenerationError):
            generate_revision_timetable("Physics", "NEET", client=mock_llm_client)

    def test_validates_inputs(self, mock_llm_client):
        with pytest.raises(ValidationError):
            generate_revision_timetable(" ", "NEET", client=mock_llm_client)
        with pytest.raises(ValidationError):
            generate_revision_timetable("Physics", "GATE", client=mock_llm_client)
        mock_llm_client.simple_json.assert_not_called()
