"""Tests for the prompt registry (F5)."""

import pytest

from preptrack.prompts.registry import clear_cache, get_prompt, list_prompts


class TestGetPrompt:
    """Tests for get_prompt."""

    def test_substitutes_variables(self):
        prompt = get_prompt("revision/timetable", exam="JEE", subject="Mathematics")
        assert "JEE" in prompt
        assert "Mathematics" in prompt
        assert "{exam}" not in prompt
        assert "timetableHtml" in prompt

    def test_unknown_placeholders_kept(self):
        prompt = get_prompt("revision/timetable", exam="NEET")
        assert "{subject}" in prompt

    def test_missing_raises(self):
        with pytest.raises(FileNotFoundError, match="Prompt not found"):
            get_prompt("revision/does_not_exist")

    def test_cache_clear(self):
        first = get_prompt("revision/timetable")
        clear_cache()
        assert get_prompt("revision/timetable", use_cache=False) == first


class TestListPrompts:
    """Tests for list_prompts."""

    def test_lists_timetable(self):
        assert "revision/timetable" in list_prompts()
