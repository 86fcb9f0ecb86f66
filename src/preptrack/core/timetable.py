"""Revision timetable generation.

Asks the configured LLM for a seven-day revision plan for one subject and
returns it as an HTML fragment. Nothing is persisted.
"""

from __future__ import annotations

import structlog

from preptrack.core.errors import PrepTrackError
from preptrack.llm.client import LLMClient, LLMError
from preptrack.prompts.registry import get_prompt
from preptrack.utils.validators import require_exam, require_text

logger = structlog.get_logger(__name__)

TIMETABLE_PROMPT = "revision/timetable"
RESPONSE_KEY = "timetableHtml"
FAILURE_MESSAGE = "Failed to generate a timetable. Please try again."


class TimetableGenerationError(PrepTrackError):
    """The LLM call failed or returned no usable timetable."""

    code = "timetable_failed"


def generate_revision_timetable(
    subject: str,
    exam: str,
    client: LLMClient | None = None,
) -> str:
    """Generate a 7-day revision timetable.

    Args:
        subject: Subject display name (e.g. "Physics")
        exam: "NEET" or "JEE"
        client: LLM client (built from app config if omitted)

    Returns:
        Timetable as an HTML string

    Raises:
        ValidationError: Blank subject or unknown exam
        TimetableGenerationError: LLM failure or missing timetableHtml
    """
    subject = require_text(subject, "Subject")
    require_exam(exam)

    system_prompt = get_prompt(TIMETABLE_PROMPT, exam=exam, subject=subject)
    try:
        client = client or LLMClient()
        data = client.simple_json(
            system_prompt=system_prompt,
            user_message=f"Generate the {subject} revision timetable for {exam}.",
        )
    except LLMError as e:
        logger.warning("timetable.failed", subject=subject, exam=exam, error=str(e))
        raise TimetableGenerationError(FAILURE_MESSAGE) from e

    html = data.get(RESPONSE_KEY)
    if not isinstance(html, str) or not html.strip():
        logger.warning("timetable.missing_html", subject=subject, exam=exam, keys=list(data))
        raise TimetableGenerationError(FAILURE_MESSAGE)

    logger.info("timetable.generated", subject=subject, exam=exam, length=len(html))
    return html
