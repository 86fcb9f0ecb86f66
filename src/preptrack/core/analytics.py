"""Progress aggregation for the dashboard, interpretation charts and revision hub.

All functions are pure: they take a progress tree and a syllabus and
return plain dataclasses. Chemistry is tracked as three branches but
reported as one subject.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from preptrack.core.progress import ChapterProgress, Progress
from preptrack.core.syllabus import (
    CHEMISTRY,
    CHEMISTRY_BRANCHES,
    Syllabus,
    get_units,
    subject_title,
)

SUBJECT_ORDER = ["Physics", "Chemistry", "Biology", "Mathematics"]


@dataclass
class SubjectMetrics:
    """Aggregate figures for one subject (or merged chemistry)."""

    subject: str
    name: str
    completion: float
    total: int
    completed: int
    avg_confidence: float
    total_mcqs: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "subject": self.subject,
            "name": self.name,
            "completion": self.completion,
            "total": self.total,
            "completed": self.completed,
            "avg_confidence": self.avg_confidence,
            "total_mcqs": self.total_mcqs,
        }


@dataclass
class Interpretation:
    """Whole-syllabus summary behind the interpretation charts."""

    subjects: list[SubjectMetrics] = field(default_factory=list)
    overall_completion: float = 0.0
    average_confidence: float = 0.0
    total_mcqs: int = 0
    total_revisions: int = 0
    completed_chapters: int = 0
    total_chapters: int = 0

    @property
    def pie_data(self) -> list[dict[str, Any]]:
        """Completed vs pending chapter counts."""
        return [
            {"name": "Completed", "value": self.completed_chapters},
            {"name": "Pending", "value": self.total_chapters - self.completed_chapters},
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "subjects": [s.to_dict() for s in self.subjects],
            "overall_completion": self.overall_completion,
            "average_confidence": self.average_confidence,
            "total_mcqs": self.total_mcqs,
            "total_revisions": self.total_revisions,
            "completed_chapters": self.completed_chapters,
            "total_chapters": self.total_chapters,
            "pie_data": self.pie_data,
        }


@dataclass
class UnitMetrics:
    """Per-unit figures for the unit tracker."""

    unit: str
    chapters: list[str]
    completed: int
    completion: float
    avg_confidence: float
    total_mcqs: int
    latest_revision: int | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "unit": self.unit,
            "chapters": list(self.chapters),
            "completed": self.completed,
            "completion": self.completion,
            "avg_confidence": self.avg_confidence,
            "total_mcqs": self.total_mcqs,
            "latest_revision": self.latest_revision,
        }


@dataclass
class _Tally:
    total: int = 0
    completed: int = 0
    confidence: int = 0
    with_data: int = 0
    mcqs: int = 0
    revisions: int = 0

    def add(self, item: ChapterProgress | None) -> None:
        self.total += 1
        if item is None:
            return
        if item.completed:
            self.completed += 1
        self.confidence += item.confidence
        self.with_data += 1
        self.mcqs += item.questions
        self.revisions += len(item.revisions)

    def merge(self, other: _Tally) -> None:
        self.total += other.total
        self.completed += other.completed
        self.confidence += other.confidence
        self.with_data += other.with_data
        self.mcqs += other.mcqs
        self.revisions += other.revisions

    def metrics(self, subject: str, name: str) -> SubjectMetrics:
        return SubjectMetrics(
            subject=subject,
            name=name,
            completion=_percent(self.completed, self.total),
            total=self.total,
            completed=self.completed,
            avg_confidence=self.confidence / self.with_data if self.with_data else 0.0,
            total_mcqs=self.mcqs,
        )


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _tally(progress: Progress, syllabus: Syllabus, subject: str) -> _Tally:
    tally = _Tally()
    subject_progress = progress.get(subject, {})
    for chapter in syllabus.get(subject, []):
        tally.add(subject_progress.get(chapter))
    return tally


def subject_completion(progress: Progress, syllabus: Syllabus, subject: str) -> SubjectMetrics:
    """Metrics for one subject; 'chemistry' merges the three branches."""
    if subject == CHEMISTRY:
        tally = _Tally()
        for branch in CHEMISTRY_BRANCHES:
            tally.merge(_tally(progress, syllabus, branch))
        return tally.metrics(CHEMISTRY, "Chemistry")
    return _tally(progress, syllabus, subject).metrics(subject, subject_title(subject))


def interpretation(progress: Progress, syllabus: Syllabus) -> Interpretation:
    """Per-subject and overall metrics with chemistry merged.

    Subjects without chapters are skipped. The subject list is ordered
    Physics, Chemistry, Biology, Mathematics.
    """
    overall = _Tally()
    chemistry = _Tally()
    has_chemistry = False
    subjects: list[SubjectMetrics] = []

    for subject in syllabus:
        if subject == CHEMISTRY or not syllabus[subject]:
            continue
        tally = _tally(progress, syllabus, subject)
        if subject in CHEMISTRY_BRANCHES:
            has_chemistry = True
            chemistry.merge(tally)
            continue
        overall.merge(tally)
        subjects.append(tally.metrics(subject, subject_title(subject)))

    if has_chemistry:
        overall.merge(chemistry)
        subjects.append(chemistry.metrics(CHEMISTRY, "Chemistry"))

    subjects.sort(
        key=lambda m: SUBJECT_ORDER.index(m.name) if m.name in SUBJECT_ORDER else -1
    )

    return Interpretation(
        subjects=subjects,
        overall_completion=_percent(overall.completed, overall.total),
        average_confidence=overall.confidence / overall.with_data if overall.with_data else 0.0,
        total_mcqs=overall.mcqs,
        total_revisions=overall.revisions,
        completed_chapters=overall.completed,
        total_chapters=overall.total,
    )


def unit_metrics(progress: Progress, exam: str, subject: str) -> list[UnitMetrics]:
    """Per-unit completion, confidence, MCQs and latest revision."""
    units = get_units(exam, subject)
    if not units:
        return []

    subject_progress = progress.get(subject, {})
    result = []
    for unit, chapters in units.items():
        completed = 0
        confidence = 0
        mcqs = 0
        revisions: list[int] = []
        for chapter in chapters:
            item = subject_progress.get(chapter)
            if item is None:
                continue
            if item.completed:
                completed += 1
            confidence += item.confidence
            mcqs += item.questions
            revisions.extend(item.revisions)

        result.append(
            UnitMetrics(
                unit=unit,
                chapters=chapters,
                completed=completed,
                completion=_percent(completed, len(chapters)),
                avg_confidence=confidence / len(chapters) if chapters else 0.0,
                total_mcqs=mcqs,
                latest_revision=max(revisions) if revisions else None,
            )
        )
    return result


def _is_complete(progress: Progress, syllabus: Syllabus, subject: str) -> bool:
    chapters = syllabus.get(subject) or []
    subject_progress = progress.get(subject)
    if not chapters or subject_progress is None:
        return False
    return all(
        subject_progress.get(chapter) is not None and subject_progress[chapter].completed
        for chapter in chapters
    )


def completed_subjects(progress: Progress, syllabus: Syllabus) -> list[str]:
    """Subjects with every chapter completed.

    Chemistry branches are listed individually; 'chemistry' is added when
    all three branches are complete.
    """
    completed = [
        subject
        for subject in syllabus
        if subject != CHEMISTRY and _is_complete(progress, syllabus, subject)
    ]
    if all(_is_complete(progress, syllabus, branch) for branch in CHEMISTRY_BRANCHES):
        completed.append(CHEMISTRY)
    return completed
