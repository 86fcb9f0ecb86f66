"""Syllabus catalogue for NEET and JEE.

The default unit trees below seed the editable copy kept in the
`syllabuses` table (one row per exam and subject). Admins edit that copy;
progress, goals and analytics always read the stored version.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from preptrack.db.database import get_db
from preptrack.utils import clock
from preptrack.utils.validators import require_exam

logger = structlog.get_logger(__name__)

# =============================================================================
# DEFAULT SYLLABUS
# =============================================================================

NEET_UNITS: dict[str, dict[str, list[str]]] = {
    "physics": {
        "Mechanics": [
            "1. Units and Measurements",
            "2. Motion in a Straight Line",
            "3. Motion in a Plane",
            "4. Laws of Motion",
            "5. Work, Energy and Power",
            "6. System of Particles and Rotational Motion",
            "7. Gravitation",
        ],
        "Properties of Matter": [
            "8. Mechanical Properties of Solids",
            "9. Mechanical Properties of Fluids",
            "10. Thermal Properties of Matter",
        ],
        "Thermodynamics & Kinetic Theory": ["11. Thermodynamics", "12. Kinetic Theory"],
        "Oscillations & Waves": ["13. Oscillations", "14. Waves"],
        "Electrostatics": [
            "15. Electric Charges and Fields",
            "16. Electrostatic Potential and Capacitance",
        ],
        "Current Electricity & Magnetism": [
            "17. Current Electricity",
            "18. Moving Charges and Magnetism",
            "19. Magnetism and Matter",
        ],
        "EMI, AC & EM Waves": [
            "20. Electromagnetic Induction",
            "21. Alternating Current",
            "22. Electromagnetic Waves",
        ],
        "Optics": ["23. Ray Optics and Optical Instruments", "24. Wave Optics"],
        "Modern Physics": [
            "25. Dual Nature of Radiation and Matter",
            "26. Atoms",
            "27. Nuclei",
        ],
        "Electronic Devices": ["28. Semiconductor Electronics"],
    },
    "physical-chemistry": {
        "Basic Concepts": ["1. Mole Concept"],
        "Atomic Structure": ["2. Structure of Atom"],
        "Thermodynamics & Equilibrium": [
            "3. Thermodynamics",
            "4. Chemical Equilibrium",
            "5. Ionic Equilibrium",
        ],
        "Redox & Electrochemistry": ["6. Redox Reactions", "7. Electrochemistry"],
        "Kinetics & Solutions": ["8. Chemical Kinetics", "9. Solutions"],
    },
    "organic-chemistry": {
        "Basic Principles": ["1. Organic Chemistry: Some Basic Principles and Techniques"],
        "Hydrocarbons & Halides": ["2. Hydrocarbons", "3. Haloalkanes and Haloarenes"],
        "Oxygen Containing Compounds": [
            "4. Alcohols, Phenols and Ethers",
            "5. Aldehydes, Ketones and Carboxylic Acids",
        ],
        "Nitrogen Containing & Biomolecules": ["6. Amines", "7. Biomolecules"],
        "Applied Chemistry": ["8. Polymers", "9. Chemistry in Everyday Life"],
    },
    "inorganic-chemistry": {
        "Periodicity & Bonding": [
            "1. Classification of Elements and Periodicity in Properties",
            "2. Chemical Bonding and Molecular Structure",
        ],
        "Block Elements": [
            "3. Hydrogen",
            "4. s-Block Elements",
            "5. p-Block Elements (Group 13 & 14)",
            "6. p-Block Elements (Group 15, 16, 17, 18)",
        ],
        "d/f-Block & Coordination": [
            "7. d- and f-Block Elements",
            "8. Coordination Compounds",
        ],
        "Metallurgy & Environmental": [
            "9. General Principles and Processes of Isolation of Elements",
            "10. Environmental Chemistry",
        ],
    },
    "biology": {
        "Diversity in Living World": [
            "1. The Living World",
            "2. Biological Classification",
            "3. Plant Kingdom",
            "4. Animal Kingdom",
        ],
        "Structural Organisation": [
            "5. Morphology of Flowering Plants",
            "6. Anatomy of Flowering Plants",
            "7. Structural Organisation in Animals",
        ],
        "Cell Structure and Function": [
            "8. Cell: The Unit of Life",
            "9. Biomolecules",
            "10. Cell Cycle and Cell Division",
        ],
        "Plant Physiology": [
            "11. Transport in Plants",
            "12. Mineral Nutrition",
            "13. Photosynthesis in Higher Plants",
            "14. Respiration in Plants",
            "15. Plant Growth and Development",
        ],
        "Human Physiology": [
            "16. Digestion and Absorption",
            "17. Breathing and Exchange of Gases",
            "18. Body Fluids and Circulation",
            "19. Excretory Products and their Elimination",
            "20. Locomotion and Movement",
            "21. Neural Control and Coordination",
            "22. Chemical Coordination and Integration",
        ],
        "Reproduction": [
            "23. Reproduction in Organisms",
            "24. Sexual Reproduction in Flowering Plants",
            "25. Human Reproduction",
            "26. Reproductive Health",
        ],
        "Genetics and Evolution": [
            "27. Principles of Inheritance and Variation",
            "28. Molecular Basis of Inheritance",
            "29. Evolution",
        ],
        "Biology and Human Welfare": [
            "30. Human Health and Disease",
            "31. Strategies for Enhancement in Food Production",
            "32. Microbes in Human Welfare",
        ],
        "Biotechnology": [
            "33. Biotechnology: Principles and Processes",
            "34. Biotechnology and its Applications",
        ],
        "Ecology and Environment": [
            "35. Organisms and Populations",
            "36. Ecosystem",
            "37. Biodiversity and Conservation",
            "38. Environmental Issues",
        ],
    },
}

JEE_UNITS: dict[str, dict[str, list[str]]] = {
    "physics": {
        "Units and Measurement": ["1. Physics and Measurement"],
        "Mechanics": [
            "2. Kinematics",
            "3. Laws of Motion",
            "4. Work, Energy and Power",
            "5. Rotational Motion",
            "6. Gravitation",
            "7. Properties of Solids and Liquids",
        ],
        "Thermodynamics and Gases": ["8. Thermodynamics", "9. Kinetic Theory of Gases"],
        "Oscillations and Waves": ["10. Oscillations and Waves"],
        "Electrostatics & Current": ["11. Electrostatics", "12. Current Electricity"],
        "Magnetism and EMI": [
            "13. Magnetic Effects of Current and Magnetism",
            "14. Electromagnetic Induction and Alternating Currents",
            "15. Electromagnetic Waves",
        ],
        "Optics": ["16. Optics"],
        "Modern Physics": [
            "17. Dual Nature of Matter and Radiation",
            "18. Atoms and Nuclei",
        ],
        "Electronics and Communication": [
            "19. Electronic Devices",
            "20. Communication Systems",
        ],
    },
    "physical-chemistry": {
        "Basic Concepts": ["1. Mole Concept"],
        "States of Matter & Structure": ["2. States of Matter", "3. Atomic Structure"],
        "Bonding & Thermodynamics": [
            "4. Chemical Bonding and Molecular Structure",
            "5. Chemical Thermodynamics",
        ],
        "Solutions & Equilibrium": [
            "6. Solutions",
            "7. Chemical Equilibrium",
            "8. Ionic Equilibrium",
        ],
        "Electrochemistry & Kinetics": [
            "9. Redox Reactions and Electrochemistry",
            "10. Chemical Kinetics",
        ],
        "Surface Chemistry": ["11. Surface Chemistry"],
    },
    "organic-chemistry": {
        "Basic Principles": [
            "1. Purification and Characterisation of Organic Compounds",
            "2. Some Basic Principles of Organic Chemistry",
        ],
        "Hydrocarbons": ["3. Hydrocarbons"],
        "Compounds with Functional Groups": [
            "4. Organic Compounds Containing Halogens",
            "5. Organic Compounds Containing Oxygen",
            "6. Organic Compounds Containing Nitrogen",
        ],
        "Applied Chemistry": [
            "7. Polymers",
            "8. Biomolecules",
            "9. Chemistry in Everyday Life",
        ],
    },
    "inorganic-chemistry": {
        "Classification and Principles": [
            "1. Classification of Elements and Periodicity in Properties",
            "2. General Principles and Processes of Isolation of Metals",
        ],
        "Block Elements": [
            "3. Hydrogen",
            "4. s-Block Elements (Alkali and Alkaline Earth Metals)",
            "5. p-Block Elements",
            "6. d- and f-Block Elements",
        ],
        "Coordination and Environmental": [
            "7. Co-ordination Compounds",
            "8. Environmental Chemistry",
        ],
        "Practical Chemistry": ["9. Principles Related to Practical Chemistry"],
    },
    "mathematics": {
        "Algebra": [
            "1. Sets, Relations, and Functions",
            "2. Complex Numbers and Quadratic Equations",
            "3. Matrices and Determinants",
            "4. Permutations and Combinations",
            "5. Binomial Theorem",
            "6. Sequence and Series",
        ],
        "Calculus": [
            "7. Limit, Continuity and Differentiability",
            "8. Integral Calculus",
            "9. Differential Equations",
        ],
        "Coordinate Geometry": ["10. Co-ordinate Geometry", "11. Three Dimensional Geometry"],
        "Vectors and Trigonometry": ["12. Vector Algebra", "14. Trigonometry"],
        "Statistics and Reasoning": [
            "13. Statistics and Probability",
            "15. Mathematical Reasoning",
        ],
    },
}

DEFAULT_UNITS: dict[str, dict[str, dict[str, list[str]]]] = {
    "NEET": NEET_UNITS,
    "JEE": JEE_UNITS,
}

CHEMISTRY_BRANCHES = ("physical-chemistry", "organic-chemistry", "inorganic-chemistry")

# Pseudo-subject aggregating the three chemistry branches
CHEMISTRY = "chemistry"

Syllabus = dict[str, list[str]]


@dataclass
class SyllabusRecord:
    """Stored chapter list for one exam and subject."""

    id: str
    exam: str
    subject: str
    chapters: list[str] = field(default_factory=list)
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "exam": self.exam,
            "subject": self.subject,
            "chapters": list(self.chapters),
            "updated_at": self.updated_at,
        }


# =============================================================================
# PURE HELPERS
# =============================================================================


def syllabus_id(exam: str, subject: str) -> str:
    """Row id for an (exam, subject) pair, e.g. 'neet-physics'."""
    return f"{exam.lower()}-{subject}"


def subject_title(slug: str) -> str:
    """Display name for a subject slug: 'physical-chemistry' -> 'Physical Chemistry'."""
    return " ".join(part.capitalize() for part in slug.split("-"))


def flatten(exam: str) -> Syllabus:
    """Default subject -> chapter list for an exam, in unit order."""
    require_exam(exam)
    return {
        subject: [chapter for chapters in units.values() for chapter in chapters]
        for subject, units in DEFAULT_UNITS[exam].items()
    }


def get_units(exam: str, subject: str) -> dict[str, list[str]] | None:
    """Unit tree for a subject, or None when the exam has no such subject."""
    require_exam(exam)
    units = DEFAULT_UNITS[exam].get(subject)
    return {name: list(chapters) for name, chapters in units.items()} if units else None


def parse_chapter_text(text: str) -> list[str]:
    """Split editor text into chapters: one per line, trimmed, blanks dropped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


# =============================================================================
# STORED SYLLABUS
# =============================================================================


def seed_default_syllabus() -> int:
    """Write the default syllabus for every exam and subject.

    Existing rows are overwritten.

    Returns:
        Number of (exam, subject) rows written
    """
    now = clock.now_iso()
    count = 0
    with get_db() as conn:
        for exam in DEFAULT_UNITS:
            for subject, chapters in flatten(exam).items():
                conn.execute(
                    """
                    INSERT INTO syllabuses (id, exam, subject, chapters, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        chapters = excluded.chapters,
                        updated_at = excluded.updated_at
                    """,
                    (syllabus_id(exam, subject), exam, subject, json.dumps(chapters), now),
                )
                count += 1

    logger.info("syllabus.seeded", rows=count)
    return count


def is_seeded() -> bool:
    """True if any syllabus rows exist."""
    with get_db() as conn:
        row = conn.execute("SELECT COUNT(*) AS n FROM syllabuses").fetchone()
    return row["n"] > 0


def list_records(exam: str | None = None) -> list[SyllabusRecord]:
    """All stored syllabus rows, optionally for a single exam."""
    query = "SELECT * FROM syllabuses"
    params: tuple[Any, ...] = ()
    if exam is not None:
        require_exam(exam)
        query += " WHERE exam = ?"
        params = (exam,)
    query += " ORDER BY exam, rowid"

    with get_db() as conn:
        rows = conn.execute(query, params).fetchall()

    return [
        SyllabusRecord(
            id=row["id"],
            exam=row["exam"],
            subject=row["subject"],
            chapters=json.loads(row["chapters"]),
            updated_at=row["updated_at"],
        )
        for row in rows
    ]


def load_syllabus(exam: str) -> Syllabus:
    """Stored subject -> chapters mapping for an exam.

    Falls back to the default syllabus if nothing has been seeded yet.
    """
    records = list_records(exam)
    if not records:
        return flatten(exam)
    return {record.subject: record.chapters for record in records}


def save_subject_chapters(exam: str, subject: str, chapters: str | list[str]) -> SyllabusRecord:
    """Replace the chapter list for one subject (admin syllabus editor).

    Args:
        exam: NEET or JEE
        subject: Subject slug
        chapters: Newline-separated text or a list of chapter names

    Returns:
        The saved record
    """
    require_exam(exam)
    if isinstance(chapters, str):
        cleaned = parse_chapter_text(chapters)
    else:
        cleaned = [c.strip() for c in chapters if c and c.strip()]

    record = SyllabusRecord(
        id=syllabus_id(exam, subject),
        exam=exam,
        subject=subject,
        chapters=cleaned,
        updated_at=clock.now_iso(),
    )
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO syllabuses (id, exam, subject, chapters, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                chapters = excluded.chapters,
                updated_at = excluded.updated_at
            """,
            (record.id, exam, subject, json.dumps(cleaned), record.updated_at),
        )

    logger.info("syllabus.saved", id=record.id, chapters=len(cleaned))
    return record
