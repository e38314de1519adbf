from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from jtutors.db.models import Subject
from jtutors.db.repositories import Repository

SUBJECT_CATALOG: dict[str, list[str]] = {
    "Standardized Tests": [
        "ACT", "GED", "GMAT", "GRE", "IELTS", "LSAT", "MCAT", "PSAT", "SAT", "SAT Math", "TOEFL",
    ],
    "Mathematics": [
        "algebra 1", "algebra 2", "calculus", "discrete math", "elementary math", "geometry",
        "linear algebra", "precalculus", "prealgebra", "probability", "statistics", "trigonometry",
    ],
    "Science": [
        "anatomy", "astronomy", "biochemistry", "biology", "chemistry", "earth science",
        "environmental science", "genetics", "organic chemistry", "physics", "physiology",
    ],
    "Computer Science / Technology": [
        "computer programming", "computer science", "cybersecurity", "data science",
        "data structures", "HTML", "Java", "Javascript", "Machine Learning/AI", "Microsoft Excel",
        "Python", "React", "SQL", "web design",
    ],
    "Languages": [
        "ESL/ESOL", "French", "Greek", "Hebrew", "Hindi", "Italian", "Korean", "Latin",
        "Portuguese", "Russian", "sign language", "Spanish",
    ],
    "History / Social Studies": [
        "American history", "anthropology", "economics", "European history",
        "government and politics", "political science", "sociology", "world history",
    ],
    "Business / Law": [
        "business", "entrepreneurship", "finance", "financial accounting", "law", "marketing",
        "project management",
    ],
    "Jewish Studies": ["Bar Mitzvah", "Chumash", "Halacha", "Talmud", "Tanach", "Torah reading"],
    "English / Literature / Writing": [
        "creative writing", "English", "essay writing", "grammar", "literacy", "reading",
        "vocabulary", "writing",
    ],
    "Music / Art": ["drawing", "guitar", "music theory", "painting", "piano", "voice"],
}


def seed_subjects(session: Session) -> int:
    existing = {name.lower() for name in session.scalars(select(Subject.name)).all()}
    inserted = 0
    for category, names in SUBJECT_CATALOG.items():
        for name in names:
            if name.lower() in existing:
                continue
            session.add(Subject(name=name, category=category))
            existing.add(name.lower())
            inserted += 1

    if inserted:
        session.commit()
    return inserted


def seed_admin_settings(session: Session) -> None:
    Repository(session).get_admin_settings()
