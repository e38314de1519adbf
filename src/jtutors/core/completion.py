"""Tutor profile completion.

A tutor profile has eight sections of equal weight. The percentage is
``floor(100 * completed / 8)``, which yields the step sequence
0, 12, 25, 37, 50, 62, 75, 87, 100 shown by the progress bar.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from jtutors.types import ProfileSectionName

SECTION_ORDER: tuple[ProfileSectionName, ...] = (
    "personal_info",
    "experience",
    "education",
    "subjects",
    "availability",
    "payout_method",
    "background_check",
    "profile_photo",
)
TOTAL_SECTIONS = len(SECTION_ORDER)


@dataclass(slots=True, frozen=True)
class SectionPresence:
    personal_info: bool = False
    experience: bool = False
    education: bool = False
    subjects: bool = False
    availability: bool = False
    payout_method: bool = False
    background_check: bool = False
    profile_photo: bool = False

    @classmethod
    def from_sections(cls, sections: set[str] | list[str] | tuple[str, ...]) -> "SectionPresence":
        unknown = set(sections) - set(SECTION_ORDER)
        if unknown:
            raise ValueError(f"unknown profile sections: {sorted(unknown)}")
        return cls(**{name: True for name in sections})

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)

    def completed_sections(self) -> list[str]:
        return [name for name in SECTION_ORDER if getattr(self, name)]

    def missing_sections(self) -> list[str]:
        return [name for name in SECTION_ORDER if not getattr(self, name)]


def completion_percentage(presence: SectionPresence) -> int:
    completed = len(presence.completed_sections())
    return (completed * 100) // TOTAL_SECTIONS


def is_complete(percentage: int) -> bool:
    return percentage == 100
