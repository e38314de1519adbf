from itertools import combinations

import pytest

from jtutors.core.completion import (
    SECTION_ORDER,
    SectionPresence,
    completion_percentage,
    is_complete,
)

STEPS = [0, 12, 25, 37, 50, 62, 75, 87, 100]


def test_every_subset_maps_to_its_step_value() -> None:
    for size in range(len(SECTION_ORDER) + 1):
        for subset in combinations(SECTION_ORDER, size):
            presence = SectionPresence.from_sections(subset)
            assert completion_percentage(presence) == STEPS[size], subset


def test_empty_and_full_profiles() -> None:
    assert completion_percentage(SectionPresence()) == 0
    full = SectionPresence.from_sections(SECTION_ORDER)
    assert completion_percentage(full) == 100
    assert is_complete(completion_percentage(full))


def test_adding_a_section_never_decreases_completion() -> None:
    for size in range(len(SECTION_ORDER)):
        for subset in combinations(SECTION_ORDER, size):
            before = completion_percentage(SectionPresence.from_sections(subset))
            for extra in set(SECTION_ORDER) - set(subset):
                after = completion_percentage(SectionPresence.from_sections((*subset, extra)))
                assert after > before


def test_order_of_sections_does_not_matter() -> None:
    forward = SectionPresence.from_sections(["subjects", "experience", "profile_photo"])
    backward = SectionPresence.from_sections(["profile_photo", "experience", "subjects"])
    assert forward == backward
    assert completion_percentage(forward) == completion_percentage(backward) == 37


def test_missing_sections_follow_display_order() -> None:
    presence = SectionPresence(personal_info=True, availability=True)
    assert presence.completed_sections() == ["personal_info", "availability"]
    assert presence.missing_sections() == [
        "experience",
        "education",
        "subjects",
        "payout_method",
        "background_check",
        "profile_photo",
    ]


def test_unknown_section_is_rejected() -> None:
    with pytest.raises(ValueError):
        SectionPresence.from_sections(["personal_info", "hobbies"])
