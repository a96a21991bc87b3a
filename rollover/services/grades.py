# rollover/services/grades.py
"""
Grade arithmetic over a school's class roster.

Class names are free text but are usually a bare grade number ("9", "10");
sections live in a separate field. Anything else ("Nursery", "LKG", "9A")
has no grade and falls back to a manual pick from the rest of the roster.
Candidate order is always the roster's stored order.
"""

import re
from typing import List, Optional, Sequence

from rollover.schemas.class_schema import ClassOut

_GRADE_RE = re.compile(r"[+-]?\d+")


def parse_grade(class_name: Optional[str]) -> Optional[int]:
    text = str(class_name or "").strip()
    if not _GRADE_RE.fullmatch(text):
        return None
    return int(text)


def _others(all_classes: Sequence[ClassOut], source: ClassOut) -> List[ClassOut]:
    return [c for c in all_classes if c.id != source.id]


def promotion_candidates(all_classes: Sequence[ClassOut], source: Optional[ClassOut]) -> List[ClassOut]:
    """Classes one grade above `source`, else every class except `source`."""
    if source is None:
        return []
    grade = parse_grade(source.name)
    if grade is None:
        return _others(all_classes, source)
    next_grade = [c for c in all_classes if parse_grade(c.name) == grade + 1]
    return next_grade or _others(all_classes, source)


def retention_candidates(all_classes: Sequence[ClassOut], source: Optional[ClassOut]) -> List[ClassOut]:
    """Classes sharing `source`'s name (any section), else just `source`."""
    if source is None:
        return []
    name = source.name.strip().lower()
    same_grade = [c for c in all_classes if c.name.strip().lower() == name]
    return same_grade or [source]


def first_id(candidates: Sequence[ClassOut]) -> str:
    return candidates[0].id if candidates else ""
