#!/usr/bin/env python3
"""
GRADE AGGREGATOR - Score edits, year averages, and column totals
Deterministic arithmetic over a student's per-subject, per-level scores

CALCULATIONS:
✅ Year Average: Mean of the nonzero semesters (single-semester fallback)
✅ Total: Semester 1 + Semester 2
✅ Column Totals: Sums across subjects with semester data, per grade level
✅ Column Averages: Sums divided by the number of subjects with data
✅ Overrides: Any total/average cell can be replaced by a manual value
✅ Overall Average: Mean of all nonzero year averages (whole number)

ROUNDING:
All stored figures are rounded half-up to 2 decimals on the exact binary value
of the float, so 85.125 -> 85.13 and 1.005 -> 1.0 (1.005 is 1.00499... in
binary). Display strings use the same rule at 1 decimal.

EDGE CASES HANDLED:
- Unparseable input ("abc", "") stores 0
- Leading-number input ("85abc") stores 85
- Semester scores clamp to [0, 100]; direct yearAvg/total edits are stored as is
- Subjects with both semesters zero are left out of sums and the average divisor
- Absent grade levels read as zero entries

Dependencies: data_models.py for type definitions
"""

import logging
import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from .data_models import (
    SCORE_ATTRIBUTES,
    SEMESTER_FIELDS,
    GradeLevel,
    ScoreEntry,
    ScoreField,
    Student,
    SubjectRecord,
    grade_level_key,
)
from .errors import SubjectIndexError

logger = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 100.0

# Override field name -> ColumnTotals attribute
OVERRIDE_FIELDS = {
    "semester1-total": "semester1_total",
    "semester2-total": "semester2_total",
    "yearAvg-total": "year_avg_total",
    "total-total": "total_total",
    "semester1-avg": "semester1_avg",
    "semester2-avg": "semester2_avg",
    "yearAvg-avg": "year_avg_avg",
    "total-avg": "total_avg",
}

ACADEMIC_STATUS_TIERS = [
    (90, "Excellent"),
    (80, "Good"),
    (70, "Satisfactory"),
    (60, "Pass"),
]
LOWEST_STATUS = "Needs Improvement"

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_TWO_PLACES = Decimal("0.01")
_ONE_PLACE = Decimal("0.1")
_WHOLE = Decimal("1")

# Wide enough for every finite float at 2 decimals (max float has 309 digits)
_DECIMAL_CONTEXT = Context(prec=400)


def _quantize(value: float, places: Decimal) -> Decimal:
    return Decimal(value).quantize(places, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT)


def round2(value: float) -> float:
    """Round half-up to 2 decimals; inf and nan pass through"""
    if not math.isfinite(value):
        return float(value)
    return float(_quantize(value, _TWO_PLACES)) + 0.0


def format_one_decimal(value: float) -> str:
    """Fixed-point string with one decimal, e.g. 85 -> '85.0'"""
    if not math.isfinite(value):
        return f"{value:.1f}"
    return str(_quantize(value + 0.0, _ONE_PLACE))


def parse_score(raw_value: Union[str, int, float, None]) -> float:
    """
    Parse user input as a real number

    Numbers pass through. Strings are read up to the first non-numeric
    character; anything unparseable (or non-finite) becomes 0.
    """
    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        value = float(raw_value)
    else:
        match = _LEADING_NUMBER.match(str(raw_value)) if raw_value is not None else None
        value = float(match.group(0)) if match else 0.0

    if not math.isfinite(value):
        return 0.0
    return value


def clamp_score(value: float) -> float:
    """Limit a semester score to [0, 100]"""
    return min(max(value, MIN_SCORE), MAX_SCORE)


def calculate_year_avg(semester1: float, semester2: float) -> float:
    """Year average with single-semester fallback"""
    if semester1 == 0 and semester2 == 0:
        return 0.0
    if semester1 == 0:
        return round2(semester2)
    if semester2 == 0:
        return round2(semester1)
    return round2((semester1 + semester2) / 2)


def calculate_total(semester1: float, semester2: float) -> float:
    return round2(semester1 + semester2)


def update_score(
    student: Student,
    subject_index: int,
    grade_level: Union[str, GradeLevel],
    field: Union[str, ScoreField],
    raw_value: Union[str, int, float, None],
) -> ScoreEntry:
    """
    Apply one score edit to a student in place

    Args:
        student: Student whose subject list is edited
        subject_index: Position in student.grades
        grade_level: Grade level label (G9-G12)
        field: semester1, semester2, yearAvg or total
        raw_value: User input

    Returns:
        The updated ScoreEntry

    Raises:
        SubjectIndexError: subject_index is outside the subject list (nothing changes)
    """
    if not 0 <= subject_index < len(student.grades):
        logger.error(
            f"❌ Invalid subject index {subject_index} for {student.name} "
            f"({len(student.grades)} subjects)"
        )
        raise SubjectIndexError(
            f"Subject index {subject_index} out of range (0-{len(student.grades) - 1})"
        )

    field_key = ScoreField(field).value
    level = grade_level_key(grade_level)
    record = student.grades[subject_index]

    entry = record.grades.get(level)
    if entry is None:
        entry = ScoreEntry()
        record.grades[level] = entry

    value = parse_score(raw_value)
    if field_key in SEMESTER_FIELDS:
        value = clamp_score(value)

    setattr(entry, SCORE_ATTRIBUTES[field_key], value)

    # Manual yearAvg/total edits stick until the next semester edit
    if field_key in SEMESTER_FIELDS:
        entry.year_avg = calculate_year_avg(entry.semester1, entry.semester2)
        entry.total = calculate_total(entry.semester1, entry.semester2)

    logger.debug(f"Updated {record.subject} {level} {field_key} = {value}")
    return entry


class TotalsOverrides:
    """
    Manual values for column-total cells, keyed by (grade level, field)

    Fields are the keys of OVERRIDE_FIELDS, e.g. ('G11', 'semester1-total').
    Serialized form joins the key as 'G11-semester1-total'.
    """

    def __init__(self, values: Optional[Dict[Tuple[str, str], float]] = None):
        self._values: Dict[Tuple[str, str], float] = {}
        for (level, field), value in (values or {}).items():
            self._values[self._key(level, field)] = float(value)

    @staticmethod
    def _key(grade_level: Union[str, GradeLevel], field: str) -> Tuple[str, str]:
        if field not in OVERRIDE_FIELDS:
            raise ValueError(f"Unknown totals field {field!r}; expected one of {list(OVERRIDE_FIELDS)}")
        return grade_level_key(grade_level), field

    def set(self, grade_level: Union[str, GradeLevel], field: str, raw_value) -> float:
        """Store an override; unparseable input stores 0"""
        value = parse_score(raw_value)
        self._values[self._key(grade_level, field)] = value
        return value

    def get(self, grade_level: Union[str, GradeLevel], field: str) -> Optional[float]:
        return self._values.get(self._key(grade_level, field))

    def clear(self, grade_level: Union[str, GradeLevel], field: str) -> bool:
        """Remove one override; False when none was set"""
        return self._values.pop(self._key(grade_level, field), None) is not None

    def clear_all(self) -> None:
        self._values.clear()

    def items(self):
        return self._values.items()

    def merged(self, other: Optional["TotalsOverrides"]) -> "TotalsOverrides":
        """New table with other's values taking precedence"""
        combined = TotalsOverrides(self._values)
        if other is not None:
            combined._values.update(other._values)
        return combined

    def to_dict(self) -> Dict[str, float]:
        return {f"{level}-{field}": value for (level, field), value in self._values.items()}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, float]]) -> "TotalsOverrides":
        overrides = cls()
        for key, value in (data or {}).items():
            level, _, field = key.partition("-")
            try:
                overrides._values[cls._key(level, field)] = float(value)
            except (TypeError, ValueError):
                logger.warning(f"⚠️ Ignoring unrecognized totals override {key!r}")
        return overrides

    def __contains__(self, key) -> bool:
        level, field = key
        return self._key(level, field) in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        return isinstance(other, TotalsOverrides) and self._values == other._values

    def __repr__(self) -> str:
        return f"TotalsOverrides({self.to_dict()!r})"


class ColumnTotals(BaseModel):
    """Sums and means across subjects for one grade level"""

    grade_level: str

    semester1_total: float = 0.0
    semester2_total: float = 0.0
    year_avg_total: float = 0.0
    total_total: float = 0.0

    semester1_avg: float = 0.0
    semester2_avg: float = 0.0
    year_avg_avg: float = 0.0
    total_avg: float = 0.0

    subject_count: int = Field(0, ge=0, description="Subjects with semester data (not overridable)")


def column_totals(
    subject_records: Iterable[SubjectRecord],
    grade_level: Union[str, GradeLevel],
    overrides: Optional[TotalsOverrides] = None,
) -> ColumnTotals:
    """
    Column sums and means for one grade level

    Only subjects with a nonzero semester 1 or semester 2 contribute, to both
    the sums and the divisor. Overrides replace individual cells.
    """
    level = grade_level_key(grade_level)

    sums = {"semester1": 0.0, "semester2": 0.0, "year_avg": 0.0, "total": 0.0}
    subject_count = 0

    for record in subject_records:
        entry = record.score_for(level)
        if not entry.has_data:
            continue
        sums["semester1"] += entry.semester1
        sums["semester2"] += entry.semester2
        sums["year_avg"] += entry.year_avg
        sums["total"] += entry.total
        subject_count += 1

    values = {}
    for name, value in sums.items():
        values[f"{name}_total"] = round2(value)
        values[f"{name}_avg"] = round2(value / subject_count) if subject_count > 0 else 0.0

    if overrides is not None:
        for field, attribute in OVERRIDE_FIELDS.items():
            override = overrides.get(level, field)
            if override is not None:
                values[attribute] = round2(override)

    return ColumnTotals(grade_level=level, subject_count=subject_count, **values)


def overall_average(subject_records: Iterable[SubjectRecord], levels: Iterable[str]) -> int:
    """Mean of every nonzero year average in the given levels, as a whole number"""
    levels = list(levels)
    year_avgs: List[float] = []
    for record in subject_records:
        for level in levels:
            entry = record.score_for(level)
            if entry.year_avg > 0:
                year_avgs.append(entry.year_avg)

    if not year_avgs:
        return 0
    mean = sum(year_avgs) / len(year_avgs)
    if not math.isfinite(mean):
        logger.warning(f"⚠️ Year averages too large to average ({len(year_avgs)} values)")
        return 0
    return int(_quantize(mean, _WHOLE))


def academic_status(average: float) -> str:
    """Five-tier status label for an overall average"""
    for threshold, label in ACADEMIC_STATUS_TIERS:
        if average >= threshold:
            return label
    return LOWEST_STATUS
