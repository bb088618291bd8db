"""
TEMPLATE CATALOG - Program length lookup table

Maps each template to its ordered grade levels, age eligibility and display
labels. Unrecognized templates fall back to the single-grade (G12) profile.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from .data_models import GradeLevel, Template


@dataclass(frozen=True)
class TemplateProfile:
    """Everything the catalog knows about one template"""
    template: str
    grade_levels: Tuple[str, ...]
    min_age: int
    max_age: int
    school_type: str
    program: str

    @property
    def years(self) -> int:
        return len(self.grade_levels)


TEMPLATE_PROFILES: Dict[str, TemplateProfile] = {
    Template.G9_G12.value: TemplateProfile(
        template=Template.G9_G12.value,
        grade_levels=(GradeLevel.G9.value, GradeLevel.G10.value, GradeLevel.G11.value, GradeLevel.G12.value),
        min_age=14,
        max_age=19,
        school_type="High School (4 years)",
        program="Grades 9-12",
    ),
    Template.G10_G12.value: TemplateProfile(
        template=Template.G10_G12.value,
        grade_levels=(GradeLevel.G10.value, GradeLevel.G11.value, GradeLevel.G12.value),
        min_age=15,
        max_age=18,
        school_type="High School (3 years)",
        program="Grades 10-12",
    ),
    Template.G11_G12.value: TemplateProfile(
        template=Template.G11_G12.value,
        grade_levels=(GradeLevel.G11.value, GradeLevel.G12.value),
        min_age=16,
        max_age=18,
        school_type="High School (2 years)",
        program="Grades 11-12",
    ),
    Template.G12.value: TemplateProfile(
        template=Template.G12.value,
        grade_levels=(GradeLevel.G12.value,),
        min_age=17,
        max_age=19,
        school_type="Grade 12 Only",
        program="Grade 12",
    ),
}

FALLBACK_TEMPLATE = Template.G12.value


def get_template_profile(template: Union[str, Template, None]) -> TemplateProfile:
    """Profile for a template, single-grade profile when unrecognized"""
    key = template.value if isinstance(template, Template) else template
    return TEMPLATE_PROFILES.get(key, TEMPLATE_PROFILES[FALLBACK_TEMPLATE])


def grade_levels(template: Union[str, Template, None]) -> List[str]:
    """Ordered grade-level labels shown for a template"""
    return list(get_template_profile(template).grade_levels)


def age_bounds(template: Union[str, Template, None]) -> Tuple[int, int, str]:
    """(min age, max age, school type description)"""
    profile = get_template_profile(template)
    return profile.min_age, profile.max_age, profile.school_type


def program_description(template: Union[str, Template, None]) -> str:
    """Program label printed on the transcript header, e.g. 'Grades 9-12'"""
    return get_template_profile(template).program


def academic_years(template: Union[str, Template, None], current_year: Optional[int] = None) -> str:
    """Academic years ending in the current year, e.g. '2023-2026' for G9-G12"""
    if current_year is None:
        current_year = datetime.now().year
    start_year = current_year - get_template_profile(template).years + 1
    return f"{start_year}-{current_year}"
