"""Co-Builder resume export."""

from typing import List

from b4_platform.schemas.exports import ExportedDocument, ResumeData
from b4_platform.services.export.pdf_layout import Section, export_filename, render_document
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

RESUME_TITLE = "Professional Resume"


def _yes_no(value):
    if value is None:
        return None
    return "Yes" if value else "No"


def resume_sections(data: ResumeData) -> List[Section]:
    """Practice, training and consulting only appear once the promise is made."""
    years = f"{data.years_of_experience} years" if data.years_of_experience is not None else None
    sections: List[Section] = [
        (
            "Profile Information",
            [
                ("Bio", data.bio),
                ("Primary Skills", data.primary_skills),
                ("Years of Experience", years),
            ],
        ),
        ("Natural Role Definition", [("Role Description", data.description)]),
        ("Promise Commitment", [("Promise", _yes_no(data.promise_check))]),
    ]

    if data.promise_check and data.practice_check:
        sections.append(
            (
                "Practice Experience",
                [
                    ("Entities Worked With", data.practice_entities),
                    ("Case Studies", data.practice_case_studies),
                ],
            )
        )
    if data.promise_check and data.training_check:
        sections.append(
            (
                "Training Experience",
                [
                    ("Training Contexts", data.training_contexts),
                    ("People Trained", data.training_count),
                ],
            )
        )
    if data.promise_check and data.consulting_check:
        sections.append(
            (
                "Consulting Experience",
                [
                    ("Consulting With", data.consulting_with_whom),
                    ("Case Studies", data.consulting_case_studies),
                ],
            )
        )
    return sections


class ResumePdfService:
    """Renders a Co-Builder's profile and Natural Role answers as a PDF resume."""

    def render(self, data: ResumeData) -> ExportedDocument:
        try:
            document = render_document(
                RESUME_TITLE,
                data.full_name,
                resume_sections(data),
                export_filename("resume", data.full_name),
            )
            LOGGER.info(f"Generated resume PDF ({document.page_count} pages)")
            return document
        except Exception as e:
            LOGGER.error(f"Failed to generate resume PDF: {str(e)}")
            raise
