"""Initiator track record export."""

from typing import Dict, List, Optional

from b4_platform.schemas.exports import ExportedDocument, TrackRecordData
from b4_platform.services.export.pdf_layout import Section, export_filename, render_document
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

TRACK_RECORD_TITLE = "Entrepreneurial Track Record"

ROLE_LABELS: Dict[str, str] = {
    "founder": "Founder / Initiator",
    "co-founder": "Co-Founder",
    "project_lead": "Project Lead",
    "core_contributor": "Core Contributor",
}

STAGE_LABELS: Dict[str, str] = {
    "idea": "Idea / Concept",
    "prototype": "Prototype / PoC",
    "mvp": "MVP",
    "launched": "Launched / Live",
    "revenue": "Revenue-Generating",
}

TEAM_ROLE_LABELS: Dict[str, str] = {
    "team_lead": "Team Lead / Manager",
    "cto_coo": "CTO / COO / C-Level",
    "co-founder": "Co-Founder",
    "key_member": "Key Team Member",
    "advisor": "Advisor / Mentor",
}

EQUITY_LABELS: Dict[str, str] = {
    "board_member": "Board Member",
    "advisor": "Advisor / Mentor",
    "angel_investor": "Angel Investor",
    "equity_partner": "Equity Partner / Co-Founder",
    "pro_bono": "Pro Bono / Value Contributor",
}


def _label(table: Dict[str, str], value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return table.get(value, value)


def _counted(count: Optional[int], singular: str, plural: str) -> Optional[str]:
    if count is None:
        return None
    return f"{count} {singular if count == 1 else plural}"


def _category(header: str, has_experience: Optional[bool], fields) -> Optional[Section]:
    """A category is listed once answered; details follow only a yes."""
    if has_experience is None:
        return None
    status = "Has Experience" if has_experience else "No Experience"
    return header, [("Status", status)] + (list(fields) if has_experience else [])


def track_record_sections(data: TrackRecordData) -> List[Section]:
    categories = [
        _category(
            "Initiatives & Projects",
            data.has_developed_project,
            [
                ("Description", data.project_description),
                ("Count", _counted(data.project_count, "initiative", "initiatives")),
                ("Role", _label(ROLE_LABELS, data.project_role)),
                ("Measurable Outcomes", data.project_outcome),
            ],
        ),
        _category(
            "Products & Prototypes",
            data.has_built_product,
            [
                ("Description", data.product_description),
                ("Count", _counted(data.product_count, "product", "products")),
                ("Furthest Stage", _label(STAGE_LABELS, data.product_stage)),
                ("Users/Customers Reached", data.product_users_count),
            ],
        ),
        _category(
            "Team Experience",
            data.has_led_team,
            [
                ("Description", data.team_description),
                ("Team Size", _counted(data.team_size, "member", "members")),
                ("Role", _label(TEAM_ROLE_LABELS, data.team_role)),
            ],
        ),
        _category(
            "Business & Commercial",
            data.has_run_business,
            [
                ("Description", data.business_description),
                ("Count", _counted(data.business_count, "business", "businesses")),
                ("Revenue / Impact", data.business_revenue),
                ("Duration", data.business_duration),
            ],
        ),
        _category(
            "Equity & Value Contributions",
            data.has_served_on_board,
            [
                ("Description", data.board_description),
                ("Count", _counted(data.board_count, "contribution", "contributions")),
                ("Type", _label(EQUITY_LABELS, data.board_role_type)),
                ("Value Details", data.board_equity_details),
            ],
        ),
    ]
    return [category for category in categories if category is not None]


class TrackRecordPdfService:
    """Renders an Initiator's entrepreneurial onboarding answers as a PDF."""

    def render(self, data: TrackRecordData) -> ExportedDocument:
        try:
            document = render_document(
                TRACK_RECORD_TITLE,
                data.full_name,
                track_record_sections(data),
                export_filename("track-record", data.full_name),
            )
            LOGGER.info(f"Generated track record PDF ({document.page_count} pages)")
            return document
        except Exception as e:
            LOGGER.error(f"Failed to generate track record PDF: {str(e)}")
            raise
