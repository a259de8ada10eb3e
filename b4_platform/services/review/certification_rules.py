"""What approving each learning journey grants.

Approving a journey upserts one certification and stamps the user's
onboarding state. Scaling Path approval leaves ``boost_type`` untouched.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from b4_platform.core.constants import BoostType, JourneyType, ScaleType, UserStatus
from b4_platform.core.exceptions import ValidationError


@dataclass(frozen=True)
class CertificationRule:
    certification_type: str
    display_label: str
    user_status: UserStatus
    boost_type: Optional[BoostType] = None
    scale_type: Optional[ScaleType] = None

    def state_changes(self) -> Dict[str, object]:
        """Column values to write on OnboardingState."""
        changes: Dict[str, object] = {"user_status": self.user_status.value}
        if self.boost_type is not None:
            changes["boost_type"] = self.boost_type.value
        if self.scale_type is not None:
            changes["scale_type"] = self.scale_type.value
        return changes


CERTIFICATION_RULES: Dict[JourneyType, CertificationRule] = {
    JourneyType.SKILL_PTC: CertificationRule(
        certification_type="cobuilder_b4",
        display_label="Vaccinated Co Builder",
        user_status=UserStatus.BOOSTED,
        boost_type=BoostType.BOOSTED_CO_BUILDER,
    ),
    JourneyType.IDEA_PTC: CertificationRule(
        certification_type="initiator_b4",
        display_label="Vaccinated Initiator",
        user_status=UserStatus.BOOSTED,
        boost_type=BoostType.BOOSTED_INITIATOR,
    ),
    JourneyType.SCALING_PATH: CertificationRule(
        certification_type="consultant_b4",
        display_label="Certified Consultant",
        user_status=UserStatus.SCALED,
        scale_type=ScaleType.PERSONAL_PROMISE,
    ),
}


def certification_rule(journey_type: str) -> CertificationRule:
    try:
        return CERTIFICATION_RULES[JourneyType(journey_type)]
    except ValueError as e:
        raise ValidationError(f"No certification for journey type '{journey_type}'") from e
