"""
Safe Haven Backend: Counseling Service Catalog
================================================

What:  Static catalog of the counseling services offered.
Why:   The catalog changes a few times a year and is edited by developers,
       so it lives in code rather than in a table.
Who:   GET /api/services routes, the scheduling validator (session-type
       compatibility) and the appointment service (default fee).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from safehaven.enums import ServiceType, SessionType
from safehaven.exceptions import NotFoundError

ALL_SESSION_TYPES: Tuple[SessionType, ...] = (
    SessionType.IN_PERSON,
    SessionType.VIDEO_CALL,
    SessionType.PHONE_CALL,
)


@dataclass(frozen=True)
class CatalogService:
    id: ServiceType
    name: str
    description: str
    duration: int
    standard_price: float
    availability: str
    session_types: Tuple[SessionType, ...] = ALL_SESSION_TYPES
    sliding_scale: bool = True
    insurance_accepted: bool = True
    specialties: Tuple[str, ...] = field(default_factory=tuple)

    def allows(self, session_type: SessionType) -> bool:
        return session_type in self.session_types


_CATALOG: Dict[ServiceType, CatalogService] = {
    service.id: service
    for service in (
        CatalogService(
            id=ServiceType.INDIVIDUAL_COUNSELING,
            name="Individual Counseling",
            description=(
                "One-on-one sessions addressing personal challenges including anxiety, "
                "depression, trauma, grief, addiction recovery, and personal growth."
            ),
            duration=60,
            standard_price=100,
            availability="Monday-Saturday",
            specialties=(
                "Anxiety and Depression Treatment",
                "Trauma and PTSD Recovery",
                "Grief and Loss Counseling",
                "Addiction Recovery Support",
                "Life Transitions and Changes",
                "Spiritual Counseling",
            ),
        ),
        CatalogService(
            id=ServiceType.COUPLES_COUNSELING,
            name="Couples Counseling",
            description=(
                "Strengthen your marriage or relationship through improved communication, "
                "conflict resolution, and deeper intimacy."
            ),
            duration=90,
            standard_price=150,
            availability="Monday-Saturday",
            session_types=(SessionType.IN_PERSON, SessionType.VIDEO_CALL),
            specialties=(
                "Communication Skills Development",
                "Conflict Resolution",
                "Intimacy and Connection",
                "Pre-marital Counseling",
                "Infidelity Recovery",
                "Christian Marriage Counseling",
            ),
        ),
        CatalogService(
            id=ServiceType.FAMILY_COUNSELING,
            name="Family Therapy",
            description=(
                "Help your family heal and restore healthy dynamics through better "
                "communication, conflict resolution, and stronger bonds."
            ),
            duration=90,
            standard_price=160,
            availability="Monday-Saturday",
            session_types=(SessionType.IN_PERSON, SessionType.VIDEO_CALL),
            specialties=(
                "Parent-Child Relationships",
                "Sibling Conflicts",
                "Blended Family Challenges",
                "Teen and Adolescent Issues",
                "Family Crisis Intervention",
                "Christian Family Values",
            ),
        ),
        CatalogService(
            id=ServiceType.GROUP_THERAPY,
            name="Group Therapy",
            description=(
                "Connect with others who share similar experiences in a supportive "
                "group environment."
            ),
            duration=90,
            standard_price=50,
            availability="Monday-Friday evenings",
            session_types=(SessionType.IN_PERSON,),
            specialties=(
                "Support Groups for Specific Issues",
                "Skills-Based Therapy Groups",
                "Recovery and Addiction Groups",
                "Grief and Loss Support",
                "Women's and Men's Groups",
                "Faith-Based Support Groups",
            ),
        ),
        CatalogService(
            id=ServiceType.CRISIS_INTERVENTION,
            name="Crisis Intervention",
            description=(
                "Immediate support for individuals and families experiencing acute "
                "mental health crises."
            ),
            duration=60,
            standard_price=120,
            availability="24/7",
            specialties=(
                "24/7 Crisis Hotline",
                "Emergency Counseling Sessions",
                "Safety Planning and Assessment",
                "Referral and Resource Coordination",
                "Follow-up Crisis Support",
                "Spiritual Crisis Support",
            ),
        ),
        CatalogService(
            id=ServiceType.ADDICTION_COUNSELING,
            name="Addiction Counseling",
            description=(
                "Recovery-focused counseling for substance use and behavioral addictions, "
                "with relapse prevention and family support."
            ),
            duration=60,
            standard_price=110,
            availability="Monday-Saturday",
            specialties=(
                "Substance Use Recovery",
                "Relapse Prevention",
                "Behavioral Addictions",
                "Family Support in Recovery",
            ),
        ),
        CatalogService(
            id=ServiceType.GRIEF_COUNSELING,
            name="Grief Counseling",
            description=(
                "Compassionate support for working through loss, bereavement, and "
                "major life changes."
            ),
            duration=60,
            standard_price=100,
            availability="Monday-Saturday",
            specialties=(
                "Bereavement Support",
                "Anticipatory Grief",
                "Loss of a Child or Spouse",
                "Faith and Grief",
            ),
        ),
        CatalogService(
            id=ServiceType.YOUTH_COUNSELING,
            name="Youth Counseling",
            description=(
                "Age-appropriate counseling for children and teens facing emotional, "
                "behavioral, or school-related challenges."
            ),
            duration=60,
            standard_price=90,
            availability="Monday-Friday afternoons",
            session_types=(SessionType.IN_PERSON, SessionType.VIDEO_CALL),
            specialties=(
                "School and Peer Issues",
                "Anxiety in Children and Teens",
                "Behavioral Challenges",
                "Identity and Self-Esteem",
            ),
        ),
    )
}


def list_services() -> List[CatalogService]:
    """Returns every catalog entry in ServiceType declaration order."""
    return [_CATALOG[service_type] for service_type in ServiceType]


def get_service(service_id: str) -> CatalogService:
    """Looks up one catalog entry; unknown ids raise NotFoundError (→ 404)."""
    try:
        return _CATALOG[ServiceType(service_id)]
    except ValueError:
        raise NotFoundError(resource="service", resource_id=service_id)


def service_name(service_type: str) -> str:
    """Display name for emails; unknown values are returned unchanged."""
    try:
        return _CATALOG[ServiceType(service_type)].name
    except ValueError:
        return service_type
