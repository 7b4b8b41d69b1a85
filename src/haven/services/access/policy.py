"""
Access Policy Engine

Pure decision functions for every protected resource. Each rule
takes the caller's role (and, where relevant, ids already loaded
from the store) and returns an AccessDecision. No I/O happens here;
ownership chains are resolved by OwnershipResolver beforehand.

Role hierarchy: therapist (3) > office_admin (2) > client (1).
Unknown roles rank 0 and are denied everything role-gated.
"""

from typing import Optional

from haven.config.logging_config import get_logger
from haven.domain.enums import ResourceType, Role, role_rank
from haven.domain.exceptions import Forbidden
from haven.domain.models.access import AccessDecision
from haven.infrastructure.metrics import track_access_decision

logger = get_logger(__name__)


# =============================================================================
# ROLE PREDICATES
# =============================================================================

def has_role_permission(actual: Optional[str], required: Optional[str]) -> bool:
    """
    Whether a role meets a required level.

    Args:
        actual: Caller's role
        required: Minimum role

    Returns:
        True iff rank(actual) >= rank(required)
    """
    return role_rank(actual) >= role_rank(required)


def is_therapist_role(role: Optional[str]) -> bool:
    """True only for therapists."""
    return role == Role.THERAPIST


def is_office_admin_role(role: Optional[str]) -> bool:
    """True for office admins and therapists."""
    return role in (Role.OFFICE_ADMIN, Role.THERAPIST)


def _require(resource: ResourceType, role: Optional[str], required: Role) -> AccessDecision:
    if has_role_permission(role, required):
        return AccessDecision.allow(resource)
    return AccessDecision.deny(resource, f"requires_{required.value}")


def _is_self(caller_id: str, owner_id: Optional[str]) -> bool:
    return owner_id is not None and caller_id == owner_id


# =============================================================================
# JOURNALS
# =============================================================================

def can_access_own_journal(caller_id: str, owner_id: str) -> AccessDecision:
    """Own journal: read and write by the author only."""
    if _is_self(caller_id, owner_id):
        return AccessDecision.allow(ResourceType.JOURNAL)
    return AccessDecision.deny(ResourceType.JOURNAL, "not_owner")


def can_read_shared_journals(role: Optional[str]) -> AccessDecision:
    """A client's shared journals: therapists only."""
    return _require(ResourceType.JOURNAL, role, Role.THERAPIST)


# =============================================================================
# PROMPTS AND RESOURCES
# =============================================================================

def _can_read_scoped_content(
    resource: ResourceType,
    role: Optional[str],
    caller_id: str,
    scoped_client_id: Optional[str],
) -> AccessDecision:
    if role_rank(role) == 0:
        return AccessDecision.deny(resource, "unknown_role")
    if scoped_client_id is None or is_therapist_role(role) or _is_self(caller_id, scoped_client_id):
        return AccessDecision.allow(resource)
    return AccessDecision.deny(resource, "scoped_to_other_client")


def can_read_prompt(role: Optional[str], caller_id: str, scoped_client_id: Optional[str]) -> AccessDecision:
    """Global prompts: anyone. Client-scoped prompts: that client or a therapist."""
    return _can_read_scoped_content(ResourceType.PROMPT, role, caller_id, scoped_client_id)


def can_read_resource(role: Optional[str], caller_id: str, scoped_client_id: Optional[str]) -> AccessDecision:
    """Global resources: anyone. Client-scoped resources: that client or a therapist."""
    return _can_read_scoped_content(ResourceType.RESOURCE, role, caller_id, scoped_client_id)


def can_view_all_content(role: Optional[str]) -> bool:
    """Therapists see every prompt and resource, including other clients' scoped ones."""
    return is_therapist_role(role)


def can_write_prompt(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.PROMPT, role, Role.THERAPIST)


def can_write_resource(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.RESOURCE, role, Role.THERAPIST)


# =============================================================================
# HOMEWORK AND REMINDERS
# =============================================================================

def _can_read_assignment(
    resource: ResourceType,
    role: Optional[str],
    caller_id: str,
    owner_id: Optional[str],
) -> AccessDecision:
    if _is_self(caller_id, owner_id) or is_office_admin_role(role):
        return AccessDecision.allow(resource)
    return AccessDecision.deny(resource, "not_owner")


def can_read_homework(role: Optional[str], caller_id: str, owner_id: str) -> AccessDecision:
    """Owner, or office_admin and above."""
    return _can_read_assignment(ResourceType.HOMEWORK, role, caller_id, owner_id)


def can_manage_homework(role: Optional[str]) -> AccessDecision:
    """Create and delete homework: office_admin and above."""
    return _require(ResourceType.HOMEWORK, role, Role.OFFICE_ADMIN)


def can_update_homework_status(role: Optional[str], caller_id: str, owner_id: Optional[str]) -> AccessDecision:
    """Status changes: the assigned client, or office_admin and above."""
    return _can_read_assignment(ResourceType.HOMEWORK, role, caller_id, owner_id)


def can_read_reminder(role: Optional[str], caller_id: str, owner_id: str) -> AccessDecision:
    """Owner, or office_admin and above."""
    return _can_read_assignment(ResourceType.REMINDER, role, caller_id, owner_id)


def can_manage_reminder(role: Optional[str]) -> AccessDecision:
    """Every reminder write: office_admin and above."""
    return _require(ResourceType.REMINDER, role, Role.OFFICE_ADMIN)


def can_view_all_assignments(role: Optional[str]) -> bool:
    """Office staff see homework and reminders for every client."""
    return is_office_admin_role(role)


# =============================================================================
# TREATMENT PLANS
# =============================================================================

def can_read_treatment_plan(role: Optional[str], caller_id: str, plan_client_id: Optional[str]) -> AccessDecision:
    """The owning client, or any therapist."""
    if is_therapist_role(role) or _is_self(caller_id, plan_client_id):
        return AccessDecision.allow(ResourceType.TREATMENT_PLAN)
    return AccessDecision.deny(ResourceType.TREATMENT_PLAN, "not_owner")


def can_view_all_treatment_plans(role: Optional[str]) -> bool:
    """Listing every client's plan: therapists only."""
    return is_therapist_role(role)


def can_read_treatment_goal(role: Optional[str], client_owns_goal: bool) -> AccessDecision:
    """
    Therapists always; a client only when the goal's plan is theirs.

    Args:
        role: Caller's role
        client_owns_goal: Result of the goal -> plan ownership chain for the caller
    """
    if is_therapist_role(role) or client_owns_goal:
        return AccessDecision.allow(ResourceType.TREATMENT_GOAL)
    return AccessDecision.deny(ResourceType.TREATMENT_GOAL, "not_owner")


def can_read_treatment_objective(role: Optional[str], client_owns_objective: bool) -> AccessDecision:
    """
    Therapists always; a client only via objective -> goal -> plan ownership.

    Args:
        role: Caller's role
        client_owns_objective: Result of the ownership chain for the caller
    """
    if is_therapist_role(role) or client_owns_objective:
        return AccessDecision.allow(ResourceType.TREATMENT_OBJECTIVE)
    return AccessDecision.deny(ResourceType.TREATMENT_OBJECTIVE, "not_owner")


def can_access_treatment_progress(role: Optional[str]) -> AccessDecision:
    """Progress notes: therapists only, read and write."""
    return _require(ResourceType.TREATMENT_PROGRESS, role, Role.THERAPIST)


def can_write_treatment(role: Optional[str], resource: ResourceType = ResourceType.TREATMENT_PLAN) -> AccessDecision:
    """Plan, goal and objective writes: therapists only."""
    return _require(resource, role, Role.THERAPIST)


# =============================================================================
# COMPLIANCE
# =============================================================================

def can_read_audit_logs(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.AUDIT_LOG, role, Role.THERAPIST)


def can_read_login_attempts(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.LOGIN_ATTEMPT, role, Role.THERAPIST)


def can_read_access_history(caller_id: str, subject_id: str) -> AccessDecision:
    """A client's access history is visible to that client only."""
    if _is_self(caller_id, subject_id):
        return AccessDecision.allow(ResourceType.ACCESS_HISTORY)
    return AccessDecision.deny(ResourceType.ACCESS_HISTORY, "not_subject")


def can_read_disclosures(role: Optional[str], caller_id: str, client_id: str) -> AccessDecision:
    """Therapists, or the client the disclosures concern."""
    if is_therapist_role(role) or _is_self(caller_id, client_id):
        return AccessDecision.allow(ResourceType.DATA_DISCLOSURE)
    return AccessDecision.deny(ResourceType.DATA_DISCLOSURE, "not_subject")


def can_record_disclosure(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.DATA_DISCLOSURE, role, Role.THERAPIST)


# =============================================================================
# USER ADMINISTRATION
# =============================================================================

def can_list_clients(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.USER, role, Role.OFFICE_ADMIN)


def can_assign_roles(role: Optional[str]) -> AccessDecision:
    return _require(ResourceType.USER, role, Role.THERAPIST)


# =============================================================================
# ENFORCEMENT
# =============================================================================

def enforce(decision: AccessDecision) -> AccessDecision:
    """
    Raise Forbidden on a denied decision.

    The denial reason goes to logs and metrics only; the caller
    always sees the same generic message.

    Raises:
        Forbidden: If the decision is a denial
    """
    track_access_decision(decision.resource_type.value, decision.allowed)
    if not decision.allowed:
        logger.info(
            "access_denied",
            resource_type=decision.resource_type.value,
            reason=decision.reason,
        )
        raise Forbidden()
    return decision
