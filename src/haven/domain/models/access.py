"""
Access Decision Domain Model

Result of evaluating an access rule. Denials carry a reason for
logs and metrics only; callers always see the same generic
"access denied" message.
"""

from dataclasses import dataclass

from haven.domain.enums.audit_action import ResourceType


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of a policy check.

    Attributes:
        allowed: Whether the action is permitted
        resource_type: Resource the rule guards
        reason: Short machine-readable reason (for denials)
    """

    allowed: bool
    resource_type: ResourceType
    reason: str = ""

    @classmethod
    def allow(cls, resource_type: ResourceType) -> "AccessDecision":
        """Build an allowed decision."""
        return cls(allowed=True, resource_type=resource_type)

    @classmethod
    def deny(cls, resource_type: ResourceType, reason: str) -> "AccessDecision":
        """Build a denied decision."""
        return cls(allowed=False, resource_type=resource_type, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed
