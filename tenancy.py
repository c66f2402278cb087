"""Tenant (agency) resolution for the signed-in principal.

Every store operation receives a ``TenantContext`` explicitly; there is no
process-wide "current user" here. The session manager builds one from the
persisted principal.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

DEFAULT_AGENCY_ID = "default"


class NoTenantError(RuntimeError):
    """Raised when a write is attempted without a resolvable agency."""

    def __init__(self, message="No Agency ID"):
        super().__init__(message)


def resolve_agency_id(principal: Optional[Mapping[str, Any]]) -> Optional[str]:
    if principal is None:
        return None
    agency_id = principal.get("agencyId") or principal.get("id") or DEFAULT_AGENCY_ID
    return str(agency_id)


@dataclass(frozen=True)
class TenantContext:
    principal: Optional[Mapping[str, Any]] = field(default=None)

    @classmethod
    def anonymous(cls):
        return cls(principal=None)

    @property
    def agency_id(self) -> Optional[str]:
        return resolve_agency_id(self.principal)

    def require_agency_id(self) -> str:
        agency_id = self.agency_id
        if not agency_id:
            raise NoTenantError()
        return agency_id
