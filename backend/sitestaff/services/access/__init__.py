# Access Services Package
# Tenant membership checks for employee records

from sitestaff.services.access.gate import AccessControlGate, AccessDecision, AccessOperation

__all__ = [
    "AccessControlGate",
    "AccessDecision",
    "AccessOperation",
]
