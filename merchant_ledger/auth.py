"""Request-scoped capability checks.

Field exposure is gated by an external authorizer answering
``allowed(role, field_name)``. The ledger never resolves roles itself; a
``RequestContext`` carrying the caller's role and authorizer is handed to
every service call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol

from pydantic import BaseModel

from merchant_ledger.config import settings
from merchant_ledger.errors import PermissionDeniedError
from merchant_ledger.utils.logging import AuditLogger, get_logger


logger = get_logger("auth", settings.log_level)


class Role(str, Enum):
    ADMIN = "admin"
    READER = "reader"


class FieldAuthorizer(Protocol):
    def allowed(self, role: Role, field_name: str) -> bool:
        """Whether ``role`` may see or call ``field_name`` (e.g. ``Merchant.tax_id``)."""


_EVERYONE = frozenset({Role.ADMIN, Role.READER})
_ADMINS = frozenset({Role.ADMIN})


class RoleFieldPolicy:
    """Table-driven authorizer: field name -> roles allowed.

    Fields missing from the table fall back to ``<Type>.*`` and are denied
    when neither is listed.
    """

    DEFAULT_RULES: dict[str, frozenset[Role]] = {
        "Query.merchant": _EVERYONE,
        "Query.transactions": _EVERYONE,
        "Query.settlementTransactions": _EVERYONE,
        "Merchant.*": _EVERYONE,
        "Merchant.tax_id": _ADMINS,
        "Transaction.*": _EVERYONE,
    }

    def __init__(self, rules: Mapping[str, frozenset[Role]] | None = None):
        self.rules = dict(self.DEFAULT_RULES if rules is None else rules)

    def allowed(self, role: Role, field_name: str) -> bool:
        roles = self.rules.get(field_name)
        if roles is None:
            type_name = field_name.split(".", 1)[0]
            roles = self.rules.get(f"{type_name}.*", frozenset())
        return role in roles


@dataclass
class RequestContext:
    """Everything a single request knows about its caller."""

    role: Role
    user_id: str | None = None
    authorizer: FieldAuthorizer = field(default_factory=RoleFieldPolicy)
    audit: AuditLogger | None = None

    def allowed(self, field_name: str) -> bool:
        return self.authorizer.allowed(self.role, field_name)

    def require(self, field_name: str) -> None:
        """Raise PermissionDeniedError unless the role may use ``field_name``."""
        if self.allowed(field_name):
            return
        logger.warning(f"Role {self.role.value} denied on {field_name}")
        if self.audit is not None:
            self.audit.log_access_denied(self.role.value, field_name)
        raise PermissionDeniedError(f"Role '{self.role.value}' may not access {field_name}")

    def project(self, model: BaseModel) -> dict[str, Any]:
        """Dump ``model`` keeping only the fields this role may see."""
        type_name = type(model).__name__
        data = model.model_dump(mode="json")
        return {
            name: value
            for name, value in data.items()
            if self.allowed(f"{type_name}.{name}")
        }
