"""Named request schemas and payload validation.

``validate_payload`` checks a raw payload against one of the named schemas
and reports every failing field at once, in declaration order.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pydantic
from pydantic import BaseModel

from ipgeo_api.schemas.auth import UserLogin, UserRegister
from ipgeo_api.schemas.ip_info import IpLookupQuery

SCHEMAS: dict[str, type[BaseModel]] = {
    "login": UserLogin,
    "register": UserRegister,
    "ipLookup": IpLookupQuery,
}

# Replacement messages for pydantic's built-in error types
BUILTIN_MESSAGES = {
    "missing": "Required",
    "string_type": "Expected string",
}


@dataclass(frozen=True)
class ValidationResult:
    """Either the validated model or the list of violations, never both."""

    data: BaseModel | None = None
    errors: list[dict[str, str]] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.data is not None


def _violations(exc: pydantic.ValidationError) -> list[dict[str, str]]:
    violations = []
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        violations.append(
            {
                "field": ".".join(str(part) for part in loc),
                "message": BUILTIN_MESSAGES.get(error["type"], error["msg"]),
            }
        )
    return violations


def validate_payload(schema_name: str, payload: Any) -> ValidationResult:
    """Validate a payload against a named schema.

    Args:
        schema_name: One of ``login``, ``register`` or ``ipLookup``
        payload: Decoded request body or query mapping

    Returns:
        ValidationResult holding a new validated model or the violations

    Raises:
        KeyError: If the schema name is unknown
    """
    schema = SCHEMAS[schema_name]

    if not isinstance(payload, Mapping):
        return ValidationResult(errors=[{"field": "body", "message": "Expected object"}])

    try:
        return ValidationResult(data=schema.model_validate(dict(payload)))
    except pydantic.ValidationError as e:
        return ValidationResult(errors=_violations(e))
