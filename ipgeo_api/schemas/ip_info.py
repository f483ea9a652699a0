"""IP lookup schemas."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError

# Dotted quad syntax only; octets above 255 are accepted.
IPV4_PATTERN = re.compile(r"([0-9]{1,3}\.){3}[0-9]{1,3}")


class IpLookupQuery(BaseModel):
    """Query parameters for the IP lookup endpoint."""

    model_config = ConfigDict(frozen=True)

    ip: str | None = None

    @field_validator("ip")
    @classmethod
    def check_ip_format(cls, value: str | None) -> str | None:
        if value is not None and not IPV4_PATTERN.fullmatch(value):
            raise PydanticCustomError("ip_format", "Invalid IP address format")
        return value


class IpInfoResponse(BaseModel):
    """Geolocation data as returned by the upstream provider."""

    success: bool = True
    data: dict[str, Any]
