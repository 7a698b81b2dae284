"""Endpoint target for a PrusaLink printer."""

import ipaddress

import pydantic

from prusa.link.client import consts


class EndpointTarget(pydantic.BaseModel):
    """Network location of a printer's PrusaLink interface.

    Either a numeric address or a hostname, plus a port. Immutable once created.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    host: str
    port: int = pydantic.Field(default=consts.DEFAULT_PORT, ge=1, le=65535)

    @pydantic.field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        """Reject empty hosts and strip surrounding whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("host must not be empty")
        return v

    @property
    def is_ip_address(self) -> bool:
        """Whether `host` is a numeric IPv4/IPv6 address."""
        try:
            ipaddress.ip_address(self.host)
        except ValueError:
            return False
        return True

    @property
    def host_header(self) -> str:
        """Value for the `Host` request header."""
        host = self.host
        if self.is_ip_address and ipaddress.ip_address(host).version == 6:
            host = f"[{host}]"
        if self.port == consts.DEFAULT_PORT:
            return host
        return f"{host}:{self.port}"

    def __str__(self) -> str:
        return self.host_header
