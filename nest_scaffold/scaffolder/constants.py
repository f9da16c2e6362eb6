"""Names and values shared by every generated file.

Templates never spell these out themselves.  A guard that reads a metadata
key and the decorator that writes it both render the same field of one
``ProjectConstants`` instance, so renaming the key here changes producer
and consumer together.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_JWT_SECRET = "change-this-secret-before-deploying"

# Values spliced into TypeScript as bare identifiers.
TS_IDENTIFIER = r"^[A-Za-z_$][A-Za-z0-9_$]*$"


class ProjectConstants(BaseModel):
    """Cross-cutting constants for one generation run."""

    model_config = ConfigDict(frozen=True)

    # Signing secret
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_constants_name: str = Field(default="jwtConstants", pattern=TS_IDENTIFIER)
    jwt_expires_in: str = Field(default="24h")

    # Route metadata written by decorators and read by the guard/interceptor
    is_public_const: str = Field(default="IS_PUBLIC_KEY", pattern=TS_IDENTIFIER)
    is_public_key: str = Field(default="isPublic")
    response_message_const: str = Field(default="RESPONSE_MESSAGE_KEY", pattern=TS_IDENTIFIER)
    response_message_key: str = Field(default="response_message")
    default_response_message: str = Field(default="Request successful")

    # HTTP surface of the generated application
    global_prefix: str = Field(default="api/v1")
    docs_path: str = Field(default="api")
    port_env_var: str = Field(default="PORT", pattern=TS_IDENTIFIER)
    default_port: int = Field(default=3000, ge=1, le=65535)
    auth_route_prefix: str = Field(default="auth")
    bcrypt_rounds: int = Field(default=10, ge=4)

    def as_context(self) -> dict[str, Any]:
        """Return the constants as a template context dictionary."""
        return self.model_dump()
