"""Authentication schemas for JWT tokens and user context."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserContext(BaseModel):
    """Authenticated user context extracted from a Supabase JWT.

    role here is the Postgres role claim ("authenticated"), not the
    marketplace role; that one lives on the profile and is resolved into an
    Actor by the get_actor dependency.
    """

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(description="Unique identifier for the user (from JWT sub claim)")
    email: str | None = Field(default=None, description="User's email address if available")
    role: str | None = Field(default=None, description="JWT role claim")


class TokenPayload(BaseModel):
    """JWT token payload structure for Supabase tokens."""

    model_config = ConfigDict(from_attributes=True)

    sub: str = Field(description="Subject - the user's UUID")
    email: str | None = Field(default=None, description="User's email address")
    role: str | None = Field(default=None, description="User's role")
    exp: int = Field(description="Expiration timestamp (Unix epoch)")
    iat: int = Field(description="Issued at timestamp (Unix epoch)")
    aud: str | None = Field(default=None, description="Audience - intended recipient")
    iss: str | None = Field(default=None, description="Issuer - token issuer URL")

    def to_user_context(self) -> UserContext:
        """Convert token payload to UserContext."""
        return UserContext(
            user_id=UUID(self.sub),
            email=self.email,
            role=self.role,
        )


class AuthenticatedResponse(BaseModel):
    """Response for the authenticated health check."""

    model_config = ConfigDict(from_attributes=True)

    authenticated: bool = Field(default=True, description="Authentication status")
    user_id: str = Field(description="Authenticated user ID")
    email: str | None = Field(default=None, description="User email if available")
    role: str | None = Field(default=None, description="Marketplace role resolved from the profile")
