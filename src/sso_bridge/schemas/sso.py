"""Identity provider payloads and handoff grants."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProviderTokens(BaseModel):
    """Token endpoint response. Held server-side only."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str | None = None
    id_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None


class ProviderIdentity(BaseModel):
    """Normalized identity claims, whichever source they came from."""

    model_config = ConfigDict(extra="ignore")

    subject: str | None = None
    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    name: str | None = None

    @property
    def display_name(self) -> str | None:
        """'Given Family' when either part is present, else the full name claim."""
        parts = [
            part.strip() for part in (self.given_name, self.family_name) if part and part.strip()
        ]
        if parts:
            return " ".join(parts)
        if self.name and self.name.strip():
            return self.name.strip()
        return None


class ClaimedHandoff(BaseModel):
    """Snapshot of a handoff code taken at the moment it was consumed."""

    user_id: UUID
    tenant_id: str
    target_path: str
    tokens: ProviderTokens | None = None
