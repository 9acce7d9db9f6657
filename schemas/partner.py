from pydantic import Field

from schemas.base import CamelModel


class WebhookRegister(CamelModel):
    url: str = Field(..., pattern=r"^https?://")
    events: list[str] = Field(default_factory=lambda: ["application.status_changed"])
