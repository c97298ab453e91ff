"""Site settings, read from the environment (e.g. BLOG_COLLECTION, ALLOWED_HOSTS)."""

from typing import Annotated, Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # --- Firestore collections ---
    blog_collection: str = Field(default="blog-data", description="Blog posts, comments inline")
    projects_collection: str = Field(default="projects")
    about_collection: str = Field(default="about-me")
    about_doc_id: str = Field(default="jon", description="Profile document in about_collection")
    messages_collection: str = Field(default="messages", description="Contact form submissions")

    # --- Hosts ---
    allowed_hosts: Annotated[List[str], NoDecode] = Field(
        default=["localhost", "127.0.0.1", "testserver"],
        description="Comma-separated in the environment",
    )

    # --- Contact notifications ---
    sendgrid_secret: str = Field(
        default="projects/portfolio-site/secrets/sendgrid-api-key/versions/latest",
        description="Secret Manager version holding the SendGrid API key",
    )
    contact_from_email: str = Field(default="noreply@example.com")
    contact_to_email: str = Field(default="owner@example.com")
    contact_notifications: bool = Field(default=True, description="Email the owner on new contact messages")

    # --- Search ---
    search_debounce_seconds: float = Field(default=0.3, gt=0, le=10)

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def split_hosts(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        return value


settings = Settings()
