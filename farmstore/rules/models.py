from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class NewsletterRules(BaseModel):
    base_url: str
    confirmation_path: str = "/confirm-subscription"
    unsubscribe_path: str = "/unsubscribe"
    site_url: str
    welcome_discount_code: str
    welcome_discount_percent: Decimal | None = Field(default=None, gt=0, le=100)
    welcome_email_cooldown_seconds: int = Field(ge=0)
    confirmation_token_expiry_hours: int | None = Field(default=None, gt=0)
    default_language: str = "sl"
    supported_languages: list[str]
    allow_simulated_dispatch: bool = False

    @field_validator("confirmation_path", "unsubscribe_path")
    @classmethod
    def path_starts_with_slash(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("path must start with '/'")
        return v

    @field_validator("welcome_discount_code")
    @classmethod
    def code_uppercase(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def default_language_supported(self) -> "NewsletterRules":
        if self.default_language not in self.supported_languages:
            raise ValueError(
                f"default_language '{self.default_language}' not in supported_languages"
            )
        return self


class DispatchRules(BaseModel):
    default_sender: str
    sender_name: str | None = None
    reply_to: str | None = None
    timeout_seconds: float = Field(default=10.0, gt=0)


class DiscountRules(BaseModel):
    currency: str = "EUR"
    banner_enabled: bool = True


class Rules(BaseModel):
    project: ProjectRules
    newsletter: NewsletterRules
    dispatch: DispatchRules
    discounts: DiscountRules
