import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from farmstore.adapters.clock import SystemClock
from farmstore.adapters.dev_email import DevEmailAdapter
from farmstore.adapters.dispatch_gateway import HttpDispatchGateway
from farmstore.adapters.sqlite_db import SQLiteDiscountRepo, SQLiteSubscriberRepo
from farmstore.adapters.token_store import InMemoryProcessedTokenStore
from farmstore.components.newsletter.models import NewsletterConfig
from farmstore.core.ports.email import EmailPort
from farmstore.rules.loader import load_rules
from farmstore.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("FARMSTORE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "farmstore.db")
        self.migrations_dir = str(self.base_dir / "migrations")
        self.rules_path = Path(
            os.environ.get("FARMSTORE_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.base_url = os.environ.get("FARMSTORE_BASE_URL") or None
        self.mail_function_url = os.environ.get("MAIL_FUNCTION_URL") or None
        self.mail_function_key = os.environ.get("MAIL_FUNCTION_KEY") or None


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_newsletter_config(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> NewsletterConfig:
    """Map rules (plus the base URL override) onto the component config."""
    nl = rules.newsletter
    return NewsletterConfig(
        base_url=settings.base_url or nl.base_url,
        confirmation_path=nl.confirmation_path,
        unsubscribe_path=nl.unsubscribe_path,
        site_url=nl.site_url,
        welcome_discount_code=nl.welcome_discount_code,
        welcome_discount_percent=nl.welcome_discount_percent,
        welcome_email_cooldown_seconds=nl.welcome_email_cooldown_seconds,
        confirmation_token_expiry_hours=nl.confirmation_token_expiry_hours,
        default_language=nl.default_language,
        sender_email=rules.dispatch.default_sender,
        sender_name=rules.dispatch.sender_name,
        reply_to_email=rules.dispatch.reply_to,
        allow_simulated_dispatch=nl.allow_simulated_dispatch,
    )


# --- Repos ---
def get_subscriber_repo(settings: Settings = Depends(get_settings)) -> SQLiteSubscriberRepo:
    return SQLiteSubscriberRepo(settings.db_path)


def get_discount_repo(settings: Settings = Depends(get_settings)) -> SQLiteDiscountRepo:
    return SQLiteDiscountRepo(settings.db_path)


# --- Email ---
_dev_email_instance: DevEmailAdapter | None = None
_gateway_instance: HttpDispatchGateway | None = None


def get_dev_email_adapter() -> DevEmailAdapter:
    """Get dev email adapter singleton."""
    global _dev_email_instance
    if _dev_email_instance is None:
        _dev_email_instance = DevEmailAdapter()
    return _dev_email_instance


def get_email_sender(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> EmailPort:
    """
    HTTP gateway when MAIL_FUNCTION_URL is set, otherwise the dev adapter.
    """
    global _gateway_instance
    if not settings.mail_function_url:
        return get_dev_email_adapter()
    if _gateway_instance is None:
        _gateway_instance = HttpDispatchGateway(
            settings.mail_function_url,
            settings.mail_function_key,
            default_sender=rules.dispatch.default_sender,
            timeout=rules.dispatch.timeout_seconds,
        )
    return _gateway_instance


def close_email_gateway() -> None:
    global _gateway_instance
    if _gateway_instance is not None:
        _gateway_instance.close()
        _gateway_instance = None


# --- Process-local state ---
_token_store_instance: InMemoryProcessedTokenStore | None = None


def get_token_store() -> InMemoryProcessedTokenStore:
    """Get processed-token store singleton."""
    global _token_store_instance
    if _token_store_instance is None:
        _token_store_instance = InMemoryProcessedTokenStore()
    return _token_store_instance


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance
