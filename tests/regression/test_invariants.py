"""
End-to-end invariants over the newsletter and discount flows.

Runs the components against the SQLite repositories with the dev email
adapter, so the conditional UPDATEs are what keeps these properties.
"""

import re
import threading
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from html.parser import HTMLParser

import pytest

from farmstore.adapters.sqlite_db import SQLiteDiscountRepo, SQLiteSubscriberRepo
from farmstore.components.discounts import (
    BELOW_MINIMUM,
    EXPIRED_CODE,
    USAGE_EXCEEDED,
    ApplyDiscountInput,
    DiscountCode,
    DiscountType,
    ValidateDiscountInput,
    run_apply,
    run_validate,
)
from farmstore.components.newsletter import (
    ConfirmInput,
    NewsletterConfig,
    SubscriberState,
    SubscribeInput,
    UnsubscribeInput,
    generate_token,
    run_confirm,
    run_subscribe,
    run_unsubscribe,
)
from farmstore.core.ports.email import EmailKind

CONFIG = NewsletterConfig(base_url="https://kmetija-marosa.si")


class _LinkCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.hrefs: list[str] = []

    def handle_starttag(self, tag, attrs):
        if tag == "a":
            self.hrefs.extend(v for k, v in attrs if k == "href" and v)


def _hrefs(html: str) -> list[str]:
    parser = _LinkCollector()
    parser.feed(html)
    return parser.hrefs


def _subscribe_jane(subscriber_repo, email_adapter, clock, language="en"):
    return run_subscribe(
        SubscribeInput(email="jane@example.com", name="Jane Doe", language=language),
        subscriber_repo,
        email_sender=email_adapter,
        clock=clock,
        config=CONFIG,
    )


# --- Tokens ---


def test_tokens_are_64_hex_and_distinct():
    tokens = {generate_token() for _ in range(500)}

    assert len(tokens) == 500
    assert all(re.fullmatch(r"[0-9a-f]{64}", t) for t in tokens)


# --- Newsletter lifecycle ---


def test_jane_subscribes_and_confirms(subscriber_repo, email_adapter, token_store, clock):
    result = _subscribe_jane(subscriber_repo, email_adapter, clock)
    assert result.success is True

    subscriber = subscriber_repo.get_by_email("jane@example.com")
    assert subscriber.state == SubscriberState.PENDING
    assert subscriber.confirmation_token != subscriber.unsubscribe_token

    confirmation = email_adapter.get_last_email()
    assert confirmation.kind == EmailKind.CONFIRMATION
    expected_url = (
        "https://kmetija-marosa.si/confirm-subscription"
        f"?token={subscriber.confirmation_token}&lang=en"
    )
    assert expected_url in _hrefs(confirmation.body_html)
    assert expected_url in confirmation.body_text.splitlines()
    assert "Hello, Jane!" in confirmation.body_text

    confirmed = run_confirm(
        ConfirmInput(token=subscriber.confirmation_token),
        subscriber_repo,
        token_store=token_store,
        email_sender=email_adapter,
        clock=clock,
        config=CONFIG,
    )

    assert confirmed.success is True
    assert confirmed.discount_code == "DOBRODOSLI10"
    welcome = email_adapter.get_emails_of_kind(EmailKind.WELCOME)
    assert len(welcome) == 1
    assert welcome[0].discount_code == "DOBRODOSLI10"
    stored = subscriber_repo.get_by_email("jane@example.com")
    assert stored.state == SubscriberState.CONFIRMED
    assert stored.confirmed_at == clock.now
    assert stored.discount_used == "DOBRODOSLI10"
    assert len(token_store) == 0


def test_double_confirm_sends_one_welcome(subscriber_repo, email_adapter, token_store, clock):
    _subscribe_jane(subscriber_repo, email_adapter, clock)
    token = subscriber_repo.get_by_email("jane@example.com").confirmation_token

    outputs = [
        run_confirm(
            ConfirmInput(token=token),
            subscriber_repo,
            token_store=token_store,
            email_sender=email_adapter,
            clock=clock,
            config=CONFIG,
        )
        for _ in range(2)
    ]

    assert all(o.success for o in outputs)
    assert outputs[1].already_confirmed is True
    assert len(email_adapter.get_emails_of_kind(EmailKind.WELCOME)) == 1


def test_concurrent_confirm_sends_one_welcome(db_path, email_adapter, token_store, clock):
    repo = SQLiteSubscriberRepo(db_path)
    _subscribe_jane(repo, email_adapter, clock)
    token = repo.get_by_email("jane@example.com").confirmation_token
    barrier = threading.Barrier(6)
    outputs = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        out = run_confirm(
            ConfirmInput(token=token),
            SQLiteSubscriberRepo(db_path),
            token_store=token_store,
            email_sender=email_adapter,
            clock=clock,
            config=CONFIG,
        )
        with lock:
            outputs.append(out)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(outputs) == 6
    assert all(o.success for o in outputs)
    assert sum(1 for o in outputs if not o.already_confirmed) == 1
    assert len(email_adapter.get_emails_of_kind(EmailKind.WELCOME)) == 1


def test_reconfirm_after_cooldown_resends(subscriber_repo, email_adapter, token_store, clock):
    _subscribe_jane(subscriber_repo, email_adapter, clock)
    token = subscriber_repo.get_by_email("jane@example.com").confirmation_token

    def confirm():
        return run_confirm(
            ConfirmInput(token=token),
            subscriber_repo,
            token_store=token_store,
            email_sender=email_adapter,
            clock=clock,
            config=CONFIG,
        )

    confirm()
    clock.advance(CONFIG.welcome_email_cooldown_seconds + 1)
    again = confirm()

    assert again.already_confirmed is True
    assert again.welcome_email_sent is True
    assert again.discount_code == "DOBRODOSLI10"
    assert len(email_adapter.get_emails_of_kind(EmailKind.WELCOME)) == 2


def test_unsubscribe_is_terminal(subscriber_repo, email_adapter, token_store, clock):
    _subscribe_jane(subscriber_repo, email_adapter, clock)
    subscriber = subscriber_repo.get_by_email("jane@example.com")

    first = run_unsubscribe(
        UnsubscribeInput(token=subscriber.unsubscribe_token), subscriber_repo, clock=clock
    )
    second = run_unsubscribe(
        UnsubscribeInput(token=subscriber.unsubscribe_token), subscriber_repo, clock=clock
    )
    confirm = run_confirm(
        ConfirmInput(token=subscriber.confirmation_token),
        subscriber_repo,
        token_store=token_store,
        email_sender=email_adapter,
        clock=clock,
        config=CONFIG,
    )

    assert first.success and not first.already_unsubscribed
    assert second.success and second.already_unsubscribed
    assert confirm.success is False
    assert subscriber_repo.get_by_email("jane@example.com").state == SubscriberState.INACTIVE


def test_duplicate_subscribe_keeps_single_record(subscriber_repo, email_adapter, clock):
    _subscribe_jane(subscriber_repo, email_adapter, clock)

    again = _subscribe_jane(subscriber_repo, email_adapter, clock)

    assert again.success is False
    assert subscriber_repo.count_by_state(SubscriberState.PENDING) == 1
    assert email_adapter.email_count == 1


# --- Discounts ---


def test_free_shipping_on_qualifying_order(discount_repo, clock):
    out = run_validate(
        ValidateDiscountInput("BREZPOSTNINE", Decimal("25.00")), discount_repo, clock=clock
    )

    assert out.valid is True
    assert out.discount_amount == Decimal("3.90")


@pytest.mark.parametrize(
    "total, valid",
    [(Decimal("19.99"), False), (Decimal("20.00"), True), (Decimal("20.01"), True)],
)
def test_minimum_order_boundary(discount_repo, clock, total, valid):
    out = run_validate(ValidateDiscountInput("BREZPOSTNINE", total), discount_repo, clock=clock)

    assert out.valid is valid
    if not valid:
        assert out.errors[0].code == BELOW_MINIMUM


def test_expiry_boundary(discount_repo, clock):
    end = datetime(2025, 6, 30, 23, 59, 59, tzinfo=UTC)
    discount_repo.save(
        DiscountCode(
            code="JUNIJ",
            discount_type=DiscountType.PERCENTAGE,
            value=Decimal("15"),
            valid_from=datetime(2025, 6, 1, tzinfo=UTC),
            valid_until=end,
        )
    )

    clock.now = end
    at_end = run_validate(ValidateDiscountInput("JUNIJ", Decimal("10")), discount_repo, clock=clock)
    clock.now = end + timedelta(seconds=1)
    after = run_validate(ValidateDiscountInput("JUNIJ", Decimal("10")), discount_repo, clock=clock)

    assert at_end.valid is True
    assert at_end.discount_amount == Decimal("1.50")
    assert after.valid is False
    assert after.errors[0].code == EXPIRED_CODE


def _apply_concurrently(db_path: str, code: str, workers: int):
    barrier = threading.Barrier(workers)
    outputs = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        out = run_apply(ApplyDiscountInput(code), SQLiteDiscountRepo(db_path))
        with lock:
            outputs.append(out)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outputs


def test_concurrent_apply_counts_both(db_path):
    outputs = _apply_concurrently(db_path, "BREZPOSTNINE", 2)

    assert all(o.success for o in outputs)
    assert SQLiteDiscountRepo(db_path).get_by_code("BREZPOSTNINE").current_uses == 2


def test_usage_cap_holds_under_contention(db_path):
    SQLiteDiscountRepo(db_path).save(
        DiscountCode(
            code="ZADNJI",
            discount_type=DiscountType.FIXED,
            value=Decimal("5.00"),
            valid_from=datetime(2025, 1, 1, tzinfo=UTC),
            max_uses=1,
        )
    )

    outputs = _apply_concurrently(db_path, "ZADNJI", 8)

    winners = [o for o in outputs if o.success]
    losers = [o for o in outputs if not o.success]
    assert len(winners) == 1
    assert all(o.errors[0].code == USAGE_EXCEEDED for o in losers)
    assert SQLiteDiscountRepo(db_path).get_by_code("ZADNJI").current_uses == 1
