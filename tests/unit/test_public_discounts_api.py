"""
Unit tests for public discount API endpoints.

Uses the seeded codes from migrations: DOBRODOSLI10 (10 %, open-ended)
and BREZPOSTNINE (3.90 EUR off orders from 20.00 EUR, 2025-04-26 to
2025-07-25, shown in the banner).
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from farmstore.adapters.sqlite_db import SQLiteDiscountRepo
from farmstore.api.deps import get_clock, get_discount_repo, get_rules
from farmstore.api.main import app
from farmstore.components.discounts import DiscountCode, DiscountType
from farmstore.rules.models import DiscountRules


@pytest.fixture
def client(discount_repo, clock, rules):
    app.dependency_overrides[get_discount_repo] = lambda: discount_repo
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rules] = lambda: rules

    yield TestClient(app)

    app.dependency_overrides.clear()


def _validate(client: TestClient, code: str, order_total: str):
    return client.post(
        "/api/public/discounts/validate",
        json={"code": code, "order_total": order_total},
    )


class TestValidateEndpoint:
    """Tests for POST /api/public/discounts/validate."""

    def test_fixed_code_valid(self, client) -> None:
        response = _validate(client, "BREZPOSTNINE", "25.00")

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["discount_amount"] == "3.90"
        assert data["discount_type"] == "fixed"
        assert data["code"] == "BREZPOSTNINE"
        assert data["currency"] == "EUR"
        assert data["error_code"] is None

    def test_code_is_case_insensitive(self, client) -> None:
        data = _validate(client, "  brezPostnine ", "25.00").json()

        assert data["valid"] is True
        assert data["code"] == "BREZPOSTNINE"

    def test_percentage_code(self, client) -> None:
        data = _validate(client, "DOBRODOSLI10", "45.50").json()

        assert data["valid"] is True
        assert data["discount_amount"] == "4.55"
        assert data["discount_type"] == "percentage"

    def test_below_minimum(self, client) -> None:
        data = _validate(client, "BREZPOSTNINE", "19.99").json()

        assert data["valid"] is False
        assert data["error_code"] == "BELOW_MINIMUM"
        assert data["discount_amount"] == "0.00"
        assert "20.00" in data["message"]

    def test_exactly_minimum(self, client) -> None:
        data = _validate(client, "BREZPOSTNINE", "20.00").json()

        assert data["valid"] is True

    def test_unknown_code(self, client) -> None:
        data = _validate(client, "NOSUCHCODE", "50.00").json()

        assert data["valid"] is False
        assert data["error_code"] == "INVALID_CODE"
        assert data["discount_type"] is None

    def test_expired_code(self, client, clock) -> None:
        clock.now = datetime(2025, 7, 25, 0, 0, 1, tzinfo=UTC)

        data = _validate(client, "BREZPOSTNINE", "25.00").json()

        assert data["valid"] is False
        assert data["error_code"] == "EXPIRED_CODE"

    def test_negative_total_rejected(self, client) -> None:
        response = _validate(client, "BREZPOSTNINE", "-1")

        assert response.status_code == 422

    def test_validate_does_not_count_usage(self, client, discount_repo) -> None:
        _validate(client, "BREZPOSTNINE", "25.00")

        assert discount_repo.get_by_code("BREZPOSTNINE").current_uses == 0


class TestApplyEndpoint:
    """Tests for POST /api/public/discounts/apply."""

    def test_apply_counts_each_redemption(self, client) -> None:
        first = client.post("/api/public/discounts/apply", json={"code": "brezpostnine"})
        second = client.post("/api/public/discounts/apply", json={"code": "BREZPOSTNINE"})

        assert first.status_code == 200
        assert first.json()["current_uses"] == 1
        assert second.json()["current_uses"] == 2
        assert second.json()["code"] == "BREZPOSTNINE"

    def test_apply_unknown_code(self, client) -> None:
        response = client.post("/api/public/discounts/apply", json={"code": "NOSUCHCODE"})

        assert response.status_code == 400

    def test_apply_over_cap_conflicts(self, client, discount_repo) -> None:
        discount_repo.save(
            DiscountCode(
                code="ENKRAT",
                discount_type=DiscountType.PERCENTAGE,
                value=Decimal("5"),
                valid_from=datetime(2025, 1, 1, tzinfo=UTC),
                max_uses=1,
            )
        )

        first = client.post("/api/public/discounts/apply", json={"code": "ENKRAT"})
        assert first.status_code == 200
        response = client.post("/api/public/discounts/apply", json={"code": "ENKRAT"})

        assert response.status_code == 409
        assert discount_repo.get_by_code("ENKRAT").current_uses == 1


class TestBannerEndpoint:
    """Tests for GET /api/public/discounts/banner."""

    def test_banner_inside_window(self, client) -> None:
        response = client.get("/api/public/discounts/banner")

        assert response.status_code == 200
        data = response.json()
        assert data["code"] == "BREZPOSTNINE"
        assert data["value"] == "3.90"
        assert data["min_order_amount"] == "20.00"

    def test_banner_outside_window(self, client, clock) -> None:
        clock.now = datetime(2025, 8, 1, tzinfo=UTC)

        response = client.get("/api/public/discounts/banner")

        assert response.status_code == 200
        assert response.json() is None

    def test_banner_disabled_by_rules(self, client, rules) -> None:
        disabled = rules.model_copy(update={"discounts": DiscountRules(banner_enabled=False)})
        app.dependency_overrides[get_rules] = lambda: disabled

        response = client.get("/api/public/discounts/banner")

        assert response.json() is None


class TestStorageUnavailable:
    """A database without the discount tables answers 502, never 500."""

    @pytest.fixture
    def broken_client(self, client, tmp_path):
        unmigrated = SQLiteDiscountRepo(str(tmp_path / "empty.db"))
        app.dependency_overrides[get_discount_repo] = lambda: unmigrated
        return client

    def test_validate(self, broken_client) -> None:
        response = _validate(broken_client, "BREZPOSTNINE", "25.00")

        assert response.status_code == 502
        assert response.json()["detail"] == "Error validating discount code"

    def test_apply(self, broken_client) -> None:
        response = broken_client.post(
            "/api/public/discounts/apply", json={"code": "BREZPOSTNINE"}
        )

        assert response.status_code == 502

    def test_banner_is_empty(self, broken_client) -> None:
        response = broken_client.get("/api/public/discounts/banner")

        assert response.status_code == 200
        assert response.json() is None
