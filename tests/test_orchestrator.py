"""Integration tests for SubscriptionService over the in-memory store."""

import asyncio
import logging

import pytest
import structlog
from datetime import date
from decimal import Decimal

from subtracker.audit import AuditLogger, configure_logging
from subtracker.models.audit import AuditEventType
from subtracker.models.subscription import (
    PrecomputedNotification,
    RenewalNotice,
    RenewalType,
    Subscription,
)
from subtracker.models.validation import SubscriptionForm
from subtracker.orchestrator import SubscriptionService, create_app_components
from subtracker.services.store import (
    InMemoryAuditStorage,
    InMemorySubscriptionStore,
    StoreError,
    SubscriptionStoreInterface,
)

REFERENCE = date(2024, 6, 10)


def netflix_form(**overrides) -> SubscriptionForm:
    fields = {
        "name": "Netflix",
        "price": "9.99",
        "renewal_type": "monthly",
        "start_date": "2024-01-15",
        "category": "Streaming",
    }
    fields.update(overrides)
    return SubscriptionForm(**fields)


class FailingStore(SubscriptionStoreInterface):
    """Store whose every call fails."""

    async def list_subscriptions(self):
        raise StoreError("store down")

    async def create_subscription(self, draft):
        raise StoreError("store down")

    async def update_subscription(self, subscription_id, draft):
        raise StoreError("store down")

    async def delete_subscription(self, subscription_id):
        raise StoreError("store down")


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def service(audit_storage):
    return SubscriptionService(
        store=InMemorySubscriptionStore(),
        audit_logger=AuditLogger(audit_storage),
    )


def event_types(audit_storage) -> list[AuditEventType]:
    events = asyncio.run(audit_storage.get_recent_events())
    return [e.event_type for e in events]


class TestSave:
    def test_create_then_load(self, service, audit_storage):
        outcome = asyncio.run(service.save(netflix_form()))
        assert outcome.saved is True
        assert outcome.subscription.name == "Netflix"

        subs = asyncio.run(service.load())
        assert [s.name for s in subs] == ["Netflix"]
        assert AuditEventType.SUBSCRIPTION_CREATED in event_types(audit_storage)

    def test_update_existing(self, service, audit_storage):
        created = asyncio.run(service.save(netflix_form())).subscription
        outcome = asyncio.run(service.save(
            netflix_form(price="12.50"),
            editing_id=created.id,
            existing=[created],
        ))
        assert outcome.saved is True
        assert outcome.validation.warnings == []

        subs = asyncio.run(service.load())
        assert len(subs) == 1
        assert subs[0].price == Decimal("12.50")
        assert AuditEventType.SUBSCRIPTION_UPDATED in event_types(audit_storage)

    def test_invalid_form_is_not_saved(self, service, audit_storage):
        outcome = asyncio.run(service.save(netflix_form(price="")))
        assert outcome.saved is False
        assert outcome.validation.has_errors is True
        assert asyncio.run(service.load()) == []
        assert AuditEventType.VALIDATION_FAILED in event_types(audit_storage)

    def test_overlong_category_is_reported_not_raised(self, service, audit_storage):
        outcome = asyncio.run(service.save(netflix_form(category="c" * 101)))
        assert outcome.saved is False
        assert outcome.validation.issues[0].issue_type == "too_long"
        assert asyncio.run(service.load()) == []
        assert AuditEventType.VALIDATION_FAILED in event_types(audit_storage)

    def test_store_failure_is_audited_and_raised(self, audit_storage):
        service = SubscriptionService(
            store=FailingStore(),
            audit_logger=AuditLogger(audit_storage),
        )
        with pytest.raises(StoreError):
            asyncio.run(service.save(netflix_form()))
        assert AuditEventType.STORE_ERROR in event_types(audit_storage)


class TestLoadAndDelete:
    def test_load_failure_is_audited(self, audit_storage):
        service = SubscriptionService(
            store=FailingStore(),
            audit_logger=AuditLogger(audit_storage),
        )
        with pytest.raises(StoreError):
            asyncio.run(service.load())
        assert event_types(audit_storage) == [AuditEventType.STORE_ERROR]

    def test_unexpected_failure_is_audited_as_system_error(self, audit_storage):
        class BrokenStore(FailingStore):
            async def list_subscriptions(self):
                raise RuntimeError("boom")

        service = SubscriptionService(
            store=BrokenStore(),
            audit_logger=AuditLogger(audit_storage),
        )
        with pytest.raises(RuntimeError):
            asyncio.run(service.load())
        assert event_types(audit_storage) == [AuditEventType.SYSTEM_ERROR]

    def test_delete(self, service, audit_storage):
        created = asyncio.run(service.save(netflix_form())).subscription
        assert asyncio.run(service.delete(created.id)) is True
        assert asyncio.run(service.load()) == []
        assert AuditEventType.SUBSCRIPTION_DELETED in event_types(audit_storage)

    def test_delete_unknown_returns_false(self, service):
        assert asyncio.run(service.delete("missing")) is False


class TestDashboard:
    def test_totals_and_upcoming(self, service):
        subs = [
            Subscription(id="1", name="Netflix", price=Decimal("9.99"),
                         renewal_type=RenewalType.MONTHLY, start_date=date(2024, 1, 15)),
            Subscription(id="2", name="Spotify", price=Decimal("5.01"),
                         renewal_type=RenewalType.MONTHLY, start_date=date(2024, 1, 12)),
            Subscription(id="3", name="Domain", price=Decimal("15.00"),
                         renewal_type=RenewalType.YEARLY, start_date=date(2023, 3, 1)),
            Subscription(id="4", name="Gift", price=None,
                         renewal_type=RenewalType.MONTHLY, start_date=date(2024, 1, 30)),
        ]
        summary = asyncio.run(service.dashboard(subs, REFERENCE))

        assert summary.monthly_total == Decimal("15.00")
        assert summary.yearly_total == Decimal("15.00")
        assert [u.subscription.id for u in summary.upcoming] == ["1", "2"]
        assert summary.notification_count == 2
        assert summary.urgent_count == 1

    def test_precomputed_notice_is_used(self, service):
        notice = RenewalNotice(urgent=False, days_until=25)
        sub = Subscription(
            id="1",
            name="Hosting",
            renewal_type=RenewalType.MONTHLY,
            start_date=date(2024, 1, 1),
            notification=PrecomputedNotification(notice=notice),
        )
        summary = asyncio.run(service.dashboard([sub], REFERENCE))
        assert summary.upcoming[0].notice == notice

    def test_empty(self, service):
        summary = asyncio.run(service.dashboard([], REFERENCE))
        assert summary.monthly_total == Decimal("0")
        assert summary.notification_count == 0


class TestConfigureLogging:
    def test_reconfigure_applies_new_level(self):
        try:
            configure_logging("DEBUG")
            assert logging.getLogger().level == logging.DEBUG
            assert structlog.get_config()["cache_logger_on_first_use"] is False
        finally:
            configure_logging()


class TestCreateAppComponents:
    def test_in_memory_when_storage_disabled(self):
        service, store = create_app_components(use_storage=False)
        assert isinstance(store, InMemorySubscriptionStore)
        assert isinstance(service, SubscriptionService)

    def test_falls_back_to_memory_without_store_url(self, monkeypatch):
        from subtracker.config import get_settings

        monkeypatch.delenv("STORE_API_BASE_URL", raising=False)
        get_settings.cache_clear()
        _, store = create_app_components(use_storage=True)
        assert isinstance(store, InMemorySubscriptionStore)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
