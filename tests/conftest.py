"""Shared fixtures: an in-memory store, a fixed clock and predictable ids."""

from datetime import datetime
from itertools import count

import pytest

from finledger.audit import AuditLogger
from finledger.config import LedgerSettings
from finledger.engine import LedgerEngine
from finledger.services.storage import InMemorySnapshotStorage

NOW = datetime(2024, 3, 15, 10, 30)


class FixedClock:
    """Clock that returns a settable datetime."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings(tmp_path):
    return LedgerSettings(
        storage_path=tmp_path / "store.json",
        storage_key="finance_app_data_v2",
        default_account_name="Cash / Wallet",
    )


@pytest.fixture
def storage():
    return InMemorySnapshotStorage()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def id_generator():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=1000)


@pytest.fixture
def make_engine(storage, settings, clock, id_generator, audit_logger):
    """Build an engine on the shared store; extra kwargs override the defaults."""

    def _make(**overrides) -> LedgerEngine:
        kwargs = dict(
            storage=storage,
            settings=settings,
            id_generator=id_generator,
            clock=clock,
            audit_logger=audit_logger,
        )
        kwargs.update(overrides)
        return LedgerEngine(**kwargs)

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()
