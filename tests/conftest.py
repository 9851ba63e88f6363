from typing import Generator

import pytest

from config import config
from domain.ledger import AccountLedger
from domain.router import TransactionRouter


@pytest.fixture(scope="function")
def ledger() -> AccountLedger:
    return AccountLedger()


@pytest.fixture(scope="function")
def router(ledger: AccountLedger) -> TransactionRouter:
    return TransactionRouter(ledger)


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    for name in ("PAYMENTS_LOG_LEVEL", "PAYMENTS_LOG_FORMAT", "PAYMENTS_SKIP_MALFORMED_ROWS"):
        monkeypatch.delenv(name, raising=False)
    config.cache_clear()
    yield
    config.cache_clear()
