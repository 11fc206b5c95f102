"""Shared fixtures for the bill rings test-suite."""

from __future__ import annotations

import itertools
import logging
from datetime import datetime
from typing import Callable

import pytest
from billrings.records import SUCCESS_STATUS, Direction, TransactionRecord

_ids = itertools.count(1)


def build_record(
    when: str,
    category: str,
    amount: float,
    direction: Direction = Direction.EXPENSE,
    **extra,
) -> TransactionRecord:
    fields = {
        "id": f"rec-{next(_ids)}",
        "trade_time": datetime.fromisoformat(when),
        "category": category,
        "counterparty": "",
        "counterparty_account": "",
        "description": "",
        "direction": direction,
        "amount": amount,
        "payment_method": "余额",
        "status": SUCCESS_STATUS,
        "trade_order_id": -1,
        "merchant_order_id": -1,
        "remark": "",
    }
    fields.update(extra)
    return TransactionRecord(**fields)


@pytest.fixture
def make_record() -> Callable[..., TransactionRecord]:
    return build_record


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger("billrings")
    state = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = state[0]
    logger.setLevel(state[1])
    logger.propagate = state[2]
