"""Pytest configuration for the matotam toolkit."""
import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

SENDER = "addr_test1qpw0djgj0x59ngrjvqthn7enhvruxnsavsw5th63la3mjel3tkc974sr23jmlzgq5zda4gtv8k9cy38756r9y3qgmkqqjz6aa7"
RECEIVER = "addr_test1qz2fxv2umyhttkxyxp8x0dlpdt3k6cwng5pxj3jhsydzer3jcu5d8ps7zex2k2xt3uqxgjqnnj83ws8lhrn648jjxtwq2ytjqp"
POLICY_ID = "a0028f350aaabe0545fdcb56b039bfb08e4bb4d8c4d7c3c7d481c235"


def pytest_configure():
    # Keep the indexer settings deterministic regardless of the shell
    os.environ.setdefault("MATOTAM_NETWORK", "preprod")


@pytest.fixture
def sender():
    return SENDER


@pytest.fixture
def receiver():
    return RECEIVER


@pytest.fixture
def policy_id():
    return POLICY_ID


@pytest.fixture
def mint_time():
    return datetime(2026, 3, 14, 15, 9, 26, tzinfo=timezone.utc)
