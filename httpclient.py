# httpclient.py
"""
Thin Blockfrost client: the handful of endpoints matotam needs for sequence
numbers, inbox listing and transaction submission.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from constants import BLOCKFROST_API, BLOCKFROST_KEY, BLOCKFROST_PAGE_SIZE, BLOCKFROST_TIMEOUT

logger = logging.getLogger(__name__)


class IndexerError(Exception):
    """Non-2xx answer from the indexer."""

    def __init__(self, status: int, url: str, body: str = ""):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(f"Indexer returned HTTP {status} for {url}")


class BlockfrostClient:
    def __init__(self, base_url: str = BLOCKFROST_API, project_id: str = BLOCKFROST_KEY,
                 timeout: float = BLOCKFROST_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"project_id": project_id})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _check(self, resp: requests.Response) -> requests.Response:
        if not 200 <= resp.status_code < 300:
            raise IndexerError(resp.status_code, resp.url, resp.text[:200])
        return resp

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(path)
        logger.debug(f"GET {url} {params or ''}")
        resp = self.session.get(url, params=params, timeout=self.timeout)
        return self._check(resp).json()

    # ----------------------
    # Assets
    # ----------------------
    def list_policy_assets(self, policy_id: str, count: int = BLOCKFROST_PAGE_SIZE,
                           page: int = 1) -> List[Dict[str, Any]]:
        return self._get(f"/assets/policy/{policy_id}",
                         params={"count": count, "page": page, "order": "asc"})

    def count_policy_assets(self, policy_id: str, max_pages: int = 10) -> int:
        """
        Number of assets under a policy, walking full pages.

        Stops after ``max_pages`` pages, so very large policies are undercounted.
        """
        total = 0
        for page in range(1, max_pages + 1):
            items = self.list_policy_assets(policy_id, count=BLOCKFROST_PAGE_SIZE, page=page)
            total += len(items)
            if len(items) < BLOCKFROST_PAGE_SIZE:
                return total
        logger.warning(f"Policy {policy_id} has more than {total} assets; count capped at {max_pages} pages")
        return total

    def assets_by_stake(self, stake_address: str) -> List[Dict[str, Any]]:
        return self._get(f"/accounts/{stake_address}/addresses/assets",
                         params={"page": 1, "count": BLOCKFROST_PAGE_SIZE})

    def assets_by_address(self, address: str) -> List[Dict[str, Any]]:
        return self._get(f"/addresses/{address}/assets",
                         params={"page": 1, "count": BLOCKFROST_PAGE_SIZE})

    def get_asset(self, unit: str) -> Dict[str, Any]:
        return self._get(f"/assets/{unit}")

    # ----------------------
    # Transactions
    # ----------------------
    def submit_tx(self, cbor_bytes: bytes) -> str:
        """Submit a signed transaction; returns the tx hash."""
        url = self._url("/tx/submit")
        resp = self.session.post(url, data=cbor_bytes, timeout=self.timeout,
                                 headers={"Content-Type": "application/cbor"})
        tx_hash = self._check(resp).json()
        logger.info(f"Submitted transaction {tx_hash}")
        return tx_hash
