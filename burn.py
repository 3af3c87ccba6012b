# burn.py
"""
Checks that gate a burn: who may burn, which policy the token must belong to,
and which wallet output holds it. Transaction building and signing live in
the wallet; this module only decides whether a burn is allowed.
"""
from typing import Any, Dict, Iterable, List, Mapping

from constants import BURN_INFO


class BurnError(Exception):
    """Base class for refused burns."""


class NotAuthorizedError(BurnError):
    def __init__(self, key_hash: str):
        self.key_hash = key_hash
        super().__init__(f"Key hash {key_hash} may not burn this message")


class WrongPolicyError(BurnError):
    def __init__(self, unit: str, policy_id: str):
        self.unit = unit
        self.policy_id = policy_id
        super().__init__(f"Unit {unit} is not under policy {policy_id}")


class NoUtxoError(BurnError):
    def __init__(self, unit: str):
        self.unit = unit
        super().__init__(f"No wallet output holds {unit}")


def burn_info_text() -> str:
    return BURN_INFO


def burn_policy_script(sender_key_hash: str, receiver_key_hash: str,
                       dev_key_hash: str) -> Dict[str, Any]:
    """Native "any" script: sender, receiver or matotam may sign."""
    return {
        "type": "any",
        "scripts": [
            {"type": "sig", "keyHash": sender_key_hash},
            {"type": "sig", "keyHash": receiver_key_hash},
            {"type": "sig", "keyHash": dev_key_hash},
        ],
    }


def authorize_burn(my_key_hash: str, allowed_key_hashes: Iterable[str]) -> None:
    allowed = {h.lower() for h in allowed_key_hashes if h}
    if not my_key_hash or my_key_hash.lower() not in allowed:
        raise NotAuthorizedError(my_key_hash)


def ensure_unit_in_policy(unit: str, policy_id: str) -> None:
    if not policy_id or not unit.lower().startswith(policy_id.lower()):
        raise WrongPolicyError(unit, policy_id)


def _quantity(amount: Any) -> int:
    try:
        return int(amount)
    except (TypeError, ValueError):
        return 0


def find_burnable_utxo(utxos: List[Mapping[str, Any]], unit: str) -> Mapping[str, Any]:
    """
    First output holding a positive quantity of ``unit``.

    Accepts both the wallet shape (``{"assets": {unit: qty}}``) and the
    Blockfrost shape (``{"amount": [{"unit": ..., "quantity": "1"}]}``).
    """
    for utxo in utxos:
        assets = utxo.get("assets") or {}
        if _quantity(assets.get(unit)) > 0:
            return utxo
        for entry in utxo.get("amount") or []:
            if entry.get("unit") == unit and _quantity(entry.get("quantity")) > 0:
                return utxo
    raise NoUtxoError(unit)
