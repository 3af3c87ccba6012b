# utils.py
"""Small display helpers shared by the lab CLI and log messages."""
import json
import os
from typing import Any


def short_hash(value: str, start: int = 10, end: int = 6) -> str:
    """Shorten long identifiers for display: ``addr1qxy...abc123``."""
    if not value:
        return ""
    if len(value) <= start + end + 3:
        return value
    return f"{value[:start]}...{value[-end:]}"


def ensure_dir_for_file(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path))
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)


def write_output(content: Any, out_path: str = None) -> str:
    """
    Write text (or a JSON-serializable object) to ``out_path``, or return it
    for printing when no path is given.
    """
    text = content if isinstance(content, str) else json.dumps(content, indent=2, ensure_ascii=False)
    if out_path:
        ensure_dir_for_file(out_path)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(text)
    return text
