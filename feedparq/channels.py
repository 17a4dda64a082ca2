"""
Channel files: one file per channel, one feed address per line.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from feedparq.errors import InvalidAddressError
from feedparq.models import FeedAddress

logger = logging.getLogger(__name__)


def list_channel_files(directory: Path | str) -> List[Path]:
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"channels directory not found: {root}")
    return sorted(path for path in root.iterdir() if path.is_file() and not path.name.startswith("."))


def parse_addresses(lines: Iterable[str]) -> List[FeedAddress]:
    addresses: List[FeedAddress] = []
    for number, line in enumerate(lines, start=1):
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        try:
            addresses.append(FeedAddress.parse(text))
        except InvalidAddressError as exc:
            logger.warning("Ignoring line %d: %s", number, exc)
    return addresses


def read_addresses(path: Path | str) -> List[FeedAddress]:
    with open(path, encoding="utf-8") as handle:
        return parse_addresses(handle)


def build_slugs(directory: Path | str) -> Dict[str, dict]:
    return {f"/{path.name}": {} for path in list_channel_files(directory)}


def write_slugs(directory: Path | str, output: Path | str) -> Path:
    target = Path(output)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(build_slugs(directory), indent=2), encoding="utf-8")
    return target
