"""
Persistence of crawl findings – one JSON document per extractor category
plus an optional plain-text list of crawled URLs.
"""

import json
import os
import tempfile
from pathlib import Path

from second_order.config import CRAWLED_URLS_FILE, OUTPUT_FILES
from second_order.core.results import Findings
from second_order.utils.log import log


def _atomic_write(path: Path, text: str) -> None:
    """Write *text* to *path* via a temporary file and ``os.replace`` so a
    reader never sees a half-written document."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def save_findings(output_dir: Path, category: str, findings: Findings) -> Path:
    """Serialise *findings* for *category* into ``output_dir``."""
    path = output_dir / OUTPUT_FILES.get(category, f"{category}.json")
    _atomic_write(path, json.dumps(findings, indent=2, ensure_ascii=False))
    log.info("[SAVE] %s (%d page(s))", path, len(findings))
    return path


def save_crawled_urls(output_dir: Path, urls: list[str]) -> Path:
    """Write the newline-joined list of crawled URLs."""
    path = output_dir / CRAWLED_URLS_FILE
    _atomic_write(path, "\n".join(urls))
    log.info("[SAVE] %s (%d URL(s))", path, len(urls))
    return path


def write_all_results(
    output_dir: Path,
    snapshots: dict[str, Findings],
    crawled_urls: list[str] | None = None,
) -> list[Path]:
    """Persist every category snapshot and, if given, the crawled URLs.

    A failure writing one file is logged and does not prevent the others
    from being written.
    """
    written: list[Path] = []
    output_dir.mkdir(parents=True, exist_ok=True)
    for category, findings in snapshots.items():
        try:
            written.append(save_findings(output_dir, category, findings))
        except OSError as exc:
            log.error("[ERR] Could not write %s results: %s", category, exc)
    if crawled_urls is not None:
        try:
            written.append(save_crawled_urls(output_dir, crawled_urls))
        except OSError as exc:
            log.error("[ERR] Could not write crawled URLs: %s", exc)
    return written
