#!/usr/bin/env python3
"""Remove every repository object stored at a location.

Usage:
  .venv/bin/python scripts/wipe_repository.py swift:///container/prefix --dry-run
  .venv/bin/python scripts/wipe_repository.py swift:///container/prefix

Credentials come from the OS_* / ST_* environment variables. The container
itself is kept. Use --dry-run to only count the objects.
"""

from __future__ import annotations

import argparse
import logging

from swiftstore.common.config import Settings, get_settings
from swiftstore.common.logging import setup_logging
from swiftstore.domain.config import resolve_config
from swiftstore.domain.handle import FileType
from swiftstore.infra.storage.client import StorageClient
from swiftstore.services.backend import DELETE_ORDER, SwiftBackend

logger = logging.getLogger("swiftstore.startup")


def wipe_repository(
    location: str,
    *,
    dry_run: bool = False,
    client: StorageClient | None = None,
    settings: Settings | None = None,
) -> dict[str, int]:
    cfg = resolve_config(location)
    backend = SwiftBackend.open(cfg, client=client, settings=settings)
    counts = {str(t): sum(1 for _ in backend.list(t)) for t in DELETE_ORDER}
    counts[str(FileType.CONFIG)] = int(backend.test(FileType.CONFIG))
    logger.info("repository %s/%s holds %s", cfg.container, cfg.prefix, counts)
    if not dry_run:
        backend.delete()
    backend.close()
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Remove all objects of a repository")
    parser.add_argument("location", help="swift:///<container>[/<prefix>]")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print how many objects would be deleted",
    )
    args = parser.parse_args()
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    counts = wipe_repository(args.location, dry_run=args.dry_run, settings=settings)
    total = sum(counts.values())
    if args.dry_run:
        print(f"[DRY-RUN] {total} objects would be deleted")
    else:
        print(f"Deleted {total} objects")


if __name__ == "__main__":
    main()
