"""
Backup Tag — Provenance stored in a backup repository's description.

Every backup repository carries "[backup] <source web url>" as its
description. Scrub relies on this tag to tell managed backups apart from
unrelated repositories living on the same backup host.
"""

from __future__ import annotations

import re
from typing import Optional

BACKUP_TAG_PREFIX = "[backup] "
BACKUP_TAG_PATTERN = re.compile(r"^\[backup\] (.*)$")


def backup_description(source_web_url: str) -> str:
    """Description expected on the backup of a source repository."""
    return f"{BACKUP_TAG_PREFIX}{source_web_url}"


def parse_backup_tag(description: Optional[str]) -> Optional[str]:
    """Return the linked source URL, or None if the description is not a backup tag."""
    if not description:
        return None

    match = BACKUP_TAG_PATTERN.match(description)
    if match is None:
        return None
    return match.group(1)
