"""
Legal compliance gate

Blocks requests for tools that would infringe third-party rights before any
generation work is spent on them.
"""

import logging
import re
from typing import Iterable, Optional, Tuple

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Media ripping/unlocking and license-circumvention tools
DEFAULT_DENY_LIST: Tuple[str, ...] = (
    "youtube",
    "netflix",
    "spotify downloader",
    "instagram downloader",
    "facebook video downloader",
    "tiktok downloader",
    "piracy",
    "crack",
    "keygen",
    "torrent",
)

BLOCKED_REASON = "Tool involves copyrighted or restricted content"

_SEPARATORS = re.compile(r"[\s_\-]+")


class ComplianceVerdict(BaseModel):
    permitted: bool
    reason: Optional[str] = None


def _normalize(text: str) -> str:
    return _SEPARATORS.sub(" ", text.lower()).strip()


class ComplianceGate:
    """
    Case-insensitive substring match of a requested name against a deny-list.

    Underscores, hyphens and runs of whitespace are treated alike on both
    sides, so ``youtube_downloader`` and ``YouTube downloader`` match the same
    entry. The deny-list is a policy parameter and is not exhaustive.
    """

    def __init__(self, deny_list: Optional[Iterable[str]] = None):
        terms = DEFAULT_DENY_LIST if deny_list is None else tuple(deny_list)
        self.deny_list: Tuple[str, ...] = tuple(
            term for term in (_normalize(t) for t in terms) if term
        )

    def check(self, requested_name: str) -> ComplianceVerdict:
        name = _normalize(requested_name)
        for term in self.deny_list:
            if term in name:
                logger.warning(f"Compliance gate blocked request matching '{term}'")
                return ComplianceVerdict(permitted=False, reason=BLOCKED_REASON)
        return ComplianceVerdict(permitted=True)
