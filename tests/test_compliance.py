"""
Unit Tests: Compliance Gate
"""

import pytest

from toolsmith.services.compliance import BLOCKED_REASON, ComplianceGate


class TestComplianceGate:
    """Deny-list matching"""

    @pytest.mark.parametrize("name", [
        "youtube video downloader",
        "YouTube Video Downloader",
        "Netflix unlocker",
        "spotify_downloader",
        "TikTok-Downloader",
        "windows keygen",
        "torrent search",
    ])
    def test_blocks_deny_listed_names(self, gate, name):
        verdict = gate.check(name)

        assert verdict.permitted is False
        assert verdict.reason == BLOCKED_REASON

    @pytest.mark.parametrize("name", [
        "password generator",
        "pdf merger",
        "video trimmer",
        "instagram caption writer",
    ])
    def test_permits_other_names(self, gate, name):
        verdict = gate.check(name)

        assert verdict.permitted is True
        assert verdict.reason is None

    def test_custom_deny_list_replaces_default(self):
        gate = ComplianceGate(["Forbidden Tool"])

        assert gate.check("my forbidden   tool").permitted is False
        assert gate.check("youtube downloader").permitted is True

    def test_blank_terms_are_ignored(self):
        gate = ComplianceGate(["", "  ", "crack"])

        assert gate.deny_list == ("crack",)
        assert gate.check("password generator").permitted is True

    def test_check_is_deterministic(self, gate):
        assert gate.check("netflix") == gate.check("netflix")
