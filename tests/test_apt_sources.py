"""
Tests for nova_installer.lib.apt_sources.
"""

from datetime import datetime

from nova_installer.lib.apt_sources import configured_suites, render_sources, tracks_suite, write_sources

MARKERS = ["testing", "trixie", "sid"]


def _apt(tmp_path, sources_list=None, parts=None):
    apt = tmp_path / "apt"
    (apt / "sources.list.d").mkdir(parents=True)
    if sources_list is not None:
        (apt / "sources.list").write_text(sources_list)
    for name, text in (parts or {}).items():
        (apt / "sources.list.d" / name).write_text(text)
    return apt


class TestTracksSuite:
    def test_one_line_format(self, tmp_path):
        apt = _apt(tmp_path, "deb http://deb.debian.org/debian/ testing main\n")
        assert tracks_suite(MARKERS, apt)

    def test_stable_is_not_testing(self, tmp_path):
        apt = _apt(tmp_path, "deb [signed-by=/usr/share/keyrings/x.gpg] http://deb.debian.org/debian bookworm main\n")
        assert configured_suites(apt) == ["bookworm"]
        assert not tracks_suite(MARKERS, apt)

    def test_comments_ignored(self, tmp_path):
        apt = _apt(tmp_path, "# deb http://deb.debian.org/debian testing main\ndeb http://x bookworm main\n")
        assert not tracks_suite(MARKERS, apt)

    def test_deb822_sources(self, tmp_path):
        apt = _apt(
            tmp_path,
            "",
            {"debian.sources": "Types: deb\nURIs: http://deb.debian.org/debian\nSuites: trixie trixie-updates\nComponents: main\n"},
        )
        assert tracks_suite(MARKERS, apt)

    def test_security_suite_counts(self, tmp_path):
        apt = _apt(tmp_path, parts={"security.list": "deb http://security.debian.org/debian-security testing-security main\n"})
        assert tracks_suite(MARKERS, apt)


class TestWriteSources:
    def test_backs_up_then_rewrites(self, tmp_path):
        apt = _apt(tmp_path, "deb http://deb.debian.org/debian bookworm main\n")

        backup = write_sources(
            suite="testing",
            mirror="http://deb.debian.org/debian/",
            security_mirror="http://security.debian.org/debian-security",
            apt_dir=apt,
            now=datetime(2024, 5, 1, 12, 30, 0),
        )

        assert backup == apt / "sources.list.backup.20240501_123000"
        assert backup.read_text() == "deb http://deb.debian.org/debian bookworm main\n"
        assert tracks_suite(MARKERS, apt)
        assert "testing-security" in (apt / "sources.list").read_text()

    def test_dry_run_touches_nothing(self, tmp_path):
        apt = _apt(tmp_path, "deb http://x bookworm main\n")

        assert write_sources(suite="testing", mirror="http://x", security_mirror="http://y", apt_dir=apt, dry_run=True) is None
        assert sorted(p.name for p in apt.iterdir()) == ["sources.list", "sources.list.d"]

    def test_render_contains_all_components(self):
        text = render_sources("testing", "http://deb.debian.org/debian", "http://security.debian.org/debian-security")
        assert "deb http://deb.debian.org/debian/ testing main contrib non-free non-free-firmware" in text
        assert "deb-src http://deb.debian.org/debian/ testing-updates main contrib non-free non-free-firmware" in text
