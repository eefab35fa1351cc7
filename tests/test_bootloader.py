"""
Tests for nova_installer.lib.bootloader.
"""

import os

import pytest

from nova_installer.errors import ConfigRewriteError
from nova_installer.lib.bootloader import CMDLINE_KEY, render_key, set_kernel_cmdline


def _key_lines(text):
    return [ln for ln in text.splitlines() if ln.startswith(f"{CMDLINE_KEY}=")]


class TestRenderKey:
    def test_rewrites_existing_value(self):
        out = render_key('GRUB_CMDLINE_LINUX_DEFAULT="foo"\n', CMDLINE_KEY, "quiet splash")
        assert _key_lines(out) == ['GRUB_CMDLINE_LINUX_DEFAULT="quiet splash"']

    def test_appends_missing_key(self):
        out = render_key("GRUB_DEFAULT=0\nGRUB_TIMEOUT=5\n", CMDLINE_KEY, "quiet splash")
        assert out == 'GRUB_DEFAULT=0\nGRUB_TIMEOUT=5\nGRUB_CMDLINE_LINUX_DEFAULT="quiet splash"\n'

    def test_collapses_duplicates(self):
        text = 'GRUB_CMDLINE_LINUX_DEFAULT="a"\nGRUB_TIMEOUT=5\nGRUB_CMDLINE_LINUX_DEFAULT="b"\n'
        out = render_key(text, CMDLINE_KEY, "quiet splash")
        assert _key_lines(out) == ['GRUB_CMDLINE_LINUX_DEFAULT="quiet splash"']
        assert "GRUB_TIMEOUT=5" in out

    def test_similar_keys_untouched(self):
        text = 'GRUB_CMDLINE_LINUX=""\nGRUB_CMDLINE_LINUX_DEFAULT="x"\n'
        out = render_key(text, CMDLINE_KEY, "quiet splash")
        assert 'GRUB_CMDLINE_LINUX=""' in out.splitlines()

    def test_commented_key_is_not_a_match(self):
        out = render_key('#GRUB_CMDLINE_LINUX_DEFAULT="x"\n', CMDLINE_KEY, "quiet splash")
        assert out.splitlines() == ['#GRUB_CMDLINE_LINUX_DEFAULT="x"', 'GRUB_CMDLINE_LINUX_DEFAULT="quiet splash"']


class TestSetKernelCmdline:
    def test_rewrite_in_place(self, tmp_path):
        grub = tmp_path / "grub"
        grub.write_text('GRUB_DEFAULT=0\nGRUB_CMDLINE_LINUX_DEFAULT="foo"\n')

        assert set_kernel_cmdline(grub, "quiet splash") is True
        assert grub.read_text() == 'GRUB_DEFAULT=0\nGRUB_CMDLINE_LINUX_DEFAULT="quiet splash"\n'

    def test_idempotent(self, tmp_path):
        grub = tmp_path / "grub"
        grub.write_text('GRUB_CMDLINE_LINUX_DEFAULT="foo"\n')
        set_kernel_cmdline(grub, "quiet splash")
        before = grub.stat().st_mtime_ns

        assert set_kernel_cmdline(grub, "quiet splash") is False
        assert grub.stat().st_mtime_ns == before

    def test_keeps_file_mode_and_leaves_no_temp_files(self, tmp_path):
        grub = tmp_path / "grub"
        grub.write_text("GRUB_DEFAULT=0\n")
        os.chmod(grub, 0o600)

        set_kernel_cmdline(grub, "quiet splash")

        assert grub.stat().st_mode & 0o777 == 0o600
        assert sorted(p.name for p in tmp_path.iterdir()) == ["grub"]

    def test_dry_run_does_not_write(self, tmp_path):
        grub = tmp_path / "grub"
        grub.write_text('GRUB_CMDLINE_LINUX_DEFAULT="foo"\n')

        assert set_kernel_cmdline(grub, "quiet splash", dry_run=True) is True
        assert grub.read_text() == 'GRUB_CMDLINE_LINUX_DEFAULT="foo"\n'

    def test_unwritable_directory(self, tmp_path):
        with pytest.raises(ConfigRewriteError):
            set_kernel_cmdline(tmp_path / "missing-dir" / "grub", "quiet splash")
