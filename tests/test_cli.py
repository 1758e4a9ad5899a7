"""Unit tests for the pyfoldersync CLI commands."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pyfoldersync.cli import main


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def config_file(tmp_path, monkeypatch):
    """Point the config at a throwaway file and clear overrides."""
    for key in list(os.environ):
        if key.startswith("PYFOLDERSYNC_"):
            monkeypatch.delenv(key)
    path = tmp_path / "config" / "pyfoldersync.conf"
    monkeypatch.setenv("PYFOLDERSYNC_CONFIG", str(path))
    return path


@pytest.fixture
def roots(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    src.mkdir()
    dst.mkdir()
    (src / "a.txt").write_text("from source")
    (dst / "b.txt").write_text("from dest")
    return src, dst


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "sync" in result.output
        assert "diff" in result.output
        assert "prefix" in result.output
        assert "config" in result.output

    def test_sync_help_lists_actions(self, runner):
        result = runner.invoke(main, ["sync", "--help"])
        assert result.exit_code == 0
        assert "--forward-action" in result.output
        assert "--hash-threshold" in result.output
        assert "--no-check-hash" in result.output


class TestSyncCommand:
    """Tests for the sync command."""

    def test_sync_with_fixed_actions(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["sync", str(src), str(dst), "-f", "c", "-r", "c"])

        assert result.exit_code == 0, result.output
        assert (dst / "a.txt").read_text() == "from source"
        assert (src / "b.txt").read_text() == "from dest"
        assert "Copied:" in result.output
        assert "Sync complete" in result.output

    def test_sync_prompts_until_valid_action(self, runner, roots):
        src, dst = roots

        result = runner.invoke(
            main, ["sync", str(src), str(dst)], input="x\nc\nc\n"
        )

        assert result.exit_code == 0, result.output
        assert result.output.count("Action (c, o, d, s)") == 2
        assert "Action (c, d, s)" in result.output
        assert "[O] Overwrite" in result.output
        assert (dst / "a.txt").exists()
        assert (src / "b.txt").exists()

    def test_sync_prompts_only_for_unset_phase(self, runner, roots):
        src, dst = roots

        result = runner.invoke(
            main, ["sync", str(src), str(dst), "-f", "s"], input="c\n"
        )

        assert result.exit_code == 0, result.output
        assert "Action (c, o, d, s)" not in result.output
        assert "Action (c, d, s)" in result.output
        assert not (dst / "a.txt").exists()
        assert (src / "b.txt").exists()

    def test_aborted_prompt_exits_130(self, runner, roots):
        src, dst = roots

        # End of input at the prompt raises click.Abort, as Ctrl-C does
        result = runner.invoke(main, ["sync", str(src), str(dst)], input="")

        assert result.exit_code == 130
        assert "Sync cancelled by user" in result.output
        assert not (dst / "a.txt").exists()

    def test_interrupt_exits_130(self, runner, roots):
        src, dst = roots

        with patch(
            "pyfoldersync.sync.prompts.click.prompt", side_effect=KeyboardInterrupt
        ):
            result = runner.invoke(main, ["sync", str(src), str(dst)])

        assert result.exit_code == 130
        assert "Sync cancelled by user" in result.output

    def test_quiet_requires_both_actions(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["-q", "sync", str(src), str(dst), "-f", "c"])

        assert result.exit_code == 2
        assert "--quiet requires both" in result.output
        assert not (dst / "a.txt").exists()

    def test_quiet_dry_run_needs_no_actions(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["-q", "sync", str(src), str(dst), "--dry-run"])

        assert result.exit_code == 0, result.output

    def test_reverse_overwrite_not_accepted(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["sync", str(src), str(dst), "-r", "o"])

        assert result.exit_code == 2
        assert not (dst / "a.txt").exists()

    def test_sync_json_output(self, runner, roots):
        src, dst = roots

        result = runner.invoke(
            main,
            ["--quiet", "--json", "sync", str(src), str(dst), "-f", "c", "-r", "c"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["dry_run"] is False
        assert data["summary"]["forward_files_applied"] == 1
        assert data["summary"]["reverse_files_applied"] == 1

    def test_sync_dry_run(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["sync", str(src), str(dst), "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry run complete" in result.output
        assert not (dst / "a.txt").exists()
        assert not (src / "b.txt").exists()

    def test_missing_source(self, runner, tmp_path):
        result = runner.invoke(
            main,
            ["sync", str(tmp_path / "nope"), str(tmp_path / "dst"), "-f", "c"],
        )

        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_invalid_hash_threshold(self, runner, roots):
        src, dst = roots

        result = runner.invoke(
            main, ["sync", str(src), str(dst), "-t", "2XB", "-f", "c", "-r", "c"]
        )

        assert result.exit_code == 1
        assert "Invalid size expression" in result.output
        assert not (dst / "a.txt").exists()

    def test_include_option(self, runner, roots):
        src, dst = roots
        (src / "photo.JPG").write_text("jpg")

        result = runner.invoke(
            main,
            ["-q", "sync", str(src), str(dst), "-i", "jpg", "-f", "c", "-r", "c"],
        )

        assert result.exit_code == 0, result.output
        assert (dst / "photo.JPG").exists()
        assert not (dst / "a.txt").exists()
        assert not (src / "b.txt").exists()

    def test_exclude_from_config_file(self, runner, roots, config_file):
        src, dst = roots
        (src / "scratch.tmp").write_text("tmp")
        config_file.parent.mkdir(parents=True)
        config_file.write_text("PYFOLDERSYNC_EXCLUDE_EXTENSIONS=tmp\n")

        result = runner.invoke(
            main, ["-q", "sync", str(src), str(dst), "-f", "c", "-r", "c"]
        )

        assert result.exit_code == 0, result.output
        assert (dst / "a.txt").exists()
        assert not (dst / "scratch.tmp").exists()

    def test_invalid_threshold_in_config_file(self, runner, roots, config_file):
        src, dst = roots
        config_file.parent.mkdir(parents=True)
        config_file.write_text("PYFOLDERSYNC_HASH_THRESHOLD=lots\n")

        result = runner.invoke(main, ["sync", str(src), str(dst), "-f", "c"])

        assert result.exit_code == 1
        assert "HASH_THRESHOLD" in result.output


class TestDiffCommand:
    """Tests for the diff command."""

    def test_diff_changes_nothing(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["diff", str(src), str(dst)])

        assert result.exit_code == 0, result.output
        assert "Dry run complete" in result.output
        assert sorted(p.name for p in src.iterdir()) == ["a.txt"]
        assert sorted(p.name for p in dst.iterdir()) == ["b.txt"]

    def test_diff_json(self, runner, roots):
        src, dst = roots

        result = runner.invoke(main, ["-q", "--json", "diff", str(src), str(dst)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["dry_run"] is True
        assert data["summary"]["forward_files_applied"] == 0


class TestPrefixCommand:
    """Tests for the prefix command."""

    @pytest.fixture
    def photos(self, tmp_path):
        directory = tmp_path / "photos"
        directory.mkdir()
        for name in ["a.jpg", "b.jpg", "IMG_a.jpg", "IMG_c.jpg"]:
            (directory / name).write_text(name)
        (directory / "nested").mkdir()
        (directory / "nested" / "d.jpg").write_text("d")
        return directory

    def test_prefix_renames_with_collision_suffix(self, runner, photos):
        result = runner.invoke(main, ["prefix", str(photos), "IMG_"])

        assert result.exit_code == 0, result.output
        names = sorted(p.name for p in photos.iterdir() if p.is_file())
        assert names == ["IMG_a (1).jpg", "IMG_a.jpg", "IMG_b.jpg", "IMG_c.jpg"]
        assert (photos / "IMG_a (1).jpg").read_text() == "a.jpg"
        assert (photos / "nested" / "d.jpg").exists()
        assert "2 file(s) renamed" in result.output

    def test_prefix_dry_run(self, runner, photos):
        result = runner.invoke(main, ["prefix", str(photos), "IMG_", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Would rename: a.jpg -> IMG_a.jpg" in result.output
        assert (photos / "a.jpg").exists()
        assert "2 file(s) to rename" in result.output

    def test_prefix_json(self, runner, photos):
        result = runner.invoke(main, ["-q", "--json", "prefix", str(photos), "IMG_"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [Path(r["to"]).name for r in data["renamed"]] == [
            "IMG_a (1).jpg",
            "IMG_b.jpg",
        ]

    def test_prefix_missing_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["prefix", str(tmp_path / "nope"), "IMG_"])

        assert result.exit_code == 2


class TestConfigCommands:
    """Tests for config show/set."""

    def test_set_then_show(self, runner, config_file):
        result = runner.invoke(main, ["config", "set", "hash_threshold", "500MB"])

        assert result.exit_code == 0, result.output
        assert "HASH_THRESHOLD=500MB" in result.output
        assert config_file.read_text() == "PYFOLDERSYNC_HASH_THRESHOLD=500MB\n"

        result = runner.invoke(main, ["--json", "config", "show"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["hash_threshold"] == "500MB"
        assert data["check_hash"] is True

    def test_show_defaults(self, runner):
        result = runner.invoke(main, ["config", "show"])

        assert result.exit_code == 0, result.output
        assert "Configuration" in result.output
        assert "2GB" in result.output

    def test_set_invalid_value(self, runner, config_file):
        result = runner.invoke(main, ["config", "set", "CHECK_HASH", "maybe"])

        assert result.exit_code == 1
        assert "Invalid PYFOLDERSYNC_CHECK_HASH" in result.output
        assert not config_file.exists()

    def test_set_unknown_key(self, runner):
        result = runner.invoke(main, ["config", "set", "COLOR", "blue"])

        assert result.exit_code == 2
