"""
Tests for the run-scoped context.
"""

import logging
import os

from rtxkit.core.context import (
    MASK,
    RunContext,
    SecretMaskingFilter,
    mask_secrets,
)

logger = logging.getLogger("tests.context")


class TestStateAndOutputs:
    """Test state and output bookkeeping."""

    def test_save_and_get_state(self, context):
        context.save_state("PRIMARY_KEY", "rtx-tools-linux-x64-abc")
        assert context.get_state("PRIMARY_KEY") == "rtx-tools-linux-x64-abc"
        assert context.get_state("CACHE_KEY") == ""

    def test_boolean_output(self, context):
        context.set_output("cache-hit", False)
        assert context.outputs["cache-hit"] == "false"

        context.set_output("cache-hit", True)
        assert context.outputs["cache-hit"] == "true"

    def test_from_environment_reads_saved_state(self, monkeypatch):
        monkeypatch.setenv("STATE_PRIMARY_KEY", "rtx-tools-linux-x64-abc")
        monkeypatch.setenv("STATE_CACHE_KEY", "")

        context = RunContext.from_environment()

        assert context.get_state("PRIMARY_KEY") == "rtx-tools-linux-x64-abc"
        assert "CACHE_KEY" not in context.state


class TestAddPath:
    """Test PATH publication."""

    def test_prepends_to_process_path(self, context, tmp_path):
        context.add_path(tmp_path / "bin")

        assert os.environ["PATH"].split(os.pathsep)[0] == str(tmp_path / "bin")

    def test_most_recent_first(self, context):
        context.add_path("/a/bin")
        context.add_path("/b/bin")

        assert context.paths == ["/b/bin", "/a/bin"]


class TestSecretMasking:
    """Test secrets never reach log output."""

    def test_mask_secrets(self):
        assert mask_secrets("token=abc123", {"abc123"}) == f"token={MASK}"

    def test_longest_secret_masked_first(self):
        assert mask_secrets("abcdef", {"abc", "abcdef"}) == MASK

    def test_filter_masks_formatted_arguments(self):
        record = logging.LogRecord(
            "x", logging.INFO, __file__, 1, "curl -H %s", ("Bearer abc123",), None
        )

        SecretMaskingFilter({"abc123"}).filter(record)

        assert record.getMessage() == f"curl -H Bearer {MASK}"

    def test_registered_secret_masked_in_logs(self, context, caplog):
        caplog.set_level(logging.INFO)
        context.set_secret("ghp_supersecret")

        logger.info("gh release download --token ghp_supersecret")

        assert "ghp_supersecret" not in caplog.text
        assert MASK in caplog.text

    def test_empty_secret_ignored(self, context):
        context.set_secret("")
        context.set_secret(None)
        assert context.secrets == set()

    def test_add_mask_command_in_github_actions(self, context, monkeypatch, capsys):
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        context.set_secret("ghp_supersecret")

        assert "::add-mask::ghp_supersecret" in capsys.readouterr().out


class TestFlush:
    """Test hand-off to GitHub Actions runner files."""

    def test_noop_without_runner_files(self, context):
        context.save_state("PRIMARY_KEY", "key")
        context.set_output("cache-hit", True)
        context.add_path("/a/bin")

        context.flush()

    def test_writes_runner_files(self, context, tmp_path, monkeypatch):
        state_file = tmp_path / "state"
        output_file = tmp_path / "output"
        path_file = tmp_path / "path"
        monkeypatch.setenv("GITHUB_STATE", str(state_file))
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
        monkeypatch.setenv("GITHUB_PATH", str(path_file))

        context.save_state("PRIMARY_KEY", "rtx-tools-linux-x64-abc")
        context.set_output("cache-hit", False)
        context.add_path("/rtx/bin")
        context.add_path("/a/bin")
        context.add_path("/b/bin")
        context.flush()

        assert state_file.read_text() == "PRIMARY_KEY=rtx-tools-linux-x64-abc\n"
        assert output_file.read_text() == "cache-hit=false\n"
        assert path_file.read_text().splitlines() == ["/rtx/bin", "/a/bin", "/b/bin"]

    def test_paths_flushed_once(self, context, tmp_path, monkeypatch):
        path_file = tmp_path / "path"
        monkeypatch.setenv("GITHUB_PATH", str(path_file))

        context.add_path("/a/bin")
        context.flush()
        context.add_path("/b/bin")
        context.flush()

        assert path_file.read_text().splitlines() == ["/a/bin", "/b/bin"]

    def test_multiline_value_uses_delimiter(self, context, tmp_path, monkeypatch):
        output_file = tmp_path / "output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))

        context.set_output("paths", "/a\n/b")
        context.flush()

        lines = output_file.read_text().splitlines()
        assert lines[0].startswith("paths<<ghadelimiter_")
        assert lines[1:3] == ["/a", "/b"]
        assert lines[3] == lines[0].split("<<", 1)[1]
