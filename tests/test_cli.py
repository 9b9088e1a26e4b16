"""Tests for the canonicalize-keysmap command line."""

import io
import logging
import sys

import pytest

from args import parse_args
from canonicalize_keysmap import main, run
from cli_config import apply_config_overrides
from common.logging_utils import LOG_LEVEL_ENV
from constants import Constants, ExitCodes, _load_yaml_config

FPR_A = "A" * 40
FPR_B = "B" * 40

KEYSMAP = "\n".join([
    "# signing keys",
    f"org.example:lib:1.0 = 0x{FPR_A}",
    f"org.example:lib:1.1 = 0x{FPR_A}",
    "org.example:lib:1.2-beta-1 = noKey",
    f"org.example:util:1.0 = 0x{FPR_A}",
    f"org.example:util:2.0 = 0x{FPR_B}",
    "this line is garbage",
    "org.other:thing:3.0 =",
    "",
])

EXPECTED = "\n".join([
    f"org.example:lib = 0x{FPR_A}",
    "org.example:lib:[1.2-beta-1,) = noKey",
    f"org.example:util = 0x{FPR_A}, 0x{FPR_B}",
    "org.other =",
    "",
])


@pytest.fixture(autouse=True)
def _isolated_log_level(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")
    monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)


class TestParseArgs:
    """Argument parsing."""

    def test_defaults(self):
        ns = parse_args([])
        assert ns.INPUT is None
        assert ns.OUTPUT is None
        assert ns.LOG_LEVEL is None

    def test_loglevel_is_case_insensitive(self):
        assert parse_args(["--loglevel", "debug"]).LOG_LEVEL == "DEBUG"

    def test_invalid_loglevel(self):
        with pytest.raises(SystemExit):
            parse_args(["--loglevel", "LOUD"])


class TestConfig:
    """YAML configuration overlay."""

    def test_config_fills_unset_args(self, tmp_path):
        cfg = tmp_path / "keysmap.yml"
        cfg.write_text("logging:\n  level: info\nio:\n  input: in.list\n  output: out.list\n", encoding="utf-8")
        args = parse_args(["-c", str(cfg), "-o", "cli.list"])
        apply_config_overrides(args)
        assert args.LOG_LEVEL == "INFO"
        assert args.INPUT == "in.list"
        assert args.OUTPUT == "cli.list"

    def test_config_from_environment(self, tmp_path, monkeypatch):
        cfg = tmp_path / "keysmap.yml"
        cfg.write_text("io:\n  input: env.list\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_CONFIG, str(cfg))
        args = parse_args([])
        apply_config_overrides(args)
        assert args.INPUT == "env.list"

    def test_missing_config_is_empty(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert _load_yaml_config(str(tmp_path / "missing.yml")) == {}
        assert "Config file not found" in caplog.text

    def test_invalid_yaml_is_empty(self, tmp_path):
        cfg = tmp_path / "bad.yml"
        cfg.write_text("logging: [unclosed\n", encoding="utf-8")
        assert _load_yaml_config(str(cfg)) == {}

    def test_unknown_level_is_dropped(self, tmp_path):
        cfg = tmp_path / "keysmap.yml"
        cfg.write_text("logging:\n  level: loud\n", encoding="utf-8")
        args = parse_args(["-c", str(cfg)])
        apply_config_overrides(args)
        assert args.LOG_LEVEL is None


class TestRun:
    """The batch transform itself."""

    def test_run_streams(self):
        out = io.StringIO()
        assert run(io.StringIO(KEYSMAP), out) == 4
        assert out.getvalue() == EXPECTED

    def test_run_empty_input(self):
        out = io.StringIO()
        assert run(io.StringIO(""), out) == 0
        assert out.getvalue() == ""


class TestMain:
    """Exit codes and file handling."""

    def test_files(self, tmp_path, caplog):
        src = tmp_path / "keysmap.list"
        dst = tmp_path / "canonical.list"
        src.write_text(KEYSMAP, encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            code = main(["-i", str(src), "-o", str(dst)])
        assert code == ExitCodes.SUCCESS.value
        assert dst.read_text(encoding="utf-8") == EXPECTED
        assert "Line does not match format: this line is garbage" in caplog.text

    def test_stdin_stdout(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO(KEYSMAP))
        assert main([]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out == EXPECTED

    def test_missing_input_file(self, tmp_path):
        assert main(["-i", str(tmp_path / "nope.list")]) == ExitCodes.FILE_ERROR.value

    def test_invariant_violation_aborts(self, tmp_path, monkeypatch):
        from common.errors import KeysmapInvariantError

        def _broken(_keysmap):
            raise KeysmapInvariantError("BUG: fingerprint should not be the 'unset' marker")

        monkeypatch.setattr("canonicalize_keysmap.canonicalize", _broken)
        src = tmp_path / "keysmap.list"
        src.write_text(KEYSMAP, encoding="utf-8")
        code = main(["-i", str(src), "-o", str(tmp_path / "out.list")])
        assert code == ExitCodes.INVARIANT_VIOLATION.value

    def test_invariant_violation_in_later_group_writes_nothing(self, tmp_path, monkeypatch):
        """A failure in the last group must not leave earlier groups in the output."""
        import keysmap.ranges
        from common.errors import KeysmapInvariantError

        real_artifact = keysmap.ranges.canonicalize_artifact

        def _fails_for_z(identifier, versions):
            if identifier.group == "z":
                raise KeysmapInvariantError("BUG: fingerprint should not be the 'unset' marker")
            return real_artifact(identifier, versions)

        monkeypatch.setattr(keysmap.ranges, "canonicalize_artifact", _fails_for_z)
        src = tmp_path / "keysmap.list"
        dst = tmp_path / "out.list"
        src.write_text("a:b:1 = noKey\na:c:1 =\nz:b:1 = noKey\nz:c:1 =\n", encoding="utf-8")
        code = main(["-i", str(src), "-o", str(dst)])
        assert code == ExitCodes.INVARIANT_VIOLATION.value
        assert dst.read_text(encoding="utf-8") == ""

    def test_run_writes_nothing_on_failure(self, monkeypatch):
        import keysmap.ranges
        from common.errors import KeysmapInvariantError

        real_artifact = keysmap.ranges.canonicalize_artifact

        def _fails_for_z(identifier, versions):
            if identifier.group == "z":
                raise KeysmapInvariantError("BUG")
            return real_artifact(identifier, versions)

        monkeypatch.setattr(keysmap.ranges, "canonicalize_artifact", _fails_for_z)
        out = io.StringIO()
        with pytest.raises(KeysmapInvariantError):
            run(io.StringIO("a:b:1 = noKey\na:c:1 =\nz:b:1 = noKey\nz:c:1 =\n"), out)
        assert out.getvalue() == ""
