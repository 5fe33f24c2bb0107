"""
Tests for infrastructure modules: settings, structured logging and the
calibration CLI.
"""

import json
import logging

import pytest


class TestSettings:
    """Environment-driven settings."""

    def test_defaults(self):
        from observation_engine.config import settings
        assert settings.VERSION == "1.0.0"
        assert settings.MAX_SUBMISSION_CHARS > 0
        assert isinstance(settings.PORT, int)

    def test_settings_frozen(self):
        import dataclasses
        from observation_engine.config import settings
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.PORT = 1

    def test_package_version_matches(self):
        from observation_engine import __version__
        from observation_engine.config import settings
        assert __version__ == settings.VERSION


class TestLogging:
    """Structured logging tests."""

    def _record(self, msg="Test message"):
        return logging.LogRecord(
            name="observation_engine.test",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg=msg,
            args=(),
            exc_info=None,
        )

    def test_json_formatter(self):
        from observation_engine.logging import JSONFormatter

        output = JSONFormatter().format(self._record())
        parsed = json.loads(output)
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "observation_engine.test"
        assert "timestamp" in parsed

    def test_json_formatter_extra_fields(self):
        from observation_engine.logging import JSONFormatter

        record = self._record("Submission scored")
        record.total_points = 35
        record.rule_id = "COUNT"
        record.unlisted = "dropped"
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["total_points"] == 35
        assert parsed["rule_id"] == "COUNT"
        assert "unlisted" not in parsed

    def test_json_formatter_exception(self):
        from observation_engine.logging import JSONFormatter
        import sys

        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                name="observation_engine.test", level=logging.ERROR,
                pathname="test.py", lineno=1, msg="failed", args=(),
                exc_info=sys.exc_info(),
            )
        parsed = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in parsed["exception"]

    def test_get_logger(self):
        from observation_engine.logging import get_logger
        log = get_logger("classifier")
        assert log.name == "observation_engine.classifier"

    def test_setup_logging_text(self):
        from observation_engine.logging import TextFormatter, setup_logging

        root = setup_logging(level="debug", fmt="text")
        assert root.name == "observation_engine"
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        root.handlers.clear()

    def test_setup_logging_json(self):
        from observation_engine.logging import JSONFormatter, setup_logging

        root = setup_logging(level="WARNING", fmt="json")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        root.handlers.clear()

    def test_decoy_hit_logged(self, caplog):
        from observation_engine.levels import get_level, score_level_submission

        with caplog.at_level(logging.INFO, logger="observation_engine"):
            score_level_submission("The father forgave him.", get_level("pack_a", 1))
        records = [r for r in caplog.records if r.getMessage() == "Decoy verb referenced"]
        assert records
        assert records[0].decoy_verb == "forgave"


class TestCalibrationCli:
    """run_calibration.py exit codes."""

    def test_passing_run(self, tmp_path, capsys):
        from run_calibration import main

        corpus = tmp_path / "corpus"
        corpus.mkdir()
        (corpus / "c.txt").write_text("---\nexpect: default\n\nJesus wept.\n---\n")
        with pytest.raises(SystemExit) as exc:
            main(["--corpus-dir", str(corpus), "--output-dir", str(tmp_path / "out")])
        assert exc.value.code == 0
        assert (tmp_path / "out" / "calibration_report.json").exists()
        assert "CALIBRATION REPORT" in capsys.readouterr().out

    def test_failing_run(self, tmp_path):
        from run_calibration import main

        corpus = tmp_path / "corpus"
        corpus.mkdir()
        (corpus / "c.txt").write_text("---\nexpect: COUNT\n\nJesus wept.\n---\n")
        with pytest.raises(SystemExit) as exc:
            main(["--corpus-dir", str(corpus), "--output-dir", str(tmp_path / "out")])
        assert exc.value.code == 2

    def test_json_output(self, tmp_path, capsys):
        from run_calibration import main

        corpus = tmp_path / "corpus"
        corpus.mkdir()
        (corpus / "c.txt").write_text("---\nexpect: default\n\nJesus wept.\n---\n")
        with pytest.raises(SystemExit):
            main(["--corpus-dir", str(corpus), "--output-dir", str(tmp_path / "out"),
                  "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["overall"]["accuracy"] == 1.0

    def test_missing_corpus(self, tmp_path):
        from run_calibration import main

        with pytest.raises(SystemExit) as exc:
            main(["--corpus-dir", str(tmp_path / "missing")])
        assert exc.value.code == 1
