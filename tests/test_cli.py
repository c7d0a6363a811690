"""Tests for the command-line entry point."""

from datetime import datetime
from unittest.mock import patch
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import main
from cronloop import JobError
from executors import ExecutionFailed, ExecutionResult


class TestMain:

    def test_preview(self, capsys):
        assert main.main(["0 0 * * * *", "--preview", "2"]) == 0

        lines = capsys.readouterr().out.split()
        runs = [datetime.fromisoformat(line) for line in lines]
        assert len(runs) == 2
        assert all(run.minute == 0 and run.second == 0 for run in runs)
        assert (runs[1] - runs[0]).total_seconds() == 3600

    def test_next_run_without_command(self, capsys):
        with patch("cronloop.core.system_clock", return_value=0):
            assert main.main(["0 1 * * * *"]) == 0

        assert capsys.readouterr().out.strip() == "1970-01-01T00:01:00+00:00"

    def test_check_match(self, capsys):
        assert main.main(["* * * * * *", "--check"]) == 0
        assert capsys.readouterr().out.strip() == "match"

    def test_check_no_match(self, capsys):
        with patch("cronloop.core.system_clock", return_value=0):
            assert main.main(["0 1 * * * *", "--check"]) == 1

        assert capsys.readouterr().out.strip() == "no match"

    def test_invalid_expression(self, capsys):
        assert main.main(["* * *", "--check"]) == 2
        assert "Invalid cron expression" in capsys.readouterr().err

    def test_invalid_timezone(self, capsys):
        assert main.main(["* * * * * *", "--timezone", "Nowhere/Land"]) == 2
        assert "Nowhere/Land" in capsys.readouterr().err

    def test_command_runs_scheduler(self):
        with patch("main.asyncio.run") as mock_run:
            assert main.main(["0 * * * * *", "--interval", "0", "--", "echo", "hi there"]) == 0

        mock_run.assert_called_once()
        mock_run.call_args.args[0].close()

    def test_log_job_error(self, caplog):
        result = ExecutionResult(success=False, started_at=datetime.now(), finished_at=datetime.now(),
                                 duration=0.0, error="Exit code: 3")
        error = JobError(60)
        error.__cause__ = ExecutionFailed(result)

        main.log_job_error(error)

        assert "Exit code: 3" in caplog.text
