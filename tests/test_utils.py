from unittest.mock import patch

import pytest
import typer

from accurapp_cli.utils import BANNER, CommandResult, abort, colored_banner, reindent, run_command


class TestRunCommand:

    def test_requires_a_directory(self):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            with pytest.raises(ValueError):
                run_command("git init", None)
        mock_run.assert_not_called()

    def test_splits_string_commands(self, tmp_path, completed):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            mock_run.return_value = completed(0)
            run_command("yarn add  --dev react", tmp_path)
        assert mock_run.call_args.args[0] == ["yarn", "add", "--dev", "react"]
        assert mock_run.call_args.kwargs["cwd"] == tmp_path

    def test_passes_argument_lists_untouched(self, tmp_path, completed):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            mock_run.return_value = completed(0)
            run_command(["git", "commit", "-m", "two words"], tmp_path)
        assert mock_run.call_args.args[0] == ["git", "commit", "-m", "two words"]

    def test_returns_result_on_success(self, tmp_path, completed):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            mock_run.return_value = completed(0)
            result = run_command("git init", tmp_path)
        assert result == CommandResult(status=0, signal=None)
        assert result.ok

    def test_aborts_on_non_zero_status(self, tmp_path, completed, capsys):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            mock_run.return_value = completed(128)
            with pytest.raises(typer.Exit) as excinfo:
                run_command("git init", tmp_path)
        assert excinfo.value.exit_code == 1
        assert "failed with error" in capsys.readouterr().err

    def test_aborts_on_signal(self, tmp_path, completed, capsys):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            mock_run.return_value = completed(-15)
            with pytest.raises(typer.Exit) as excinfo:
                run_command("git init", tmp_path)
        assert excinfo.value.exit_code == 1
        assert "SIGTERM" in capsys.readouterr().err

    def test_aborts_on_unnamed_signal(self, tmp_path, completed, capsys):
        with patch("accurapp_cli.utils.subprocess.run") as mock_run:
            mock_run.return_value = completed(-40)
            with pytest.raises(typer.Exit) as excinfo:
                run_command("yarn add react", tmp_path)
        assert excinfo.value.exit_code == 1
        assert "signal 40" in capsys.readouterr().err

    def test_aborts_when_executable_is_missing(self, tmp_path):
        with patch("accurapp_cli.utils.subprocess.run", side_effect=FileNotFoundError("yarn")) as mock_run:
            with pytest.raises(typer.Exit) as excinfo:
                run_command("yarn add react", tmp_path)
        assert excinfo.value.exit_code == 1
        assert mock_run.call_count == 1


class TestCommandResult:

    def test_negative_return_code_is_a_signal(self):
        assert CommandResult.from_returncode(-9) == CommandResult(status=None, signal="SIGKILL")

    def test_unnamed_signal_falls_back_to_its_number(self):
        result = CommandResult.from_returncode(-40)
        assert result == CommandResult(status=None, signal="signal 40")
        assert not result.ok

    def test_non_zero_is_not_ok(self):
        assert not CommandResult.from_returncode(2).ok


class TestAbort:

    def test_uses_given_exit_code(self, capsys):
        with pytest.raises(typer.Exit) as excinfo:
            abort("boom", code=3)
        assert excinfo.value.exit_code == 3
        err = capsys.readouterr().err
        assert "boom" in err
        assert "Aborting." in err


class TestBanner:

    def test_keeps_the_art(self):
        assert colored_banner().plain == BANNER

    def test_colors_fills_and_strokes(self):
        banner = colored_banner(("yellow", "green"))
        styles = {str(span.style) for span in banner.spans}
        assert {"yellow", "green"} <= styles

    def test_draws_the_logo_before_the_name(self):
        top_row = BANNER.split("\n")[1]
        # "/" and four "|" strokes, then "/" and "|" again
        assert top_row.split() == ["$$\\"] * 7

    def test_indents_every_line(self):
        assert colored_banner(indent=4).plain == reindent(BANNER, 4)


class TestReindent:

    def test_prefixes_each_line(self):
        assert reindent("a\nb", 4) == "    a\n    b"

    def test_defaults_to_two_spaces(self):
        assert reindent("tip") == "  tip"

    def test_keeps_blank_lines(self):
        assert reindent("a\n\nb", 1) == " a\n \n b"
