"""Tests for the terminal prompter."""

from unittest.mock import patch

import pytest

from cli.prompter import TerminalPrompter
from gateway.errors import OptionValidationError


@pytest.fixture
def prompter():
    return TerminalPrompter()


class TestAskConfirm:
    """Tests for TerminalPrompter.ask_confirm."""

    def test_empty_answer_takes_default(self, prompter):
        with patch("cli.prompter.prompt", side_effect=["", ""]):
            assert prompter.ask_confirm("Enable?") is True
            assert prompter.ask_confirm("Enable?", default=False) is False

    @pytest.mark.parametrize("answer", ["y", "Yes", " YES "])
    def test_yes_answers(self, prompter, answer):
        with patch("cli.prompter.prompt", return_value=answer):
            assert prompter.ask_confirm("Enable?", default=False) is True

    @pytest.mark.parametrize("answer", ["n", "No", " no "])
    def test_no_answers(self, prompter, answer):
        with patch("cli.prompter.prompt", return_value=answer):
            assert prompter.ask_confirm("Enable?") is False

    def test_unrecognised_answer_asks_again(self, prompter):
        with patch("cli.prompter.prompt", side_effect=["maybe", "n"]) as mock_prompt, \
                patch("cli.prompter.console") as mock_console:
            assert prompter.ask_confirm("Enable?") is False

        assert mock_prompt.call_count == 2
        mock_console.print.assert_called_once()

    def test_hint_shows_default(self, prompter):
        with patch("cli.prompter.prompt", return_value="") as mock_prompt:
            prompter.ask_confirm("Enable?", default=False)

        assert "(y/N)" in mock_prompt.call_args.args[0].value


class TestAskText:
    """Tests for TerminalPrompter.ask_text."""

    def test_prefills_default(self, prompter):
        with patch("cli.prompter.prompt", return_value="30") as mock_prompt:
            assert prompter.ask_text("Set value for timeout [timeout]", "10") == "30"

        assert mock_prompt.call_args.kwargs["default"] == "10"

    def test_no_default_prefills_nothing(self, prompter):
        with patch("cli.prompter.prompt", return_value="") as mock_prompt:
            prompter.ask_text("Set value for prefix [prefix]")

        assert mock_prompt.call_args.kwargs["default"] == ""


class TestReportInvalid:
    """Tests for TerminalPrompter.report_invalid."""

    def test_message_is_escaped(self, prompter):
        with patch("cli.prompter.console") as mock_console:
            prompter.report_invalid(OptionValidationError("flag", "[flag] must be true or false"))

        printed = mock_console.print.call_args.args[0]
        assert "\\[flag]" in printed
