"""Terminal prompt adapters for interactive and unattended runs."""

from __future__ import annotations

import sys
from typing import Final, TextIO

from .interfaces import OperatorPromptPort

_YES_ANSWERS: Final[frozenset[str]] = frozenset({"y", "yes"})
_NO_ANSWERS: Final[frozenset[str]] = frozenset({"n", "no"})


class ConsoleOperatorPrompt(OperatorPromptPort):
    """Prompt a human operator on the terminal."""

    def __init__(self, input_stream: TextIO | None = None, output_stream: TextIO | None = None):
        """Initialize console prompt.

        Args:
            input_stream: Answer source, defaults to stdin.
            output_stream: Question sink, defaults to stdout.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._input_stream = input_stream or sys.stdin
        self._output_stream = output_stream or sys.stdout

    def prompt_is_interactive(self) -> bool:
        return True

    def prompt_text(self, question: str, default: str) -> str:
        answer = self._prompt_read_line(f"{question} [{default}]: ")
        return answer or default

    def prompt_confirm(self, question: str, default: bool) -> bool:
        suffix = "[Y/n]" if default else "[y/N]"
        answer = self._prompt_read_line(f"{question} {suffix}: ").lower()
        if answer in _YES_ANSWERS:
            return True
        if answer in _NO_ANSWERS:
            return False
        return default

    def prompt_choice(self, question: str, options: tuple[str, ...], default_index: int) -> int:
        if not options:
            raise ValueError("options must not be empty")
        if not 0 <= default_index < len(options):
            raise ValueError("default_index out of range")

        self.prompt_announce(question)
        for option_index, option_label in enumerate(options, start=1):
            self.prompt_announce(f"  {option_index}) {option_label}")
        while True:
            answer = self._prompt_read_line(f"Choose [1-{len(options)}] [{default_index + 1}]: ")
            if not answer:
                return default_index
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return int(answer) - 1
            self.prompt_announce(f"Please enter a number between 1 and {len(options)}.")

    def prompt_announce(self, message: str) -> None:
        self._output_stream.write(f"{message}\n")
        self._output_stream.flush()

    def _prompt_read_line(self, prompt: str) -> str:
        self._output_stream.write(prompt)
        self._output_stream.flush()
        line = self._input_stream.readline()
        if line == "":
            raise EOFError("operator input closed while waiting for an answer")
        return line.strip()


class UnattendedOperatorPrompt(OperatorPromptPort):
    """Answer every prompt with its default; announcements still reach the operator."""

    def __init__(self, output_stream: TextIO | None = None):
        self._output_stream = output_stream or sys.stdout

    def prompt_is_interactive(self) -> bool:
        return False

    def prompt_text(self, question: str, default: str) -> str:
        return default

    def prompt_confirm(self, question: str, default: bool) -> bool:
        return default

    def prompt_choice(self, question: str, options: tuple[str, ...], default_index: int) -> int:
        return default_index

    def prompt_announce(self, message: str) -> None:
        self._output_stream.write(f"{message}\n")
        self._output_stream.flush()
