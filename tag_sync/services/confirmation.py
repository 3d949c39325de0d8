# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Confirmation prompts for destructive operations."""

from typing import Callable, Protocol


class Confirmer(Protocol):
    """Anything that can answer a yes/no question."""

    def confirm(self, prompt: str) -> bool:
        ...


class InteractiveConfirmer:
    """Asks on the terminal; only 'y' or 'yes' confirms."""

    def __init__(self, input_func: Callable[[str], str] = input):
        self._input = input_func

    def confirm(self, prompt: str) -> bool:
        try:
            answer = self._input(f"{prompt} [y/N]: ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")


class StaticConfirmer:
    """Gives the same answer every time and remembers what it was asked."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.prompts: list[str] = []

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answer
