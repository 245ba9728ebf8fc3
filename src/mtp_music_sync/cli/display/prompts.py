"""Interactive prompts for CLI commands."""

from typing import List, Sequence, TypeVar

import click

from ...core.transfer import ERASE_PHRASE, Confirmer

T = TypeVar("T")


class ClickConfirmer(Confirmer):
    """Ask for confirmation on the terminal."""

    def __init__(self, assume_yes: bool = False) -> None:
        """Initialize confirmer.

        Args:
            assume_yes: Answer ordinary questions with yes without asking;
                the erase phrase is still prompted for
        """
        self.assume_yes = assume_yes

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question, defaulting to no."""
        if self.assume_yes:
            return True
        return click.confirm(message, default=False)

    def confirm_phrase(self, message: str, phrase: str = ERASE_PHRASE) -> bool:
        """Make the user type the phrase exactly."""
        click.secho(message, fg="red", bold=True)
        answer = click.prompt("Confirmation", default="", show_default=False)
        return answer.strip() == phrase


def choose_from_list(items: Sequence[T], prompt: str = "Select number") -> T:
    """Let the user pick one item by its 1-based number."""
    index = click.prompt(prompt, type=click.IntRange(1, len(items)))
    return items[index - 1]


def choose_many(items: Sequence[T], prompt: str = "Select numbers") -> List[T]:
    """Let the user pick several items, e.g. ``1,3,5-7``."""
    while True:
        answer = click.prompt(f"{prompt} (e.g. 1,3,5-7)")
        try:
            numbers = _parse_selection(answer, len(items))
        except ValueError as e:
            click.secho(str(e), fg="red")
            continue
        return [items[number - 1] for number in numbers]


def _parse_selection(answer: str, count: int) -> List[int]:
    numbers: List[int] = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start, end = int(start_text), int(end_text)
            selected = list(range(start, end + 1))
        else:
            selected = [int(part)]
        for number in selected:
            if not 1 <= number <= count:
                raise ValueError(f"Number out of range: {number}")
            if number not in numbers:
                numbers.append(number)
    if not numbers:
        raise ValueError("Nothing selected")
    return numbers
