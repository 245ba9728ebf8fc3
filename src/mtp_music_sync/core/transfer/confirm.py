"""Confirmation hooks for destructive operations."""

from abc import ABC, abstractmethod

ERASE_PHRASE = "ERASE EVERYTHING"


class Confirmer(ABC):
    """Ask the user before something is deleted.

    ``confirm`` is the ordinary yes/no question. ``confirm_phrase`` is the
    stronger check required before a whole storage or music root is erased;
    implementations must make the user type ``phrase`` exactly.
    """

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def confirm_phrase(self, message: str, phrase: str = ERASE_PHRASE) -> bool:
        """Require the user to type ``phrase``."""


class AssumeYesConfirmer(Confirmer):
    """Confirmer for unattended runs.

    Ordinary questions are answered with yes. The typed phrase is only
    accepted when it was supplied up front.
    """

    def __init__(self, erase_phrase: str = "") -> None:
        """Initialize confirmer.

        Args:
            erase_phrase: Phrase given on the command line, if any
        """
        self.erase_phrase = erase_phrase

    def confirm(self, message: str) -> bool:
        """Accept without asking."""
        return True

    def confirm_phrase(self, message: str, phrase: str = ERASE_PHRASE) -> bool:
        """Accept only if the supplied phrase matches."""
        return self.erase_phrase == phrase
