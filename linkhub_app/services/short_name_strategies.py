"""
Short name generation strategies.
Uses Strategy Pattern so the token format can change without touching the keyspace.
"""

import secrets
import string
from abc import ABC, abstractmethod


URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"


class ShortNameStrategy(ABC):
    """Abstract base class for short name generation strategies"""

    @abstractmethod
    def generate(self) -> str:
        """
        Produce one candidate name.

        Candidates are not guaranteed unique; the keyspace checks and retries.
        """
        pass


class RandomShortNameStrategy(ShortNameStrategy):
    """
    Fixed-length random token drawn from a configurable alphabet.

    Uses the secrets module so names can't be predicted from earlier ones.
    """

    def __init__(self, length: int = 8, alphabet: str = URL_SAFE_ALPHABET):
        if length < 1:
            raise ValueError("length must be positive")
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        self.length = length
        self.alphabet = alphabet

    def generate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
