"""
One global short-name keyspace shared by links and hubs.

Both entity services go through Keyspace for availability checks and
name allocation, so the format rules and the reserved-word list exist in
exactly one place.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from linkhub_app.core.errors import NameGenerationError, NameUnavailableError
from linkhub_app.services.short_name_strategies import ShortNameStrategy
from linkhub_app.storage.strategies import StorageStrategy

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 50
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

RESERVED_NAMES = frozenset({
    "api", "admin", "www", "app", "mail", "ftp", "root",
    "about", "contact", "help", "support", "terms", "privacy",
    "login", "register", "signin", "signup", "auth", "oauth",
    "dashboard", "home", "index", "main", "blog", "news", "hub", "hubs", "h",
    # paths served by this app
    "health", "docs", "redoc", "openapi",
})


@dataclass(frozen=True)
class Availability:
    available: bool
    reason: Optional[str] = None


def check_name_format(name: Optional[str]) -> Optional[str]:
    """
    Storage-free rules, applied in order. Returns the first failure reason,
    or None when the name is well-formed and not reserved.
    """
    if not name or not name.strip():
        return "Name cannot be empty"

    name = name.strip()

    if len(name) < MIN_NAME_LENGTH:
        return f"Name must be at least {MIN_NAME_LENGTH} characters long"

    if len(name) > MAX_NAME_LENGTH:
        return f"Name must be at most {MAX_NAME_LENGTH} characters long"

    if not NAME_PATTERN.match(name):
        return "Name can only contain letters, numbers, hyphens, and underscores"

    if name.lower() in RESERVED_NAMES:
        return "This name is reserved and cannot be used"

    return None


class Keyspace:
    """Availability checks and name allocation across links and hubs"""

    def __init__(self, storage: StorageStrategy, strategy: ShortNameStrategy, max_attempts: int = 10):
        self.storage = storage
        self.strategy = strategy
        self.max_attempts = max_attempts

    def check_availability(self, name: Optional[str]) -> Availability:
        reason = check_name_format(name)
        if reason:
            return Availability(available=False, reason=reason)

        if self.storage.name_in_use(name.strip()):
            return Availability(available=False, reason="This name is already taken")

        return Availability(available=True)

    def generate_unique_name(self) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.strategy.generate()
            if self.check_availability(candidate).available:
                return candidate
            logger.debug("Generated name %r unavailable (attempt %d)", candidate, attempt)

        raise NameGenerationError(
            f"Unable to generate unique short name after {self.max_attempts} attempts"
        )

    def reserve(self, custom_name: Optional[str] = None) -> str:
        """
        Pick the name for a new link or hub.

        A custom name is trimmed and must be available; without one a
        random name is generated.

        Raises:
            NameUnavailableError: custom name rejected (reason in the message)
            NameGenerationError: no free random name within max_attempts
        """
        if custom_name is None:
            return self.generate_unique_name()

        availability = self.check_availability(custom_name)
        if not availability.available:
            raise NameUnavailableError(availability.reason or "This custom name is not available")
        return custom_name.strip()
