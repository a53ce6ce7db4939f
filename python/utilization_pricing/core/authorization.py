"""
Single-writer registration for curve state updates.

The first caller to register is bound permanently and receives a
capability token carrying the secret. The secret is issued exactly once:
later registrations by the bound caller succeed but return a token
without it. Only the original token may mutate adaptive curve state.
"""

import hmac
import logging
import secrets
import threading
from dataclasses import dataclass, field
from typing import Optional

from .validation import SetAlreadyRegisteredError, UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerToken:
    """Capability handle returned by registration (secret is None on repeat registration)."""
    caller_id: str
    secret: Optional[str] = field(default=None, repr=False)

    @property
    def is_capability(self) -> bool:
        return self.secret is not None


class CallerRegistry:
    """
    One-time binding of the caller allowed to update state.

    Registration is idempotent for the bound caller and rejects every other
    caller. Binding is serialized by a lock.
    """

    def __init__(self):
        self._bound: Optional[CallerToken] = None
        self._lock = threading.Lock()

    @property
    def registered_caller(self) -> Optional[str]:
        """Bound caller id, or None before the first registration."""
        bound = self._bound
        return bound.caller_id if bound is not None else None

    def register(self, caller_id: str) -> CallerToken:
        """
        Bind caller_id if nothing is bound yet.

        Args:
            caller_id: Identity of the pricing caller

        Returns:
            The capability token on first binding; a token with no secret
            when the bound caller registers again

        Raises:
            SetAlreadyRegisteredError: If a different caller is already bound
        """
        if not caller_id:
            raise ValueError("caller_id must be a non-empty string")

        with self._lock:
            if self._bound is None:
                self._bound = CallerToken(caller_id=caller_id, secret=secrets.token_hex(16))
                logger.info(f"Registered caller '{caller_id}'")
                return self._bound

            if self._bound.caller_id == caller_id:
                logger.debug(f"Caller '{caller_id}' already registered, secret not reissued")
                return CallerToken(caller_id=caller_id)

            logger.warning(
                f"Rejected registration of '{caller_id}': already bound to '{self._bound.caller_id}'"
            )
            raise SetAlreadyRegisteredError(
                f"Caller '{self._bound.caller_id}' is already registered"
            )

    def authorize(self, token: Optional[CallerToken]) -> None:
        """
        Check that token is the bound capability.

        Raises:
            UnauthorizedError: If nothing is registered or the token does not match
        """
        bound = self._bound
        if bound is None:
            raise UnauthorizedError("No caller registered")
        if (
            not isinstance(token, CallerToken)
            or not token.is_capability
            or token.caller_id != bound.caller_id
            or not hmac.compare_digest(token.secret.encode(), bound.secret.encode())
        ):
            caller = token.caller_id if isinstance(token, CallerToken) else None
            logger.warning(f"Unauthorized update attempt by {caller!r}")
            raise UnauthorizedError("Caller is not the registered caller")
