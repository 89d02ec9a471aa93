"""The bot's own account id, learned from the gateway Ready event."""

import logging
from typing import Optional

log = logging.getLogger(__name__)


class SessionIdentity:
    """Single-writer holder for the bot's user id.

    Written by the dispatch loop on every Ready event and read by the same
    loop when filtering pin notices.
    """

    def __init__(self) -> None:
        self._user_id: Optional[int] = None

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @property
    def known(self) -> bool:
        return self._user_id is not None

    def update(self, user_id: int) -> None:
        if self._user_id is not None and self._user_id != user_id:
            log.info("Session identity changed: %s -> %s", self._user_id, user_id)
        self._user_id = user_id

    def is_self(self, author_id: int) -> bool:
        return self._user_id is not None and author_id == self._user_id
