"""Fatal / non-fatal handling of transport errors."""

import logging

from pinbot.ports.inbound import TransportError

log = logging.getLogger(__name__)


class ErrorPolicy:
    """Decide whether the dispatch loop keeps consuming after a transport error.

    The transport (discord.py) owns reconnection; non-fatal errors are only
    logged. A fatal error ends the loop and, with it, the process. Restarting
    is left to the process supervisor.
    """

    def apply(self, error: TransportError) -> bool:
        if error.fatal:
            log.error("Fatal gateway error, shutting down: %s", error.detail)
            return False
        log.warning("Gateway error (recoverable): %s", error.detail)
        return True
