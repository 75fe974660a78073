"""Open-file-descriptor ceiling adjustment before workers are spawned."""

from __future__ import annotations

import sys

from echoforge._internal.errors import ResourceLimitError
from echoforge._internal.logging import get_logger

logger = get_logger("engine.limits")

# stdin, stdout and stderr
_RESERVED_FDS = 3


class ResourceLimiter:
    """Ensures the process may hold one socket per connection.

    Only ever raises the soft ``RLIMIT_NOFILE`` limit, bounded by the hard
    limit. On platforms without the ``resource`` module the check is
    skipped.
    """

    def ensure_capacity(self, connections: int) -> None:
        """Make room for ``connections`` simultaneously open sockets.

        Args:
            connections: Number of sockets the run will hold open.

        Raises:
            ResourceLimitError: If the hard limit is too low, or the limits
                cannot be read or changed.
        """
        if sys.platform == "win32":
            logger.debug("RLIMIT_NOFILE not available on this platform, skipping")
            return

        import resource

        needed = connections + _RESERVED_FDS
        try:
            soft, hard = resource.getrlimit(resource.RLIMIT_NOFILE)
        except (OSError, ValueError) as exc:
            msg = f"getrlimit failed: {exc}"
            raise ResourceLimitError(msg) from exc

        if hard != resource.RLIM_INFINITY and hard < needed:
            msg = f"the hard limit of this process is only {hard}"
            raise ResourceLimitError(msg)

        if soft != resource.RLIM_INFINITY and soft < needed:
            new_soft = needed if hard == resource.RLIM_INFINITY else min(hard, needed)
            try:
                resource.setrlimit(resource.RLIMIT_NOFILE, (new_soft, hard))
            except (OSError, ValueError) as exc:
                msg = f"setrlimit failed: {exc}"
                raise ResourceLimitError(msg) from exc
            logger.debug("Raised RLIMIT_NOFILE soft limit from %d to %d", soft, new_soft)
