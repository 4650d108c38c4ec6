import logging

logger = logging.getLogger(__name__)

LOG_EVERY = 65536


class Progress:
    """Counter that logs every `log_every` increments of a named phase."""

    def __init__(self, name, total=None, log_every=LOG_EVERY):
        self.name = name
        self.total = total
        self.log_every = max(1, int(log_every))
        self.count = 0
        self._reported = 0

    def inc(self, amount=1):
        self.count += amount
        step = self.count // self.log_every
        if step > self._reported:
            self._reported = step
            if self.total:
                pct = 100.0 * self.count / self.total
                logger.debug("%s: %d/%d (%.1f%%)", self.name, self.count, self.total, pct)
            else:
                logger.debug("%s: %d", self.name, self.count)

    def __repr__(self):
        return f"Progress({self.name!r}, count={self.count}, total={self.total})"
