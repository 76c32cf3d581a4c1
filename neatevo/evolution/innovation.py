"""
Innovation numbering for genes.

Every structural mutation draws fresh gene ids from an InnovationCounter that
is passed in explicitly, so independent experiments (and tests) never share
hidden state. A counter is not safe to share between threads; parallel
workers need their own counter or a lock around it.
"""


class InnovationCounter:
    """Monotonic source of gene ids, starting after last_id."""

    def __init__(self, last_id: int = 0):
        if last_id < 0:
            raise ValueError(f"last_id must be non-negative, not: {last_id}")
        self._last_id = last_id

    @property
    def last_id(self) -> int:
        """Most recently issued id (0 if none issued yet)."""
        return self._last_id

    def next_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def reset(self, last_id: int) -> None:
        """Restart numbering after last_id, e.g. when resuming a checkpoint."""
        if last_id < 0:
            raise ValueError(f"last_id must be non-negative, not: {last_id}")
        self._last_id = last_id

    def __repr__(self) -> str:
        return f"InnovationCounter(last_id={self._last_id})"
