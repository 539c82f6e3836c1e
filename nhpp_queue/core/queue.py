"""Waiting line implementation."""

from collections import deque
from typing import Iterator, Optional

from nhpp_queue.core.base import Client


class WaitingLine:
    """FIFO line of clients that have arrived but not departed.

    The head of the line is the client in service whenever the line is non-empty.
    Arrivals are processed in time order, so insertion order is arrival order.
    """

    def __init__(self):
        self._line = deque()

    def join(self, client: Client) -> None:
        """Add an arriving client at the tail."""
        if self._line and client.arrival_time < self._line[-1].arrival_time:
            raise ValueError(
                f"Client {client.client_id} arrived at {client.arrival_time}, "
                f"before the tail of the line ({self._line[-1].arrival_time})"
            )
        self._line.append(client)

    def head(self) -> Optional[Client]:
        """The client at the front of the line (the one in service), if any."""
        if self._line:
            return self._line[0]
        return None

    def pop_head(self) -> Client:
        """Remove and return the client at the front of the line."""
        if not self._line:
            raise IndexError("pop from an empty waiting line")
        return self._line.popleft()

    def clear(self) -> None:
        self._line.clear()

    def __len__(self) -> int:
        return len(self._line)

    def __bool__(self) -> bool:
        return bool(self._line)

    def __iter__(self) -> Iterator[Client]:
        return iter(self._line)
