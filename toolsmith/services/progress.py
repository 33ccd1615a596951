"""
Progress fan-out

Broadcasts generation progress to every connected observer. Each observer
owns a bounded asyncio queue; publishing never awaits, so a slow or stalled
observer only loses its own frames.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from toolsmith.models import GenerationProgress


def progress_frame(request_id: int, progress: GenerationProgress) -> Dict[str, Any]:
    """Wire frame pushed to progress stream clients."""
    return {
        "type": "progress",
        "requestId": request_id,
        "progress": {
            "step": progress.step.value,
            "progress": progress.progress,
            "message": progress.message,
        },
    }


class Subscription:
    """Handle returned by ``ProgressBroadcaster.subscribe``"""

    def __init__(self, queue_size: int, request_id: Optional[int] = None):
        self.request_id = request_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.dropped = 0
        self.closed = False

    def wants(self, request_id: int) -> bool:
        return self.request_id is None or self.request_id == request_id

    def offer(self, frame: Dict[str, Any]) -> bool:
        if self.closed:
            return False
        try:
            self.queue.put_nowait(frame)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            return False

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()


class ProgressBroadcaster:
    """
    Best-effort, at-most-once delivery of progress frames.

    No replay: a subscriber only sees frames published while it is
    subscribed. Publishing never raises into the caller.
    """

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscriptions: List[Subscription] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, request_id: Optional[int] = None) -> Subscription:
        """Join the broadcast group, optionally for a single request id."""
        subscription = Subscription(self.queue_size, request_id=request_id)
        self._subscriptions.append(subscription)
        self.logger.debug(f"Observer subscribed (request filter: {request_id}), total {self.subscriber_count}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.closed = True
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            self.logger.debug(f"Observer unsubscribed, total {self.subscriber_count}")

    def publish(self, request_id: int, progress: GenerationProgress) -> int:
        """
        Deliver one event to every current subscriber interested in it.

        Returns:
            Number of subscribers the frame was queued for.
        """
        frame = progress_frame(request_id, progress)
        delivered = 0
        # iterate a snapshot; observers may leave while we deliver
        for subscription in list(self._subscriptions):
            if not subscription.wants(request_id):
                continue
            try:
                if subscription.offer(frame):
                    delivered += 1
                else:
                    self.logger.debug(f"Dropped progress frame for request {request_id}: observer queue full")
            except Exception as e:
                self.logger.warning(f"Failed to deliver progress frame for request {request_id}: {e}")
        return delivered

    def close(self) -> None:
        for subscription in list(self._subscriptions):
            self.unsubscribe(subscription)
