"""
In-process publish/subscribe message bus.

Topics keep the most recent messages up to their queue depth and hand
every published message to the topic's subscribers on the publisher's
thread.
"""

import json
import logging
import threading
from collections import deque
from typing import Any, Callable, Dict, List, Optional, TextIO

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]

class MessageBus:
    """Topic-based message bus."""
    
    def __init__(self, queue_depth: int = 1):
        self.queue_depth = max(1, int(queue_depth))
        self._queues: Dict[str, deque] = {}
        self._subscribers: Dict[str, List[Callback]] = {}
        self._taps: List[Callable[[str, Any], None]] = []
        self._lock = threading.Lock()
        self.publish_count = 0
        self.callback_errors = 0
    
    def advertise(self, topic: str, queue_depth: Optional[int] = None) -> 'Publisher':
        """Declare a topic and get a publisher for it."""
        depth = self.queue_depth if queue_depth is None else max(1, int(queue_depth))
        with self._lock:
            if topic not in self._queues:
                self._queues[topic] = deque(maxlen=depth)
        return Publisher(self, topic)
    
    def subscribe(self, topic: str, callback: Callback) -> None:
        """Call callback with each message published on topic."""
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)
    
    def add_tap(self, callback: Callable[[str, Any], None]) -> None:
        """Call callback with (topic, message) for every publish."""
        with self._lock:
            self._taps.append(callback)
    
    def publish(self, topic: str, message: Any) -> None:
        with self._lock:
            queue = self._queues.get(topic)
            if queue is None:
                queue = self._queues[topic] = deque(maxlen=self.queue_depth)
            queue.append(message)
            subscribers = list(self._subscribers.get(topic, ()))
            taps = list(self._taps)
            self.publish_count += 1
        
        for callback in subscribers:
            try:
                callback(message)
            except Exception:
                self.callback_errors += 1
                logger.exception("subscriber on %s failed", topic)
        for tap in taps:
            try:
                tap(topic, message)
            except Exception:
                self.callback_errors += 1
                logger.exception("tap on %s failed", topic)
    
    def latest(self, topic: str) -> Optional[Any]:
        """Most recent message on topic, or None."""
        with self._lock:
            queue = self._queues.get(topic)
            return queue[-1] if queue else None
    
    def pending(self, topic: str) -> List[Any]:
        """Messages still held in the topic queue, oldest first."""
        with self._lock:
            return list(self._queues.get(topic, ()))

class Publisher:
    """Publisher bound to one topic."""
    
    def __init__(self, bus: MessageBus, topic: str):
        self.bus = bus
        self.topic = topic
    
    def publish(self, message: Any) -> None:
        self.bus.publish(self.topic, message)

class JsonLinesSink:
    """
    Writes published messages as JSON lines.
    
    Messages must provide ``to_dict()``; each line carries the topic name
    under the ``topic`` key.
    """
    
    def __init__(self, stream: TextIO, topics: Optional[List[str]] = None):
        self.stream = stream
        self.topics = set(topics) if topics else None
        self.lines_written = 0
    
    def attach(self, bus: MessageBus) -> 'JsonLinesSink':
        bus.add_tap(self.write)
        return self
    
    def write(self, topic: str, message: Any) -> None:
        if self.topics is not None and topic not in self.topics:
            return
        to_dict = getattr(message, "to_dict", None)
        if to_dict is None:
            return
        record = {'topic': topic}
        record.update(to_dict())
        self.stream.write(json.dumps(record) + "\n")
        self.stream.flush()
        self.lines_written += 1
