"""
Sample source interface.

A source yields the samples the device has queued since the last call;
``get_sample`` returns None once the queue is empty and never blocks.
"""

import logging
import threading
from abc import ABC, abstractmethod
from queue import Queue, Empty, Full
from typing import Optional

from .records import RawSample
from ..math.constants import SOURCE_QUEUE_SIZE

logger = logging.getLogger(__name__)

class SampleSource(ABC):
    """Base class for navigation sample sources."""
    
    name = "source"
    
    @abstractmethod
    def connect(self) -> None:
        """
        Open the underlying device or recording.
        
        Raises:
            SourceUnavailableError: if it cannot be opened
        """
    
    @abstractmethod
    def get_sample(self) -> Optional[RawSample]:
        """Return the next queued sample, or None if none is queued."""
    
    def close(self) -> None:
        """Release the underlying device or recording."""
    
    def get_statistics(self) -> dict:
        return {'source': self.name}
    
    def __enter__(self) -> 'SampleSource':
        self.connect()
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

class QueuedSampleSource(SampleSource):
    """
    Source fed by a background reader thread.
    
    Subclasses implement ``_reader_loop``, calling ``_enqueue`` for each
    sample and checking ``self.running``.
    """
    
    def __init__(self, queue_size: int = SOURCE_QUEUE_SIZE):
        self.sample_queue = Queue(maxsize=queue_size)
        self.reader_thread = None
        self.running = False
        self._stop_event = threading.Event()
        
        # Statistics
        self.samples_received = 0
        self.samples_dropped = 0
    
    def _start_reader(self) -> None:
        self.running = True
        self._stop_event.clear()
        self.reader_thread = threading.Thread(
            target=self._reader_loop, name=f"{self.name}-reader", daemon=True)
        self.reader_thread.start()
    
    @abstractmethod
    def _reader_loop(self) -> None:
        """Read samples until ``running`` is cleared."""
    
    def _sleep(self, seconds: float) -> None:
        """Sleep on the reader thread, waking early on close."""
        self._stop_event.wait(seconds)
    
    def _enqueue(self, sample: RawSample) -> None:
        """Queue a sample, discarding the oldest one when full."""
        while True:
            try:
                self.sample_queue.put_nowait(sample)
                break
            except Full:
                try:
                    stale = self.sample_queue.get_nowait()
                except Empty:
                    continue
                self.samples_dropped += 1
                logger.debug("%s: queue full, dropping sample at %.3f",
                             self.name, stale.timestamp)
        self.samples_received += 1
    
    def get_sample(self) -> Optional[RawSample]:
        try:
            return self.sample_queue.get_nowait()
        except Empty:
            return None
    
    def flush_buffer(self) -> None:
        """Clear all buffered samples."""
        while True:
            try:
                self.sample_queue.get_nowait()
            except Empty:
                break
    
    def close(self) -> None:
        self.running = False
        self._stop_event.set()
        
        if self.reader_thread and self.reader_thread.is_alive():
            self.reader_thread.join(timeout=2.0)
        self.reader_thread = None
        
        self.flush_buffer()
    
    def get_statistics(self) -> dict:
        return {
            'source': self.name,
            'samples_received': self.samples_received,
            'samples_dropped': self.samples_dropped,
            'queue_size': self.sample_queue.qsize()
        }
