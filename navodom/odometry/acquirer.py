"""
Sample acquisition and deduplication.
"""

import logging
from typing import Optional

from ..sensors.records import RawSample, AlignmentStatus
from ..sensors.source import SampleSource

logger = logging.getLogger(__name__)

class SampleAcquirer:
    """
    Fetches the newest navigation sample each cycle.
    
    Every sample queued since the last cycle is drained and only the
    latest is kept. A cycle yields nothing when no sample arrived, when
    the device repeated its last solution, or when the solution has not
    converged yet. None of these are errors: the next cycle polls again.
    """
    
    def __init__(self, source: SampleSource):
        self.source = source
        self.last_timestamp: Optional[float] = None
        
        # Statistics
        self.accepted_count = 0
        self.empty_count = 0
        self.duplicate_count = 0
        self.unaligned_count = 0
        self.discarded_count = 0
    
    def _drain(self) -> Optional[RawSample]:
        latest = None
        received = 0
        
        while True:
            sample = self.source.get_sample()
            if sample is None:
                break
            received += 1
            logger.debug("got sample, time: %.3f", sample.timestamp)
            latest = sample
        
        if received > 1:
            self.discarded_count += received - 1
        return latest
    
    def acquire(self) -> Optional[RawSample]:
        """
        Get new navigation data.
        
        Returns:
            The newest sample if it is a new converged solution, None otherwise
        """
        sample = self._drain()
        
        if sample is None:
            self.empty_count += 1
            logger.debug("no sample queued")
            return None
        
        if sample.timestamp == self.last_timestamp:
            self.duplicate_count += 1
            logger.debug("no new solution since %.3f", sample.timestamp)
            return None
        
        if sample.alignment == AlignmentStatus.INVALID:
            self.unaligned_count += 1
            logger.debug("solution not aligned yet at %.3f", sample.timestamp)
            return None
        
        self.last_timestamp = sample.timestamp
        self.accepted_count += 1
        return sample
    
    def get_statistics(self) -> dict:
        """Get acquirer statistics."""
        return {
            'accepted': self.accepted_count,
            'empty': self.empty_count,
            'duplicates': self.duplicate_count,
            'unaligned': self.unaligned_count,
            'discarded': self.discarded_count,
            'last_timestamp': self.last_timestamp
        }
