import time
from typing import Dict, Any
from collections import deque

class MessageMetrics:
    """Collects message processing counters per exchange"""

    def __init__(self, window_size: int = 1000):
        self.window_size = window_size
        self.processing_times = deque(maxlen=window_size)
        self.processed: Dict[str, int] = {}
        self.failed: Dict[str, int] = {}
        self.start_time = time.time()

    async def record_message(self, exchange: str, success: bool, processing_time: float = 0.0):
        """Record the outcome of one consumed message"""
        self.processing_times.append(processing_time)

        if success:
            self.processed[exchange] = self.processed.get(exchange, 0) + 1
        else:
            self.failed[exchange] = self.failed.get(exchange, 0) + 1

    async def get_current_metrics(self) -> Dict[str, Any]:
        """Get current metrics"""
        exchanges = sorted(set(self.processed) | set(self.failed))
        return {
            'uptime_seconds': time.time() - self.start_time,
            'messages_processed': sum(self.processed.values()),
            'messages_failed': sum(self.failed.values()),
            'avg_processing_time': (
                sum(self.processing_times) / len(self.processing_times)
                if self.processing_times else 0.0
            ),
            'exchanges': {
                name: {
                    'processed': self.processed.get(name, 0),
                    'failed': self.failed.get(name, 0),
                }
                for name in exchanges
            },
        }

    async def reset(self):
        """Reset all counters"""
        self.processing_times.clear()
        self.processed.clear()
        self.failed.clear()
        self.start_time = time.time()

# Shared collector for all handlers in the process
message_metrics = MessageMetrics()
