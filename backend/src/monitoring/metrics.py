"""Prometheus metrics for the photo store"""

import logging
from prometheus_client import Counter, Histogram, Gauge

logger = logging.getLogger(__name__)


# Load metrics
photo_loads_total = Counter(
    'photo_loads_total',
    'Total number of photo snapshot loads',
    ['status']
)

photos_loaded = Gauge(
    'photos_loaded',
    'Number of photos in the most recently loaded snapshot'
)

# Mutation metrics
priority_mutations_total = Counter(
    'priority_mutations_total',
    'Total number of priority mutations',
    ['operation', 'status']
)

# Derivation metrics
visible_set_derive_seconds = Histogram(
    'visible_set_derive_seconds',
    'Time spent deriving the visible photo set',
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5]
)

visible_photos = Gauge(
    'visible_photos',
    'Number of photos in the most recently derived visible set'
)


class MetricsCollector:
    """Thin recording facade over the photo store metrics"""

    def record_load(self, status: str, total: int = 0):
        """Record a load attempt"""
        photo_loads_total.labels(status=status).inc()
        if status == "success":
            photos_loaded.set(total)

    def record_mutation(self, operation: str, status: str):
        """Record a priority mutation outcome"""
        priority_mutations_total.labels(operation=operation, status=status).inc()

    def record_derivation(self, duration_seconds: float, visible: int):
        """Record a visible set derivation"""
        visible_set_derive_seconds.observe(duration_seconds)
        visible_photos.set(visible)


# Global metrics collector instance
metrics_collector = MetricsCollector()
