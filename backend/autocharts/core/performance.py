"""
Performance monitoring for engine operations and requests.
"""
import time
import inspect
import logging
import threading
from collections import defaultdict
from functools import wraps
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_METRIC = 1000

_metrics_lock = threading.Lock()
_metrics: Dict[str, List[Dict[str, Any]]] = defaultdict(list)


class PerformanceMonitor:
    """In-process store of timing samples keyed by metric name."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        with _metrics_lock:
            samples = _metrics[name]
            samples.append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(samples) > MAX_SAMPLES_PER_METRIC:
                del samples[:-MAX_SAMPLES_PER_METRIC]

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Summarize a metric.

        Returns:
            Dict with count, min, max, mean and p50/p95/p99, or None if no samples
        """
        with _metrics_lock:
            samples = _metrics.get(metric_name)
            if not samples:
                return None
            values = sorted(m['value'] for m in samples)

        count = len(values)
        return {
            'count': count,
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / count,
            'p50': values[count // 2],
            'p95': values[min(int(count * 0.95), count - 1)],
            'p99': values[min(int(count * 0.99), count - 1)],
        }

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        with _metrics_lock:
            names = list(_metrics.keys())
        return {name: PerformanceMonitor.get_stats(name) for name in names}

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def _record(metric_name: str, started: float, error: Optional[BaseException] = None):
    duration = time.time() - started
    if error is None:
        PerformanceMonitor.record_metric(metric_name, duration, {'status': 'success'})
        logger.debug(
            f"{metric_name} completed in {duration:.3f}s",
            extra={'metric': metric_name, 'duration': duration}
        )
    else:
        PerformanceMonitor.record_metric(metric_name, duration, {'status': 'error', 'error': str(error)})
        logger.error(
            f"{metric_name} failed after {duration:.3f}s: {error}",
            extra={'metric': metric_name, 'duration': duration}
        )


def track_performance(metric_name: str):
    """
    Decorator recording the wall time of each call under metric_name.

    Usage:
        @track_performance("profile_dataset")
        def profile_dataset(...):
            ...
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _record(metric_name, started, e)
                    raise
                _record(metric_name, started)
                return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record(metric_name, started, e)
                raise
            _record(metric_name, started)
            return result
        return sync_wrapper

    return decorator
