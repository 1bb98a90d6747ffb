"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from autocharts.core.performance import PerformanceMonitor

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """
    Timing statistics for every tracked operation (parse_file,
    profile_dataset, recommend_charts, request_duration).
    """
    return {'performance': PerformanceMonitor.get_all_metrics()}
