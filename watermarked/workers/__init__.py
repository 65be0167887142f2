"""
Workers Module - Async Thread Management
========================================
Contains the QThread worker for non-blocking batch watermarking.
"""

from .watermark_worker import (
    WatermarkWorker, WatermarkJob, WatermarkResult, JobError, run_job
)

__all__ = [
    "WatermarkWorker",
    "WatermarkJob",
    "WatermarkResult",
    "JobError",
    "run_job",
]
