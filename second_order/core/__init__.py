"""Core crawler logic – worker pool, shared crawl state and storage."""

from second_order.core.crawler import Crawler, Job
from second_order.core.results import ResultStore
from second_order.core.storage import write_all_results
from second_order.core.tracker import WorkTracker
from second_order.core.visited import VisitedSet

__all__ = [
    "Crawler",
    "Job",
    "ResultStore",
    "VisitedSet",
    "WorkTracker",
    "write_all_results",
]
