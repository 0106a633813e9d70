"""Pipeline execution primitives.

The orchestrator lives in `pdfaudify.pipeline.orchestrator` and is re-exported
from the top-level package.
"""

from .task_runner import BoundedTaskRunner, TaskJob

__all__ = ["BoundedTaskRunner", "TaskJob"]
