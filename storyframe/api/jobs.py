"""
In-memory generation jobs and their progress event streams.

Each POSTed form becomes a GenerationJob. The pipeline's progress callback
records every message on the job and fans it out to SSE subscribers. Jobs
live for the lifetime of the process only.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from storyframe.core.exceptions import StoryframeError
from storyframe.core.logging_config import get_logger, job_context
from storyframe.llm.gemini_client import GeminiClient
from storyframe.storyboard.models import GenerationRequest, Storyboard
from storyframe.storyboard.pipeline import generate_storyboard

logger = get_logger("api.jobs")

TERMINAL_EVENTS = ("complete", "error")
DEFAULT_MAX_JOBS = 50


class JobStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class SSEEvent(BaseModel):
    """SSE event structure."""
    event: str  # progress, complete, error
    data: dict


@dataclass
class GenerationJob:
    """One storyboard generation run."""
    job_id: str
    title: str
    status: str = JobStatus.PENDING
    message: Optional[str] = None
    messages: List[str] = field(default_factory=list)
    storyboard: Optional[Storyboard] = None
    error: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    events: List[SSEEvent] = field(default_factory=list, repr=False)
    _subscribers: List[asyncio.Queue] = field(default_factory=list, repr=False)

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.COMPLETE, JobStatus.FAILED)

    def emit(self, event_type: str, data: dict) -> None:
        """Record an event and push it to every live subscriber."""
        event = SSEEvent(event=event_type, data=data)
        self.events.append(event)
        for queue in self._subscribers:
            queue.put_nowait(event)

    def subscribe(self) -> asyncio.Queue:
        """Queue pre-filled with past events, then fed live ones."""
        queue: asyncio.Queue = asyncio.Queue()
        for event in self.events:
            queue.put_nowait(event)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def report_progress(self, message: str) -> None:
        """Progress callback handed to the pipeline."""
        self.message = message
        self.messages.append(message)
        self.emit("progress", {"message": message, "index": len(self.messages)})


class JobStore:
    """
    Process-local registry of generation jobs.

    Holds at most `max_jobs` entries. When full, the oldest finished jobs are
    dropped to make room; pending and running jobs are never evicted, so the
    store can exceed the cap while that many are in flight.
    """

    def __init__(self, max_jobs: int = DEFAULT_MAX_JOBS):
        if max_jobs < 1:
            raise ValueError(f"max_jobs must be at least 1, got {max_jobs}")
        self.max_jobs = max_jobs
        self._jobs: Dict[str, GenerationJob] = {}

    def create(self, title: str) -> GenerationJob:
        self._evict_finished()
        job = GenerationJob(job_id=uuid.uuid4().hex, title=title)
        self._jobs[job.job_id] = job
        return job

    def _evict_finished(self) -> None:
        excess = len(self._jobs) - self.max_jobs + 1
        if excess <= 0:
            return
        # Dicts keep insertion order, so this walks oldest first.
        stale = [job_id for job_id, job in self._jobs.items() if job.finished][:excess]
        for job_id in stale:
            del self._jobs[job_id]
        if stale:
            logger.debug(f"Evicted {len(stale)} finished job(s)")

    def get(self, job_id: str) -> Optional[GenerationJob]:
        return self._jobs.get(job_id)

    def __len__(self) -> int:
        return len(self._jobs)


async def run_generation_job(
    job: GenerationJob,
    request: GenerationRequest,
    client: GeminiClient,
    close_client: Callable = None,
) -> None:
    """Run the pipeline for `job`, recording the outcome on the job."""
    with job_context(job.job_id):
        job.status = JobStatus.RUNNING
        logger.info(f"Job started: '{job.title}'")

        try:
            job.storyboard = await generate_storyboard(request, on_progress=job.report_progress, client=client)
            job.status = JobStatus.COMPLETE
            job.emit("complete", {"job_id": job.job_id, "clips": job.storyboard.total_clips})
            logger.info("Job complete")
        except StoryframeError as e:
            _fail(job, e.message)
        except Exception as e:
            logger.exception("Job crashed")
            _fail(job, str(e) or e.__class__.__name__)
        finally:
            if close_client:
                await close_client()


def _fail(job: GenerationJob, error: str) -> None:
    job.status = JobStatus.FAILED
    job.error = error
    job.emit("error", {"job_id": job.job_id, "message": error})
    logger.error(f"Job {job.job_id} failed: {error}")
