"""Storyboards router for the Storyframe API.

Form submission, job status, SSE progress streaming and clip media downloads.
"""

import asyncio
import json
from typing import AsyncGenerator, List, Optional

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response, StreamingResponse
from pydantic import BaseModel

from storyframe.audio.pcm import pcm_to_wav
from storyframe.core.config import get_config
from storyframe.core.logging_config import get_logger
from storyframe.storyboard.export import clip_basename
from storyframe.storyboard.forms import build_request

from ..jobs import TERMINAL_EVENTS, GenerationJob, JobStatus, JobStore, run_generation_job

logger = get_logger("api.storyboards")

router = APIRouter()

KEEPALIVE_SECONDS = 30.0


class CreateJobResponse(BaseModel):
    job_id: str
    status: str


class JobStatusResponse(BaseModel):
    job_id: str
    title: str
    status: str  # pending, running, complete, failed
    message: Optional[str] = None
    messages: List[str] = []
    storyboard: Optional[dict] = None
    error: Optional[str] = None
    created_at: str


def _get_store(request: Request) -> JobStore:
    return request.app.state.jobs


def _get_job(request: Request, job_id: str) -> GenerationJob:
    job = _get_store(request).get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


async def _read_upload(upload: Optional[UploadFile]) -> Optional[bytes]:
    if upload is None or not upload.filename:
        return None
    return await upload.read()


@router.post("", response_model=CreateJobResponse, status_code=202)
async def create_storyboard(
    request: Request,
    background_tasks: BackgroundTasks,
    title: str = Form(""),
    description: str = Form(""),
    style: str = Form("Real"),
    aspect_ratio: str = Form("9:16"),
    character1: Optional[UploadFile] = File(None),
    character2: Optional[UploadFile] = File(None),
):
    """Validate the story form and start generation in the background."""
    config = get_config()
    generation_request = build_request(
        title=title,
        description=description,
        style=style,
        aspect_ratio=aspect_ratio,
        character1=await _read_upload(character1),
        character2=await _read_upload(character2),
        max_image_bytes=config.uploads.max_image_bytes,
    )

    client = request.app.state.client_factory()
    job = _get_store(request).create(generation_request.title)
    background_tasks.add_task(
        run_generation_job, job, generation_request, client, close_client=client.aclose
    )
    logger.info(f"Queued job {job.job_id} for '{generation_request.title}'")
    return CreateJobResponse(job_id=job.job_id, status=job.status)


@router.get("/{job_id}", response_model=JobStatusResponse)
async def get_storyboard(job_id: str, request: Request):
    """Job status, plus the storyboard once complete."""
    job = _get_job(request, job_id)
    return JobStatusResponse(
        job_id=job.job_id,
        title=job.title,
        status=job.status,
        message=job.message,
        messages=job.messages,
        storyboard=job.storyboard.model_dump() if job.storyboard else None,
        error=job.error,
        created_at=job.created_at,
    )


async def event_generator(job: GenerationJob, request: Request) -> AsyncGenerator[str, None]:
    """Generate SSE events for a job."""
    queue = job.subscribe()
    try:
        while True:
            if await request.is_disconnected():
                logger.info(f"SSE client disconnected from job {job.job_id}")
                break

            try:
                event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue

            yield f"event: {event.event}\ndata: {json.dumps(event.data)}\n\n"

            if event.event in TERMINAL_EVENTS:
                break
    finally:
        job.unsubscribe(queue)


@router.get("/{job_id}/events")
async def stream_storyboard_events(job_id: str, request: Request):
    """Stream progress for a job as Server-Sent Events.

    Event types:
    - progress: {"message", "index"} for each pipeline milestone
    - complete: storyboard ready
    - error: generation failed; {"message"} is human readable
    """
    job = _get_job(request, job_id)
    return StreamingResponse(
        event_generator(job, request),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


def _get_clip(request: Request, job_id: str, scene: int, clip: int):
    job = _get_job(request, job_id)
    if job.status != JobStatus.COMPLETE:
        raise HTTPException(status_code=409, detail=f"Storyboard not ready (status: {job.status})")
    found = job.storyboard.get_clip(scene, clip)
    if found is None:
        raise HTTPException(status_code=404, detail=f"No clip {clip} in scene {scene}")
    return found


@router.get("/{job_id}/scenes/{scene}/clips/{clip}/image.png")
async def get_clip_image(job_id: str, scene: int, clip: int, request: Request):
    """Download a clip image."""
    found = _get_clip(request, job_id, scene, clip)
    return Response(
        content=found.image_bytes(),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{clip_basename(scene, clip)}.png"'},
    )


@router.get("/{job_id}/scenes/{scene}/clips/{clip}/audio.wav")
async def get_clip_audio(job_id: str, scene: int, clip: int, request: Request):
    """Download a clip's narration as WAV."""
    found = _get_clip(request, job_id, scene, clip)
    wav = pcm_to_wav(found.audio_bytes(), get_config().audio.sample_rate)
    return Response(
        content=wav,
        media_type="audio/wav",
        headers={"Content-Disposition": f'attachment; filename="{clip_basename(scene, clip)}.wav"'},
    )
