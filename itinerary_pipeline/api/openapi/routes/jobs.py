"""Job processing endpoints."""

from fastapi import APIRouter, BackgroundTasks, Path, status

from itinerary_pipeline.api.dependencies import ExtractionServiceDep
from itinerary_pipeline.application.dtos.extraction import (
    ProcessJobAccepted,
    ProcessJobBody,
    ProcessJobRequest,
)

router = APIRouter()


@router.post(
    "/jobs/{job_id}/process",
    response_model=ProcessJobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Process a job",
    description=(
        "Start (or, with resume_chunk_index, continue) processing of an "
        "extraction job. The work runs after the response is sent; progress "
        "is read from the job document."
    ),
)
async def process_job(
    service: ExtractionServiceDep,
    background_tasks: BackgroundTasks,
    job_id: str = Path(min_length=1, description="Job ID"),
    body: ProcessJobBody | None = None,
) -> ProcessJobAccepted:
    """Accept an invocation and run it in the background."""
    resume_chunk_index = body.resume_chunk_index if body else None
    request = ProcessJobRequest(job_id=job_id, resume_chunk_index=resume_chunk_index)
    background_tasks.add_task(service.process, request)
    return ProcessJobAccepted(job_id=job_id, resume_chunk_index=resume_chunk_index)
