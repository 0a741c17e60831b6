"""
Ingestion routes: PDF upload and web page URL.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.deps import get_ingestion_service
from app.ingestion.service import IngestionService
from app.schemas.records import IngestResponse, ParseUrlRequest
from app.utils.logging import get_logger

logger = get_logger("eligibility.api.ingest")

router = APIRouter(tags=["Ingestion"])


@router.post("/parse-eligibility", response_model=IngestResponse)
async def parse_eligibility(
    file: UploadFile = File(...),
    service: IngestionService = Depends(get_ingestion_service),
):
    data = await file.read()
    logger.info("[INGEST_API] PDF upload | file=%s bytes=%s", file.filename, len(data))
    return service.ingest_pdf(file.filename or "upload.pdf", file.content_type, data)


@router.post("/parse-url", response_model=IngestResponse)
async def parse_url(
    request: ParseUrlRequest,
    service: IngestionService = Depends(get_ingestion_service),
):
    logger.info("[INGEST_API] URL | url=%s", request.url)
    return await service.ingest_url(request.url)
