"""Analysis worker - Celery task that classifies a document and applies the result.

Retry model: up to ANALYSIS_MAX_ATTEMPTS attempts with a fixed
ANALYSIS_RETRY_BACKOFF_SECONDS countdown. Non-final attempts re-raise
classification errors for retry; the final attempt commits fail_analysis().
AnalysisTask.on_failure is the dead-letter action for anything else.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict
from uuid import UUID

from celery import shared_task
from sqlalchemy.orm import Session

from ..analysis.analyzer import AnalysisFailedError, DocumentAnalyzer
from ..analysis.orchestrator import AnalysisOrchestrator, AnalysisRunStatus
from ..config import settings
from ..infrastructure.ai.openai_provider import OpenAIClassifier
from ..infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from ..infrastructure.storage.storage_config import storage_config_from_settings, validate_storage_config
from .base import AnalysisTask, get_worker_session, parse_document_id

logger = logging.getLogger(__name__)


@lru_cache()
def get_analyzer() -> DocumentAnalyzer:
    """Build the analyzer (S3 blob store + OpenAI classifier) once per worker process."""
    config = storage_config_from_settings(settings)
    validate_storage_config(config)
    storage = S3StorageAdapter(
        endpoint_url=config.endpoint_url,
        access_key=config.access_key,
        secret_key=config.secret_key,
        bucket_name=config.bucket_name,
        region=config.region,
    )
    classifier = OpenAIClassifier(
        api_key=settings.OPENAI_API_KEY,
        model=settings.AI_MODEL,
        timeout_seconds=settings.AI_TIMEOUT_SECONDS,
        max_tokens=settings.AI_MAX_TOKENS,
    )
    return DocumentAnalyzer(
        classifier=classifier,
        storage=storage,
        text_char_budget=settings.ANALYSIS_TEXT_CHAR_BUDGET,
    )


def run_analysis_attempt(
    session: Session,
    analyzer: DocumentAnalyzer,
    document_id: UUID,
    force_update: bool,
    final_attempt: bool,
) -> AnalysisRunStatus:
    """Run one orchestrated attempt synchronously (Celery tasks are sync).

    Raises:
        AnalysisFailedError: Classification failed on a non-final attempt
    """
    orchestrator = AnalysisOrchestrator(session, analyzer)
    return asyncio.run(
        orchestrator.run(document_id, force_update=force_update, final_attempt=final_attempt)
    )


@shared_task(
    name="analysis.analyze_document",
    base=AnalysisTask,
    bind=True,
    max_retries=max(settings.ANALYSIS_MAX_ATTEMPTS - 1, 0),
    default_retry_delay=settings.ANALYSIS_RETRY_BACKOFF_SECONDS,
)
def analyze_document_task(self, document_id: str, force_update: bool = False) -> Dict[str, Any]:
    """Classify a document and apply the result (background task).

    Args:
        document_id: UUID string of the document
        force_update: Overwrite user-authored title/description/tags

    Returns:
        Dict with status ('completed', 'skipped', 'failed', 'not_found') and document_id

    Example:
        analyze_document_task.delay(document_id=str(document.id), force_update=False)
    """
    doc_uuid = parse_document_id(document_id)
    attempt = self.request.retries + 1
    final_attempt = self.request.retries >= self.max_retries

    session = get_worker_session()
    try:
        status = run_analysis_attempt(
            session, get_analyzer(), doc_uuid, force_update, final_attempt
        )
    except AnalysisFailedError as e:
        logger.warning(
            f"Retrying analysis for document {document_id} "
            f"(attempt {attempt}/{self.max_retries + 1}) in {settings.ANALYSIS_RETRY_BACKOFF_SECONDS}s",
            extra={"document_id": document_id},
        )
        raise self.retry(exc=e, countdown=settings.ANALYSIS_RETRY_BACKOFF_SECONDS)
    finally:
        session.close()

    return {"status": status.value, "document_id": document_id, "attempt": attempt}


def enqueue_document_analysis(document_id: UUID, force_update: bool = False) -> None:
    """Schedule analysis for a document (used after upload and re-analysis requests)."""
    analyze_document_task.delay(document_id=str(document_id), force_update=force_update)
    logger.info(
        f"Enqueued analysis for document {document_id} (force_update={force_update})",
        extra={"document_id": document_id},
    )
