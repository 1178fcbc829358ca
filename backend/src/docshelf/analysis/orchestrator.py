"""Analysis orchestrator - runs one analysis attempt and applies it atomically.

One attempt:
    load document -> skip if already analyzed (unless forced)
    -> classify (DocumentAnalyzer) -> reload + stale-write guard
    -> complete_analysis() committed as a single transaction

Failures raise AnalysisFailedError so the task queue can retry. On the final
attempt the orchestrator absorbs the error and commits fail_analysis() instead:
a document never stays pending once retries are exhausted.
"""

import logging
from enum import Enum
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..models.document import Document
from ..observability.metrics import (
    analysis_runs_total,
    analysis_terminal_failures_total,
    sensitivity_results_total,
    visibility_transitions_total,
)
from .analyzer import AnalysisFailedError, DocumentAnalyzer

logger = logging.getLogger(__name__)


class AnalysisRunStatus(str, Enum):
    """Outcome of a single orchestrated attempt."""
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    NOT_FOUND = "not_found"


class AnalysisOrchestrator:
    """Applies classifier results to documents with the merge rule.

    Args:
        session: SQLAlchemy session (one logical operation per commit)
        analyzer: DocumentAnalyzer providing normalized results
    """

    def __init__(self, session: Session, analyzer: DocumentAnalyzer):
        self.session = session
        self.analyzer = analyzer

    async def run(
        self,
        document_id: UUID,
        force_update: bool = False,
        final_attempt: bool = True,
    ) -> AnalysisRunStatus:
        """Run one analysis attempt for a document.

        Args:
            document_id: Document to analyze
            force_update: Overwrite user-authored title/description/tags
            final_attempt: Absorb failures into fail_analysis() instead of raising

        Returns:
            AnalysisRunStatus

        Raises:
            AnalysisFailedError: Classification failed and this is not the final attempt
        """
        document = self.session.get(Document, document_id)
        if document is None:
            logger.warning(f"Document {document_id} not found, skipping analysis")
            return AnalysisRunStatus.NOT_FOUND

        if document.ai_analyzed and not force_update:
            logger.info(
                f"Document {document_id} already analyzed, skipping",
                extra={"document_id": document_id},
            )
            return AnalysisRunStatus.SKIPPED

        logger.info(
            f"Starting AI analysis for document {document_id} "
            f"(original_name={document.original_name}, force_update={force_update})",
            extra={"document_id": document_id},
        )

        # End the read transaction before the classifier call; loaded attributes
        # survive because sessions are built with expire_on_commit=False.
        self.session.commit()

        try:
            outcome = await self.analyzer.classify(document)
        except AnalysisFailedError as e:
            strategy = e.strategy.value if e.strategy else "unknown"
            analysis_runs_total.labels(strategy=strategy, outcome="error").inc()
            if not final_attempt:
                logger.warning(
                    f"Analysis attempt failed for document {document_id}, will retry: {e}",
                    extra={"document_id": document_id, "strategy": strategy},
                )
                raise
            logger.error(
                f"Analysis failed for document {document_id} on final attempt: {e}",
                extra={"document_id": document_id, "strategy": strategy},
            )
            self.mark_failed(document_id)
            return AnalysisRunStatus.FAILED

        # Stale-write guard: another attempt may have finished while we waited
        document = self.session.get(
            Document, document_id, populate_existing=True, with_for_update=True
        )
        if document is None:
            logger.warning(f"Document {document_id} deleted during analysis, discarding result")
            return AnalysisRunStatus.NOT_FOUND

        if document.ai_analyzed and not force_update:
            self.session.rollback()
            analysis_runs_total.labels(strategy=outcome.strategy.value, outcome="skipped").inc()
            logger.info(
                f"Document {document_id} was analyzed concurrently, discarding stale result",
                extra={"document_id": document_id},
            )
            return AnalysisRunStatus.SKIPPED

        was_public = document.is_public()
        document.complete_analysis(outcome.result, force_update=force_update)
        self.session.commit()

        analysis_runs_total.labels(strategy=outcome.strategy.value, outcome="success").inc()
        sensitivity_results_total.labels(sensitivity=outcome.result.sensitivity.value).inc()
        if was_public and document.is_private():
            visibility_transitions_total.labels(transition="forced_unpublish").inc()
            logger.warning(
                f"Document {document_id} classified sensitive, made private",
                extra={"document_id": document_id},
            )

        logger.info(
            f"AI analysis completed for document {document_id} "
            f"(strategy={outcome.strategy.value}, sensitivity={outcome.result.sensitivity.value})",
            extra={"document_id": document_id, "strategy": outcome.strategy.value},
        )
        return AnalysisRunStatus.COMPLETED

    def mark_failed(self, document_id: UUID) -> Optional[Document]:
        return mark_analysis_failed(self.session, document_id)


def mark_analysis_failed(session: Session, document_id: UUID) -> Optional[Document]:
    """Terminal failure: commit fail_analysis() for document_id.

    Used on the final attempt and by the task queue's dead-letter hook.

    Returns:
        The updated document, or None if it no longer exists
    """
    session.rollback()
    document = session.get(Document, document_id, populate_existing=True)
    if document is None:
        return None

    document.fail_analysis()
    session.commit()
    analysis_terminal_failures_total.inc()
    logger.error(
        f"Document {document_id} marked analyzed without classification",
        extra={"document_id": document_id},
    )
    return document
