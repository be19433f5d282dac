"""
Classification Orchestrator - owns the asynchronous life of each report's
risk classification.

Per report:
    pending -> classified    (assessment stored, alert policy applied)
    pending -> unclassified  (terminal, failure tag recorded and logged)

Guarantees:
- one classifier attempt per dispatched report (through the attempt policy)
- at most one assessment per report (store insert-if-absent)
- the assessment is stored before the alert policy runs
- classification failures never reach the submitter; they are logged and
  recorded on the report

Workers share nothing but the queue and the store.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Set
import asyncio
import logging

from app.core.settings import settings
from app.models.assessment import RiskAssessment
from app.models.report import ClassificationState, Report
from app.services.alert_emitter import AlertEmitter
from app.services.attempt_policy import AttemptPolicy, SingleAttemptPolicy
from app.services.errors import AlertWriteFailure, ClassifierError
from app.services.risk_classifier import RiskClassifier
from app.store.base import ReportStore
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

QUEUE_OVERFLOW = "QueueOverflow"


@dataclass
class ClassificationOutcome:
    report_id: str
    state: ClassificationState
    assessment: Optional[RiskAssessment] = None
    alert_id: Optional[str] = None
    error: Optional[str] = None


class ClassificationOrchestrator:

    def __init__(
        self,
        store: ReportStore,
        classifier: RiskClassifier,
        emitter: Optional[AlertEmitter] = None,
        policy: Optional[AttemptPolicy] = None,
        workers: Optional[int] = None,
        queue_size: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.classifier = classifier
        self.emitter = emitter or AlertEmitter(store, clock=clock)
        self.policy = policy or SingleAttemptPolicy()
        self.worker_count = max(1, workers if workers is not None else settings.CLASSIFICATION_WORKERS)
        self.queue_size = max(0, queue_size if queue_size is not None else settings.CLASSIFICATION_QUEUE_SIZE)
        self.clock = clock
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self._in_flight: Set[str] = set()

    # Lifecycle

    @property
    def running(self) -> bool:
        return bool(self._workers)

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._workers = [
            asyncio.create_task(self._worker(), name=f"classification-worker-{i}")
            for i in range(self.worker_count)
        ]
        logger.info(
            f"✅ Classification orchestrator started "
            f"({self.worker_count} workers, model: {self.classifier.model_name})"
        )

    async def stop(self, drain: bool = False) -> None:
        if not self.running:
            return
        if drain:
            await self._queue.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        self.classifier.shutdown()
        logger.info("Classification orchestrator stopped")

    async def join(self) -> None:
        """Wait until every dispatched report has been processed."""
        if self._queue is not None:
            await self._queue.join()

    # Dispatch

    def dispatch(self, report: Report) -> bool:
        """
        Queue a freshly stored report for classification. Never waits.

        Returns False when the queue is full. The caller then records the
        overflow with `record_overflow`, off the event loop.
        """
        if self._queue is None:
            raise RuntimeError("Classification orchestrator is not running")

        try:
            self._queue.put_nowait(report)
        except asyncio.QueueFull:
            logger.error(f"❌ Classification queue full, report {report.id} will not be classified")
            return False

        logger.debug(f"Report {report.id} queued for classification")
        return True

    async def record_overflow(self, report_id: str) -> None:
        await self._record_state(report_id, ClassificationState.UNCLASSIFIED, QUEUE_OVERFLOW)

    async def _worker(self) -> None:
        while True:
            report = await self._queue.get()
            try:
                await self.classify_report(report)
            except Exception:
                logger.exception(f"❌ Unexpected error while classifying report {report.id}")
            finally:
                self._queue.task_done()

    # Core workflow

    async def classify_report(self, report: Report) -> ClassificationOutcome:
        # One provider call per report id in this process; the store guards across processes
        if report.id in self._in_flight:
            logger.warning(f"⚠️ Report {report.id} is already being classified, skipping")
            return ClassificationOutcome(report.id, ClassificationState.PENDING)

        self._in_flight.add(report.id)
        try:
            return await self._classify(report)
        finally:
            self._in_flight.discard(report.id)

    async def _classify(self, report: Report) -> ClassificationOutcome:
        existing = await asyncio.to_thread(self.store.get_assessment, report.id)
        if existing is not None:
            logger.warning(f"⚠️ Report {report.id} already has an assessment, skipping classification")
            return ClassificationOutcome(report.id, ClassificationState.CLASSIFIED, assessment=existing)

        try:
            result = await self.policy.run(
                lambda: self.classifier.classify(
                    description=report.description,
                    severity=report.severity,
                    category=report.category,
                    submitted_at=report.created_at,
                )
            )
        except ClassifierError as e:
            logger.warning(f"⚠️ Classification failed for report {report.id}: {e.tag}: {e}")
            await self._record_state(report.id, ClassificationState.UNCLASSIFIED, e.tag)
            return ClassificationOutcome(report.id, ClassificationState.UNCLASSIFIED, error=e.tag)

        assessment = RiskAssessment.from_result(report.id, result, self.clock())
        created = await asyncio.to_thread(self.store.create_assessment, assessment)
        if not created:
            logger.warning(f"⚠️ Duplicate assessment write rejected for report {report.id}")
            stored = await asyncio.to_thread(self.store.get_assessment, report.id)
            return ClassificationOutcome(report.id, ClassificationState.CLASSIFIED, assessment=stored)

        await self._record_state(report.id, ClassificationState.CLASSIFIED)
        logger.info(
            f"✅ Report {report.id} classified: {assessment.risk_level.value} "
            f"({assessment.predicted_condition}, confidence {assessment.confidence:.2f})"
        )

        alert_id = None
        try:
            alert_id = await asyncio.to_thread(
                self.emitter.evaluate,
                assessment.risk_level,
                report.location,
                assessment.predicted_condition,
                report.id,
            )
        except AlertWriteFailure as e:
            logger.warning(f"⚠️ {e} (assessment for report {report.id} is kept)")

        return ClassificationOutcome(
            report.id,
            ClassificationState.CLASSIFIED,
            assessment=assessment,
            alert_id=alert_id,
        )

    async def _record_state(self, report_id: str, state: ClassificationState, error: Optional[str] = None) -> None:
        try:
            await asyncio.to_thread(self.store.set_classification, report_id, state, error)
        except Exception as e:
            logger.error(f"Failed to record classification state {state.value} for report {report_id}: {e}")
