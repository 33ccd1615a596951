"""
Generation pipeline

Drives one submitted spec through
analyzing -> planning -> validating -> generating -> testing -> deploying -> completed,
writing progress to the repository and emitting one progress event per
transition. Every run ends in exactly one terminal state, ``completed`` or
``failed``, whether or not anyone is watching.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

from toolsmith.core.exceptions import (
    ComplianceBlockedException,
    InternalInconsistencyException,
    InvalidSpecException,
    ProviderException,
    ToolsmithException,
)
from toolsmith.models import (
    DEFAULT_CATEGORY,
    Artifact,
    ArtifactDraft,
    EnrichedSpec,
    GenerationProgress,
    GenerationRequest,
    PipelineStep,
    RequestStatus,
)
from toolsmith.services.artifact_provider import ArtifactProvider
from toolsmith.services.compliance import ComplianceGate
from toolsmith.services.enrichment import ArtifactEnricher
from toolsmith.services.progress import ProgressBroadcaster
from toolsmith.services.repository import ArtifactRepository
from toolsmith.services.requirement_analysis import RequirementAnalyzer


STAGE_PROGRESS: Dict[PipelineStep, int] = {
    PipelineStep.ANALYZING: 20,
    PipelineStep.PLANNING: 40,
    PipelineStep.VALIDATING: 50,
    PipelineStep.GENERATING: 70,
    PipelineStep.TESTING: 85,
    PipelineStep.DEPLOYING: 95,
    PipelineStep.COMPLETED: 100,
}

STAGE_MESSAGES: Dict[PipelineStep, str] = {
    PipelineStep.ANALYZING: "Understanding requirements...",
    PipelineStep.PLANNING: "Generating code architecture...",
    PipelineStep.VALIDATING: "Checking legal compliance...",
    PipelineStep.GENERATING: "Building tool with AI and API integrations...",
    PipelineStep.TESTING: "Testing API integrations and optimization...",
    PipelineStep.DEPLOYING: "Finalizing deployment...",
}

COMPLETED_MESSAGE = "Tool generated successfully!"
REUSED_MESSAGE = "Tool already exists and is ready to use!"
INTERRUPTED_MESSAGE = "Generation interrupted"

_STAGE_ORDER = list(STAGE_PROGRESS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _RunState:
    """Emission bookkeeping for a single request"""
    request_id: int
    spec: str
    requester_id: Optional[int] = None
    step: Optional[PipelineStep] = None
    progress: int = 0
    finished: bool = False


class GenerationPipeline:
    """
    Orchestrates generation runs as independent asyncio tasks.

    ``submit`` returns as soon as the request exists; the outcome is only
    observable through the repository and the progress broadcaster.
    """

    def __init__(
        self,
        repository: ArtifactRepository,
        gate: ComplianceGate,
        provider: ArtifactProvider,
        enricher: ArtifactEnricher,
        broadcaster: ProgressBroadcaster,
        analyzer: Optional[RequirementAnalyzer] = None,
        stage_delay: float = 0.5,
        provider_timeout: float = 90.0,
        provider_retries: int = 0,
        retry_delay: float = 1.0,
    ):
        self.repository = repository
        self.gate = gate
        self.provider = provider
        self.enricher = enricher
        self.broadcaster = broadcaster
        self.analyzer = analyzer or RequirementAnalyzer()
        self.stage_delay = stage_delay
        self.provider_timeout = provider_timeout
        self.provider_retries = provider_retries
        self.retry_delay = retry_delay
        self._tasks: Dict[int, asyncio.Task] = {}
        self._runs: Dict[int, _RunState] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Task management
    # ------------------------------------------------------------------

    async def submit(self, spec: str, requester_id: Optional[int] = None) -> GenerationRequest:
        """
        Create a request and start its run in the background.

        Raises:
            InvalidSpecException: If ``spec`` is empty or blank. No request is created.
        """
        if not isinstance(spec, str) or not spec.strip():
            raise InvalidSpecException(message="Tool description must not be empty", value=spec)

        request = self.repository.create_request(spec, requester_id=requester_id)
        request = self._update(request.id, status=RequestStatus.PROCESSING) or request

        run = _RunState(request_id=request.id, spec=spec, requester_id=requester_id)
        task = asyncio.create_task(self._run(run), name=f"generation-{request.id}")
        self._tasks[request.id] = task
        self._runs[request.id] = run
        task.add_done_callback(lambda _: self._forget(request.id))

        self.logger.info(f"Accepted generation request {request.id}")
        return request

    def task_for(self, request_id: int) -> Optional[asyncio.Task]:
        return self._tasks.get(request_id)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every submitted run has reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel in-flight runs; each is still recorded as failed."""
        pending = [(self._runs[request_id], task) for request_id, task in self._tasks.items()]
        if not pending:
            return
        self.logger.info(f"Cancelling {len(pending)} in-flight generation runs")
        for _, task in pending:
            task.cancel()
        await asyncio.gather(*(task for _, task in pending), return_exceptions=True)
        # a task cancelled before its first step never entered _run
        for run, _ in pending:
            self._fail(run, INTERRUPTED_MESSAGE)

    def _forget(self, request_id: int) -> None:
        self._tasks.pop(request_id, None)
        self._runs.pop(request_id, None)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def _run(self, run: _RunState) -> None:
        try:
            await self._execute(run)
        except ToolsmithException as e:
            self.logger.warning(f"Generation {run.request_id} failed: {e.message}", extra=e.to_log_dict())
            self._fail(run, e.message)
        except asyncio.CancelledError:
            self._fail(run, INTERRUPTED_MESSAGE)
            raise
        except Exception as e:
            self.logger.exception(f"Generation {run.request_id} failed unexpectedly: {e}")
            self._fail(run, str(e) or e.__class__.__name__)

    async def _execute(self, run: _RunState) -> None:
        self._advance(run, PipelineStep.ANALYZING)
        await self._pause()

        self._advance(run, PipelineStep.PLANNING)
        enriched = await self._plan(run.spec)
        await self._pause()

        self._advance(run, PipelineStep.VALIDATING)
        verdict = self.gate.check(run.spec)
        if not verdict.permitted:
            raise ComplianceBlockedException(message=verdict.reason, requested_name=run.spec)
        await self._pause()

        self._advance(run, PipelineStep.GENERATING)
        draft = await self._request_draft(enriched)
        category = draft.category if draft.has_known_category else enriched.category

        self._advance(run, PipelineStep.TESTING)
        draft = self.enricher.enrich(draft, category)
        if run.requester_id is not None:
            draft = draft.model_copy(update={"requester_id": run.requester_id})
        await self._pause()

        existing = self.repository.find_artifact_by_name(draft.name)
        if existing is not None:
            self.logger.info(f"Generation {run.request_id} reuses artifact {existing.id} ({existing.name})")
            self._complete(run, existing, REUSED_MESSAGE)
            return

        self._advance(run, PipelineStep.DEPLOYING)
        await self._pause()

        # no await between publishing and completing
        artifact, created = self.repository.find_or_create_artifact(draft)
        if created:
            self._complete(run, artifact, COMPLETED_MESSAGE)
        else:
            # another run published the same name after our lookup
            self._complete(run, artifact, REUSED_MESSAGE)

    async def _plan(self, spec: str) -> EnrichedSpec:
        try:
            return await self.analyzer.analyze(spec)
        except Exception as e:
            self.logger.warning(f"Requirement analysis failed, using defaults: {e}")
            return EnrichedSpec(original=spec, description=spec, category=DEFAULT_CATEGORY)

    async def _request_draft(self, spec: EnrichedSpec) -> ArtifactDraft:
        attempts = self.provider_retries + 1
        for attempt in range(attempts):
            try:
                return await self._request_draft_once(spec)
            except ProviderException as e:
                if attempt == attempts - 1:
                    raise
                delay = self.retry_delay * (2 ** attempt)
                self.logger.warning(
                    f"Provider failed (attempt {attempt + 1}/{attempts}), retrying in {delay:.2f}s: {e.message}"
                )
                await asyncio.sleep(delay)
        raise InternalInconsistencyException(message="Provider retry loop exhausted", operation="request_draft")

    async def _request_draft_once(self, spec: EnrichedSpec) -> ArtifactDraft:
        provider_name = getattr(self.provider, "name", self.provider.__class__.__name__)
        try:
            async with asyncio.timeout(self.provider_timeout):
                draft = await self.provider.request_draft(spec)
        except TimeoutError as e:
            raise ProviderException(
                message=f"Provider did not respond within {self.provider_timeout:g}s",
                provider=provider_name,
            ) from e
        except ProviderException:
            raise
        except Exception as e:
            raise ProviderException(message=str(e) or e.__class__.__name__, provider=provider_name) from e

        if isinstance(draft, ArtifactDraft):
            return draft
        try:
            return ArtifactDraft.model_validate(draft)
        except ValidationError as e:
            raise ProviderException(
                message="Provider draft is missing required fields",
                provider=provider_name,
            ) from e

    async def _pause(self) -> None:
        if self.stage_delay > 0:
            await asyncio.sleep(self.stage_delay)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _advance(self, run: _RunState, step: PipelineStep) -> None:
        progress = STAGE_PROGRESS[step]
        self.logger.info(f"Generation {run.request_id}: {step.value} ({progress}%)")
        self._update(run.request_id, progress=max(progress, run.progress))
        self._emit(run, step, progress, STAGE_MESSAGES[step])

    def _complete(self, run: _RunState, artifact: Artifact, message: str) -> None:
        self._update(
            run.request_id,
            status=RequestStatus.COMPLETED,
            progress=100,
            artifact_id=artifact.id,
            completed_at=_utcnow(),
        )
        self._emit(run, PipelineStep.COMPLETED, 100, message)
        self.logger.info(f"Generation {run.request_id} completed with artifact {artifact.id}")

    def _fail(self, run: _RunState, error_message: str) -> None:
        if run.finished:
            return
        self._update(
            run.request_id,
            status=RequestStatus.FAILED,
            error_message=error_message,
            completed_at=_utcnow(),
        )
        self._emit(run, PipelineStep.ERROR, run.progress, f"Generation failed: {error_message}")
        self.logger.error(f"Generation {run.request_id} failed: {error_message}")

    def _update(self, request_id: int, **changes: Any) -> Optional[GenerationRequest]:
        try:
            updated = self.repository.update_request(request_id, **changes)
        except ValueError as e:
            self.logger.error(f"Rejected update for request {request_id}: {e}")
            return None
        if updated is None:
            error = InternalInconsistencyException(
                message=f"Request {request_id} vanished during generation",
                operation="update_request",
            )
            self.logger.warning(error.message, extra=error.to_log_dict())
        return updated

    def _emit(self, run: _RunState, step: PipelineStep, progress: int, message: str) -> None:
        if run.finished:
            self.logger.debug(f"Suppressed {step.value} event after terminal state for request {run.request_id}")
            return
        if run.step is not None and not step.is_terminal:
            if _STAGE_ORDER.index(step) <= _STAGE_ORDER.index(run.step):
                self.logger.debug(f"Suppressed out-of-order {step.value} event for request {run.request_id}")
                return

        run.progress = max(progress, run.progress)
        run.step = step
        run.finished = step.is_terminal

        try:
            self.broadcaster.publish(
                run.request_id,
                GenerationProgress(step=step, progress=run.progress, message=message),
            )
        except Exception as e:
            self.logger.warning(f"Progress publish failed for request {run.request_id}: {e}")
