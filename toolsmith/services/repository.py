"""
Artifact Repository

In-memory store for artifacts, generation requests and usage analytics.
Every read hands out a copy; only the repository mutates stored entities.
State lives for the lifetime of the process.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from toolsmith.core.exceptions import InternalInconsistencyException
from toolsmith.models import (
    Analytics,
    Artifact,
    ArtifactDraft,
    ArtifactMetadata,
    GenerationRequest,
    RequestStatus,
)

logger = logging.getLogger(__name__)

_IMMUTABLE_REQUEST_FIELDS = frozenset({"id", "spec", "created_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArtifactRepository:
    """
    Owns all artifacts, requests and the analytics aggregate.

    Mutations run under a single lock so that the name index, the id
    counters and the analytics counters are always updated together.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self._lock = threading.RLock()
        self._artifacts: Dict[int, Artifact] = {}
        self._artifact_ids_by_name: Dict[str, int] = {}
        self._requests: Dict[int, GenerationRequest] = {}
        self._next_artifact_id = 1
        self._next_request_id = 1
        self._completed_requests = 0
        self._failed_requests = 0
        self._analytics = Analytics(updated_at=self._clock())
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Generation requests
    # ------------------------------------------------------------------

    def create_request(self, spec: str, requester_id: Optional[int] = None) -> GenerationRequest:
        """Allocate a new request in ``pending`` with progress 0."""
        with self._lock:
            request = GenerationRequest(
                id=self._next_request_id,
                spec=spec,
                status=RequestStatus.PENDING,
                progress=0,
                requester_id=requester_id,
                created_at=self._clock(),
            )
            self._next_request_id += 1
            self._requests[request.id] = request
            return request.model_copy(deep=True)

    def update_request(self, request_id: int, **changes: Any) -> Optional[GenerationRequest]:
        """
        Merge ``changes`` into a stored request.

        The caller owns lifecycle rules (monotonic progress, single terminal
        transition). Returns ``None`` when the request does not exist.

        Raises:
            ValueError: If an immutable or unknown field is given.
        """
        immutable = _IMMUTABLE_REQUEST_FIELDS.intersection(changes)
        if immutable:
            raise ValueError(f"Cannot modify immutable request fields: {sorted(immutable)}")
        unknown = set(changes) - set(GenerationRequest.model_fields)
        if unknown:
            raise ValueError(f"Unknown request fields: {sorted(unknown)}")

        with self._lock:
            current = self._requests.get(request_id)
            if current is None:
                return None

            updated = GenerationRequest.model_validate({**current.model_dump(), **changes})
            self._requests[request_id] = updated

            if updated.status.is_terminal and not current.status.is_terminal:
                self._record_terminal(updated.status)

            return updated.model_copy(deep=True)

    def get_request(self, request_id: int) -> Optional[GenerationRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            return request.model_copy(deep=True) if request else None

    def list_requests_by_requester(self, requester_id: int) -> List[GenerationRequest]:
        with self._lock:
            return [
                request.model_copy(deep=True)
                for request in self._requests.values()
                if request.requester_id == requester_id
            ]

    def _record_terminal(self, status: RequestStatus) -> None:
        if status == RequestStatus.COMPLETED:
            self._completed_requests += 1
        else:
            self._failed_requests += 1
        finished = self._completed_requests + self._failed_requests
        self._analytics = self._analytics.model_copy(update={
            "success_rate": round(100 * self._completed_requests / finished),
            "updated_at": self._clock(),
        })

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def get_artifact(self, artifact_id: int) -> Optional[Artifact]:
        with self._lock:
            artifact = self._artifacts.get(artifact_id)
            return artifact.model_copy(deep=True) if artifact else None

    def find_artifact_by_name(self, name: str) -> Optional[Artifact]:
        """Exact, case-sensitive lookup used for deduplication."""
        with self._lock:
            artifact_id = self._artifact_ids_by_name.get(name)
            if artifact_id is None:
                return None
            return self._artifacts[artifact_id].model_copy(deep=True)

    def create_artifact(self, draft: ArtifactDraft) -> Artifact:
        """
        Persist a new artifact and bump the generation counters.

        Raises:
            InternalInconsistencyException: If an artifact with the same name exists.
        """
        with self._lock:
            if draft.name in self._artifact_ids_by_name:
                raise InternalInconsistencyException(
                    message=f"Artifact named '{draft.name}' already exists",
                    operation="create_artifact",
                )
            artifact = self._insert_artifact(draft.model_dump(exclude={"metadata"}), draft.metadata)
            self._analytics = self._analytics.model_copy(update={
                "tools_generated": self._analytics.tools_generated + 1,
                "total_requests": self._analytics.total_requests + 1,
                "updated_at": self._clock(),
            })
            self.logger.info(f"Created artifact {artifact.id}: {artifact.name}")
            return artifact.model_copy(deep=True)

    def find_or_create_artifact(self, draft: ArtifactDraft) -> Tuple[Artifact, bool]:
        """
        Resolve ``draft`` to the artifact carrying its name, creating it if absent.

        The lookup and the insert happen under one lock acquisition, so two
        concurrent calls for the same new name yield exactly one artifact.

        Returns:
            ``(artifact, created)`` where ``created`` is False for a reused artifact.
        """
        with self._lock:
            existing = self.find_artifact_by_name(draft.name)
            if existing is not None:
                return existing, False
            return self.create_artifact(draft), True

    def seed_artifacts(self, entries: Iterable[Dict[str, Any]]) -> int:
        """
        Load stock artifacts without touching the analytics counters.

        Entries are plain field mappings; a stock tool may have no body.
        Names already present are skipped.
        """
        seeded = 0
        with self._lock:
            for entry in entries:
                if entry["name"] in self._artifact_ids_by_name:
                    continue
                self._insert_artifact(entry)
                seeded += 1
        self.logger.info(f"Seeded {seeded} catalog artifacts")
        return seeded

    def record_use(self, artifact_id: int) -> bool:
        """Increment the usage count; a missing artifact is a logged no-op."""
        with self._lock:
            artifact = self._artifacts.get(artifact_id)
            if artifact is None:
                self.logger.debug(f"record_use ignored for unknown artifact {artifact_id}")
                return False
            self._artifacts[artifact_id] = artifact.model_copy(
                update={"usage_count": artifact.usage_count + 1}
            )
            return True

    def list_artifacts(self) -> List[Artifact]:
        with self._lock:
            return [artifact.model_copy(deep=True) for artifact in self._artifacts.values()]

    def list_by_category(self, category: str) -> List[Artifact]:
        with self._lock:
            return [
                artifact.model_copy(deep=True)
                for artifact in self._artifacts.values()
                if artifact.category == category
            ]

    def list_featured(self, limit: int) -> List[Artifact]:
        """Most used first; equal counts keep insertion order."""
        artifacts = sorted(self.list_artifacts(), key=lambda a: a.usage_count, reverse=True)
        return artifacts[:max(limit, 0)]

    def list_recent(self, limit: int) -> List[Artifact]:
        """Newest first; equal timestamps keep insertion order."""
        artifacts = sorted(self.list_artifacts(), key=lambda a: a.created_at, reverse=True)
        return artifacts[:max(limit, 0)]

    def search(self, query: str) -> List[Artifact]:
        """Case-insensitive substring match over name, description and category."""
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            artifact for artifact in self.list_artifacts()
            if needle in artifact.name.lower()
            or needle in artifact.description.lower()
            or needle in artifact.category.lower()
        ]

    def category_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        with self._lock:
            for artifact in self._artifacts.values():
                counts[artifact.category] = counts.get(artifact.category, 0) + 1
        return counts

    def _insert_artifact(self, fields: Dict[str, Any], metadata: Optional[ArtifactMetadata] = None) -> Artifact:
        artifact = Artifact.model_validate({
            **fields,
            "id": self._next_artifact_id,
            "metadata": metadata.model_copy(deep=True) if metadata else ArtifactMetadata(),
            "usage_count": 0,
            "created_at": self._clock(),
        })
        self._next_artifact_id += 1
        self._artifacts[artifact.id] = artifact
        self._artifact_ids_by_name[artifact.name] = artifact.id
        return artifact

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def get_analytics(self) -> Analytics:
        with self._lock:
            return self._analytics.model_copy(deep=True)

    def open_session(self) -> Analytics:
        """Count a newly connected progress observer."""
        with self._lock:
            self._analytics = self._analytics.model_copy(update={
                "active_sessions": self._analytics.active_sessions + 1,
                "updated_at": self._clock(),
            })
            return self._analytics.model_copy(deep=True)

    def close_session(self) -> Analytics:
        with self._lock:
            self._analytics = self._analytics.model_copy(update={
                "active_sessions": max(self._analytics.active_sessions - 1, 0),
                "updated_at": self._clock(),
            })
            return self._analytics.model_copy(deep=True)
