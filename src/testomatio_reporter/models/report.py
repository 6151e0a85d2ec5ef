"""Data models for test runs reported to Testomat.io."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class TestStatus(Enum):
    """Outcome of a single test."""

    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class RunStatus(Enum):
    """Final status of a whole run."""

    PASSED = "passed"
    FAILED = "failed"
    FINISHED = "finished"

    @property
    def status_event(self) -> str:
        """Event name understood by the reporter API."""
        return {
            RunStatus.PASSED: "pass",
            RunStatus.FAILED: "fail",
            RunStatus.FINISHED: "finish",
        }[self]


@dataclass
class TestData:
    """Payload describing one executed test."""

    __test__ = False

    title: str
    status: TestStatus
    test_id: str | None = None
    suite_title: str | None = None
    suite_id: str | None = None
    message: str | None = None
    stack: str | None = None
    example: dict[str, Any] | None = None
    files: list[str] = field(default_factory=list)
    steps: str | None = None
    run_time: float | None = None
    code: str | None = None
    file: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the API, dropping unset values."""
        payload = asdict(self)
        payload["status"] = self.status.value
        if not payload["files"]:
            del payload["files"]
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class RunData:
    """Data sent when a run is finished."""

    status: RunStatus
    parallel: bool = False
    tests: tuple[dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ArtifactCredentials:
    """S3 storage settings handed out by Testomat.io for artifact uploads."""

    access_key_id: str | None = None
    secret_access_key: str | None = None
    region: str | None = None
    bucket: str | None = None
    endpoint: str | None = None
    presign: bool = False

    @classmethod
    def from_response(cls, artifacts: dict[str, Any]) -> "ArtifactCredentials":
        """Build from the `artifacts` object of a run response."""
        return cls(
            access_key_id=artifacts.get("ACCESS_KEY_ID"),
            secret_access_key=artifacts.get("SECRET_ACCESS_KEY"),
            region=artifacts.get("REGION"),
            bucket=artifacts.get("BUCKET"),
            endpoint=artifacts.get("ENDPOINT"),
            presign=bool(artifacts.get("presign")),
        )

    @property
    def is_private(self) -> bool:
        """Whether artifacts must be uploaded as private objects."""
        return self.presign
