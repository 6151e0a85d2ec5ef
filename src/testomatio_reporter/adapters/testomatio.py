"""Testomat.io reporter API adapter.

This module implements the Pipe protocol for the Testomat.io reporting
API. A run is created (or resumed) once, every finished test is posted to
it, and the run is closed with its final status.

Reporting never breaks a test run: HTTP failures are logged and the
affected call is skipped. Transient transport errors are retried first.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from ..config.schema import ReporterConfig
from ..models.report import ArtifactCredentials, RunData, TestData
from ..utils.async_helpers import ReportError, ReporterError, RunCreateError, api_retry
from ..utils.logging import bind_context, unbind_context
from ..utils.security import mask_config_value
from ..utils.text import is_valid_url

log = structlog.get_logger()

UNMATCHED_MESSAGE = "could not be matched"


def detect_build_url(environ: Mapping[str, str]) -> str | None:
    """Find the URL of the CI job that runs the tests.

    Args:
        environ: Environment variables of the CI job

    Returns:
        An http(s) URL, or None when no supported CI system is detected
    """
    build_url = (
        environ.get("BUILD_URL") or environ.get("CI_JOB_URL") or environ.get("CIRCLE_BUILD_URL")
    )

    # GitHub Actions
    if not build_url and environ.get("GITHUB_RUN_ID"):
        build_url = (
            f"{environ.get('GITHUB_SERVER_URL')}/{environ.get('GITHUB_REPOSITORY')}"
            f"/actions/runs/{environ['GITHUB_RUN_ID']}"
        )

    # Azure DevOps
    if not build_url and environ.get("SYSTEM_TEAMFOUNDATIONCOLLECTIONURI"):
        collection_uri = environ["SYSTEM_TEAMFOUNDATIONCOLLECTIONURI"]
        project = environ.get("SYSTEM_TEAMPROJECT")
        build_id = environ.get("BUILD_BUILDID")
        build_url = f"{collection_uri}/{project}/_build/results?buildId={build_id}"

    if build_url and not build_url.startswith("http"):
        return None
    return build_url


class TestomatioPipe:
    """Testomat.io pipe implementing the Pipe protocol.

    Example:
        config = ReporterConfig(api_key="tstmt_...")
        async with TestomatioPipe(config) as pipe:
            await pipe.create_run()
            await pipe.add_test(TestData(title="logs in", status=TestStatus.PASSED))
            await pipe.finish_run(RunData(status=RunStatus.PASSED))
    """

    __test__ = False

    def __init__(
        self,
        config: ReporterConfig,
        store: dict[str, Any] | None = None,
        client: httpx.AsyncClient | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the pipe.

        Args:
            config: Reporter configuration.
            store: Shared dict receiving run id and URLs for other components.
            client: HTTP client. If None, one is created for the configured URL.
            environ: Environment used to detect the CI build URL.
        """
        self._config = config
        self._environ = os.environ if environ is None else environ
        self.store: dict[str, Any] = store if store is not None else {}
        self.run_id = config.run_id
        self.run_url: str | None = None
        self.run_public_url: str | None = None
        self.artifacts: ArtifactCredentials | None = None
        self.has_unmatched_tests = False
        self.is_enabled = False

        log.debug(
            "testomatio_pipe_configured",
            api_key=mask_config_value("api_key", config.api_key) if config.api_key else None,
        )
        self._owns_client = False
        self._client = client
        if not config.api_key:
            return

        if not is_valid_url(config.url):
            log.error("report_url_invalid", url=config.url)
            return

        self.is_enabled = True
        log.debug("testomatio_pipe_enabled", url=config.url)
        if client is None:
            self._owns_client = True
            self._client = httpx.AsyncClient(base_url=config.url, timeout=config.timeout)

    @property
    def api_key(self) -> str:
        return (self._config.api_key or "").strip()

    async def __aenter__(self) -> TestomatioPipe:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this pipe created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    @api_retry
    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request to the reporter API, raising on 4xx/5xx."""
        if self._client is None:
            raise ReporterError("Testomat.io pipe is disabled, no HTTP client configured")
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        return response

    def _run_params(self) -> dict[str, Any]:
        params = {
            "ci_build_url": detect_build_url(self._environ),
            "parallel": self._config.parallel,
            "api_key": self.api_key,
            "group_title": self._config.group_title,
            "access_event": "publish" if self._config.publish else None,
            "env": self._config.env,
            "title": self._config.title,
            "shared_run": self._config.shared_run,
        }
        return {key: value for key, value in params.items() if value}

    def _apply_artifacts(self, data: Mapping[str, Any]) -> None:
        artifacts = data.get("artifacts")
        if not artifacts:
            return
        self.artifacts = ArtifactCredentials.from_response(artifacts)
        self.store["artifacts"] = self.artifacts
        log.info("artifact_credentials_obtained", bucket=self.artifacts.bucket)

    async def create_run(self) -> None:
        """Create a run on Testomat.io, or resume the configured run id.

        Raises:
            RunCreateError: If the configured run cannot be resumed.
        """
        if not self.is_enabled:
            return

        run_params = self._run_params()

        if self.run_id:
            try:
                response = await self._send(
                    "PUT", f"/api/reporter/{self.run_id}", json=run_params
                )
            except httpx.HTTPError as e:
                raise RunCreateError(f"Failed to resume run {self.run_id}: {e}") from e
            self._apply_artifacts(_json_body(response))
            bind_context(run_id=self.run_id)
            log.info("run_resumed")
            return

        try:
            response = await self._send("POST", "/api/reporter", json=run_params)
            data = response.json()
            run_id = data["uid"]
            run_path = "/".join(data["url"].split("/")[3:])
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            log.error(
                "run_create_failed",
                error=f"{type(e).__name__}: {e}",
                hint="check that the API key is valid, skipping report",
            )
            return

        self.run_id = run_id
        self.run_url = f"{self._config.url}/{run_path}"
        self.run_public_url = data.get("public_url")
        self._apply_artifacts(data)

        self.store["run_url"] = self.run_url
        self.store["run_public_url"] = self.run_public_url
        self.store["run_id"] = self.run_id
        bind_context(run_id=self.run_id)
        log.info("run_created", run_url=self.run_url)

    async def add_test(self, data: TestData | dict[str, Any]) -> httpx.Response | None:
        """Report one test result to the current run.

        Args:
            data: Test payload.

        Returns:
            API response, or None if the pipe is idle or the report failed.
        """
        if not self.is_enabled or not self.run_id:
            return None

        payload = data.to_payload() if isinstance(data, TestData) else dict(data)
        payload["api_key"] = self.api_key
        payload["create"] = self._config.create_new_tests
        title = payload.get("title") or ""

        try:
            return await self._post_test(payload)
        except ReportError as e:
            log.warning(
                "test_report_failed",
                title=title,
                status_code=e.status_code,
                error=str(e),
            )
            if UNMATCHED_MESSAGE in str(e):
                self.has_unmatched_tests = True
        return None

    async def _post_test(self, payload: dict[str, Any]) -> httpx.Response:
        """Post a test payload.

        Raises:
            ReportError: If the API rejects the test or cannot be reached.
        """
        try:
            return await self._send(
                "POST",
                f"/api/reporter/{self.run_id}/testrun",
                content=json.dumps(payload, default=str),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPStatusError as e:
            raise ReportError(
                _error_message(e.response) or str(e), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise ReportError(f"Request failed: {e}") from e

    async def finish_run(self, run: RunData) -> None:
        """Close the run with its final status.

        With `proceed` set the run stays open so that parallel jobs can keep
        reporting to it.
        """
        if not self.is_enabled:
            return

        status_event = run.status.status_event
        if run.parallel:
            status_event += "_parallel"

        try:
            if self.run_id and not self._config.proceed:
                await self._send(
                    "PUT",
                    f"/api/reporter/{self.run_id}",
                    json={
                        "api_key": self.api_key,
                        "status_event": status_event,
                        "tests": list(run.tests),
                    },
                )
                if self.run_url:
                    log.info("report_saved", report_url=self.run_url)
                if self.run_public_url:
                    log.info("report_public_url", public_url=self.run_public_url)
                unbind_context("run_id")
        except httpx.HTTPError as e:
            log.error("run_status_update_failed", run_id=self.run_id, error=str(e))
            return

        if self.run_url and self._config.proceed:
            log.info(
                "run_not_finished",
                reason="TESTOMATIO_PROCEED is set",
                report_url=self.run_url,
                hint=f"TESTOMATIO_RUN={self.run_id} testomatio-reporter finish",
            )

        if self.has_unmatched_tests:
            log.warning(
                "unmatched_tests_reported",
                hint=(
                    "re-run with TESTOMATIO_CREATE=1 to create missing tests, "
                    "or import tests first and assign test ids to them"
                ),
            )

    def __str__(self) -> str:
        return "Testomatio Reporter"


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else reads as empty."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get("message") or "")
    return ""
