"""On-device language model provider.

The model is a GGUF file downloaded once to local storage and served by
an OpenAI-compatible runtime on the loopback interface (for example
``llama-server``). The provider owns the download, the connection to the
runtime and the status the orchestrator consults before generating.

Failures never propagate: they are logged and reported through
``DownloadResult`` and ``GenerationResult``.
"""

import abc
import asyncio
import shutil
import time
from collections.abc import Callable
from pathlib import Path

import httpx
import openai

from nutrition_insights.config import settings
from nutrition_insights.core.daily_insights import (
    DownloadProgress,
    ModelDownloadCancelledError,
    ModelStatus,
)
from nutrition_insights.logging_config import get_logger
from nutrition_insights.schemas.model import (
    CapabilityResult,
    DownloadResult,
    GenerationResult,
)

logger = get_logger(__name__)

# Minimum spacing between progress updates
PROGRESS_INTERVAL_SECONDS = 0.5

DEFAULT_CHUNK_SIZE = 1024 * 1024

ProgressCallback = Callable[[DownloadProgress], None]


class ModelProvider(abc.ABC):
    """Contract the narrative generator relies on.

    Implementations decide how the model is stored and run; callers
    only see statuses and result objects.
    """

    progress: DownloadProgress | None = None

    @abc.abstractmethod
    async def check_capabilities(self) -> CapabilityResult:
        """Report whether the model can run here."""

    @abc.abstractmethod
    async def get_status(self) -> ModelStatus:
        """Report the current lifecycle status."""

    @abc.abstractmethod
    async def download_model(
        self, on_progress: ProgressCallback | None = None
    ) -> DownloadResult:
        """Fetch the model, reporting progress as it goes."""

    @abc.abstractmethod
    def cancel_download(self) -> bool:
        """Abort an in-flight download.

        Returns:
            True if a download was running
        """

    @abc.abstractmethod
    async def initialize(self) -> bool:
        """Load the model; a no-op success when already loaded or loading."""

    @abc.abstractmethod
    async def generate(
        self, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> GenerationResult:
        """Run one completion."""

    @abc.abstractmethod
    async def unload(self) -> None:
        """Release the loaded model."""


def _default_client_factory(runtime_url: str) -> Callable[[], openai.AsyncOpenAI]:
    def factory() -> openai.AsyncOpenAI:
        return openai.AsyncOpenAI(
            base_url=runtime_url,
            api_key="local",
            timeout=settings.model_runtime_timeout_seconds,
            max_retries=0,
        )

    return factory


def _declared_size(headers: httpx.Headers, default: int) -> int:
    """Content-Length when it is a plain integer, otherwise ``default``."""
    value = headers.get("content-length", "").strip()
    return int(value) if value.isdigit() else default


class LocalModelProvider(ModelProvider):
    """Model provider backed by a downloaded GGUF file and a local runtime."""

    def __init__(
        self,
        model_path: Path | None = None,
        download_url: str | None = None,
        runtime_url: str | None = None,
        *,
        enabled: bool | None = None,
        expected_size_bytes: int | None = None,
        min_free_space_bytes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client_factory: Callable[[], openai.AsyncOpenAI] | None = None,
        monotonic: Callable[[], float] = time.monotonic,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.model_path = model_path or Path(settings.model_dir) / settings.model_filename
        self.download_url = download_url or settings.model_download_url
        self.enabled = settings.model_enabled if enabled is None else enabled
        self.expected_size_bytes = expected_size_bytes or settings.model_expected_size_bytes
        self.min_free_space_bytes = (
            settings.model_min_free_space_bytes
            if min_free_space_bytes is None
            else min_free_space_bytes
        )
        self._transport = transport
        self._client_factory = client_factory or _default_client_factory(
            runtime_url or settings.model_runtime_url
        )
        self._monotonic = monotonic
        self._chunk_size = chunk_size

        self.progress = None
        self._client: openai.AsyncOpenAI | None = None
        self._cancel_event: asyncio.Event | None = None
        self._loading = False
        self._last_error: str | None = None

    @property
    def partial_path(self) -> Path:
        """Where an in-progress download is written."""
        return self.model_path.with_name(self.model_path.name + ".part")

    @property
    def is_downloading(self) -> bool:
        return self._cancel_event is not None

    @property
    def is_loaded(self) -> bool:
        return self._client is not None

    def _free_space(self) -> int:
        directory = self.model_path.parent
        while not directory.exists() and directory != directory.parent:
            directory = directory.parent
        return shutil.disk_usage(directory).free

    async def check_capabilities(self) -> CapabilityResult:
        """Check the feature flag, then free space unless the file is already here."""
        if not self.enabled:
            return CapabilityResult(can_run=False, reason="On-device model is disabled")
        if self.model_path.exists():
            return CapabilityResult(can_run=True)

        free = self._free_space()
        if free < self.min_free_space_bytes:
            return CapabilityResult(
                can_run=False,
                reason=(
                    f"Not enough free storage: {free // 1_000_000} MB available, "
                    f"{self.min_free_space_bytes // 1_000_000} MB needed"
                ),
            )
        return CapabilityResult(can_run=True)

    async def get_status(self) -> ModelStatus:
        if self.is_downloading:
            return ModelStatus.downloading
        if self._loading:
            return ModelStatus.loading
        if self.is_loaded:
            return ModelStatus.ready

        capability = await self.check_capabilities()
        if not capability.can_run:
            return ModelStatus.unsupported
        if self._last_error is not None:
            return ModelStatus.error
        if self.model_path.exists():
            return ModelStatus.ready
        return ModelStatus.not_downloaded

    def _build_progress(self, downloaded: int, total: int, elapsed: float) -> DownloadProgress:
        percentage = min(100, downloaded * 100 // total) if total > 0 else 0
        remaining_seconds = None
        if elapsed > 0 and downloaded > 0 and total >= downloaded:
            rate = downloaded / elapsed
            remaining_seconds = int((total - downloaded) / rate)
        return DownloadProgress(
            bytes_downloaded=downloaded,
            total_bytes=total,
            percentage=percentage,
            estimated_seconds_remaining=remaining_seconds,
        )

    def _publish(self, progress: DownloadProgress, on_progress: ProgressCallback | None) -> None:
        self.progress = progress
        if on_progress is not None:
            on_progress(progress)

    async def download_model(
        self, on_progress: ProgressCallback | None = None
    ) -> DownloadResult:
        """Stream the model file to disk.

        The body is written to a ``.part`` file that is renamed once
        complete. Cancellation is checked before every chunk, and the
        partial file is removed on any failure.

        Args:
            on_progress: Called with each progress update, at most every 500 ms

        Returns:
            DownloadResult describing the outcome
        """
        if self.is_downloading:
            return DownloadResult(success=False, error="Download already in progress")
        if self.model_path.exists():
            return DownloadResult(success=True)

        capability = await self.check_capabilities()
        if not capability.can_run:
            return DownloadResult(success=False, error=capability.reason)

        self._cancel_event = asyncio.Event()
        self._last_error = None
        partial = self.partial_path
        partial.parent.mkdir(parents=True, exist_ok=True)

        logger.info(
            "Model download started",
            url=self.download_url,
            destination=str(self.model_path),
        )
        started = self._monotonic()
        last_update: float | None = None
        downloaded = 0

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(30.0, read=None),
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", self.download_url) as response:
                    response.raise_for_status()
                    total = _declared_size(response.headers, self.expected_size_bytes)
                    with partial.open("wb") as handle:
                        async for chunk in response.aiter_bytes(self._chunk_size):
                            if self._cancel_event.is_set():
                                raise ModelDownloadCancelledError("Download cancelled")
                            handle.write(chunk)
                            downloaded += len(chunk)

                            now = self._monotonic()
                            if last_update is None or now - last_update >= PROGRESS_INTERVAL_SECONDS:
                                last_update = now
                                self._publish(
                                    self._build_progress(downloaded, total, now - started),
                                    on_progress,
                                )

            partial.replace(self.model_path)
            self._publish(
                DownloadProgress(
                    bytes_downloaded=downloaded,
                    total_bytes=max(total, downloaded),
                    percentage=100,
                    estimated_seconds_remaining=0,
                ),
                on_progress,
            )
            logger.info(
                "Model download finished",
                bytes_downloaded=downloaded,
                duration_seconds=round(self._monotonic() - started, 1),
            )
            return DownloadResult(success=True)

        except ModelDownloadCancelledError:
            logger.info("Model download cancelled", bytes_downloaded=downloaded)
            return DownloadResult(success=False, error="Download cancelled", cancelled=True)
        except (httpx.HTTPError, OSError) as e:
            logger.error("Model download failed", error=str(e), bytes_downloaded=downloaded)
            return DownloadResult(success=False, error=str(e))
        finally:
            self._cancel_event = None
            partial.unlink(missing_ok=True)

    def cancel_download(self) -> bool:
        if self._cancel_event is None:
            return False
        self._cancel_event.set()
        logger.info("Model download cancellation requested")
        return True

    async def initialize(self) -> bool:
        """Connect to the runtime serving the downloaded model.

        Returns:
            True when the model is loaded, already loaded, or loading
        """
        if self.is_loaded or self._loading:
            return True
        if not self.model_path.exists():
            logger.warning("Model initialize requested before download")
            return False

        self._loading = True
        client = self._client_factory()
        try:
            await client.models.list()
        except openai.OpenAIError as e:
            self._last_error = str(e)
            logger.error("Model runtime unreachable", error=str(e))
            await client.close()
            return False
        finally:
            self._loading = False

        self._client = client
        self._last_error = None
        logger.info("Model loaded", model=self.model_path.name)
        return True

    async def generate(
        self, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> GenerationResult:
        """Run one chat completion against the local runtime.

        Args:
            system_prompt: Voice and tone rules
            user_prompt: Question and data block
            max_tokens: Completion budget

        Returns:
            GenerationResult with the raw text on success
        """
        if self._client is None:
            return GenerationResult(success=False, error="Model not loaded")

        try:
            response = await self._client.chat.completions.create(
                model=self.model_path.name,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                temperature=settings.model_temperature,
                top_p=settings.model_top_p,
            )
        except openai.OpenAIError as e:
            logger.error("Local model generation failed", error=str(e))
            return GenerationResult(success=False, error=str(e))

        choice = response.choices[0] if response.choices else None
        content = choice.message.content or "" if choice else ""
        return GenerationResult(success=True, text=content.strip())

    async def unload(self) -> None:
        if self._client is None:
            return
        await self._client.close()
        self._client = None
        logger.info("Model unloaded")
