"""Tests for the on-device model provider."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from nutrition_insights.core.daily_insights import DownloadProgress, ModelStatus
from nutrition_insights.services.model_provider import LocalModelProvider

MODEL_BYTES = b"GGUF" * 4
DOWNLOAD_URL = "https://models.test/model.gguf"


def _transport(
    status_code: int = 200, requests: list | None = None, headers: dict | None = None
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if status_code != 200:
            return httpx.Response(status_code)
        return httpx.Response(200, headers=headers, content=MODEL_BYTES)

    return httpx.MockTransport(handler)


def _runtime_client(content: str | None = " Protein is on track. ") -> MagicMock:
    client = MagicMock()
    client.models.list = AsyncMock(return_value=[])
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
    )
    client.close = AsyncMock()
    return client


def _connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("GET", "http://127.0.0.1:8080/v1"))


@pytest.fixture
def model_path(tmp_path: Path) -> Path:
    return tmp_path / "models" / "model.gguf"


def _provider(model_path: Path, **kwargs) -> LocalModelProvider:
    kwargs.setdefault("transport", _transport())
    kwargs.setdefault("min_free_space_bytes", 0)
    kwargs.setdefault("enabled", True)
    return LocalModelProvider(
        model_path=model_path,
        download_url=DOWNLOAD_URL,
        chunk_size=4,
        **kwargs,
    )


class TestCapabilities:
    """Tests for capability and status checks."""

    async def test_disabled(self, model_path):
        provider = _provider(model_path, enabled=False)

        capability = await provider.check_capabilities()

        assert not capability.can_run
        assert capability.reason == "On-device model is disabled"
        assert await provider.get_status() == ModelStatus.unsupported

    async def test_not_enough_free_space(self, model_path):
        provider = _provider(model_path, min_free_space_bytes=10**18)

        capability = await provider.check_capabilities()

        assert not capability.can_run
        assert capability.reason.startswith("Not enough free storage")

    async def test_downloaded_file_skips_space_check(self, model_path):
        model_path.parent.mkdir(parents=True)
        model_path.write_bytes(MODEL_BYTES)
        provider = _provider(model_path, min_free_space_bytes=10**18)

        assert (await provider.check_capabilities()).can_run

    async def test_status_follows_file(self, model_path):
        provider = _provider(model_path)

        assert await provider.get_status() == ModelStatus.not_downloaded

        model_path.parent.mkdir(parents=True)
        model_path.write_bytes(MODEL_BYTES)

        assert await provider.get_status() == ModelStatus.ready


class TestDownload:
    """Tests for downloading the model file."""

    async def test_download_writes_file(self, model_path):
        provider = _provider(model_path)
        updates: list[DownloadProgress] = []

        result = await provider.download_model(updates.append)

        assert result.success
        assert model_path.read_bytes() == MODEL_BYTES
        assert not provider.partial_path.exists()
        assert updates[-1].percentage == 100
        assert updates[-1].bytes_downloaded == len(MODEL_BYTES)
        assert provider.progress == updates[-1]
        assert await provider.get_status() == ModelStatus.ready

    async def test_progress_is_throttled(self, model_path):
        ticks = iter([0.0, 0.1, 0.3, 0.7, 0.9, 1.0])
        provider = _provider(model_path, monotonic=lambda: next(ticks))
        updates: list[DownloadProgress] = []

        await provider.download_model(updates.append)

        assert [u.percentage for u in updates] == [25, 75, 100]
        assert updates[0].total_bytes == len(MODEL_BYTES)

    async def test_cancel_removes_partial_file(self, model_path):
        provider = _provider(model_path)
        cancelled: list[bool] = []

        def on_progress(progress: DownloadProgress) -> None:
            cancelled.append(provider.cancel_download())

        result = await provider.download_model(on_progress)

        assert not result.success
        assert result.cancelled
        assert result.error == "Download cancelled"
        assert cancelled == [True]
        assert not model_path.exists()
        assert not provider.partial_path.exists()
        assert not provider.is_downloading

    async def test_cancel_without_download(self, model_path):
        assert not _provider(model_path).cancel_download()

    async def test_http_error(self, model_path):
        provider = _provider(model_path, transport=_transport(status_code=500))

        result = await provider.download_model()

        assert not result.success
        assert not result.cancelled
        assert "500" in result.error
        assert not model_path.exists()
        assert not provider.partial_path.exists()

    async def test_malformed_content_length(self, model_path):
        transport = _transport(headers={"Content-Length": "sixteen"})
        provider = _provider(model_path, transport=transport)

        result = await provider.download_model()

        assert result.success
        assert model_path.read_bytes() == MODEL_BYTES
        assert provider.progress.percentage == 100

    async def test_existing_file_is_not_downloaded_again(self, model_path):
        model_path.parent.mkdir(parents=True)
        model_path.write_bytes(MODEL_BYTES)
        requests: list[httpx.Request] = []
        provider = _provider(model_path, transport=_transport(requests=requests))

        result = await provider.download_model()

        assert result.success
        assert requests == []

    async def test_unsupported_host(self, model_path):
        provider = _provider(model_path, enabled=False)

        result = await provider.download_model()

        assert not result.success
        assert result.error == "On-device model is disabled"


class TestRuntime:
    """Tests for loading the model and generating text."""

    @pytest.fixture
    def downloaded(self, model_path) -> Path:
        model_path.parent.mkdir(parents=True)
        model_path.write_bytes(MODEL_BYTES)
        return model_path

    async def test_initialize_before_download(self, model_path):
        factory = MagicMock()
        provider = _provider(model_path, client_factory=factory)

        assert not await provider.initialize()
        factory.assert_not_called()

    async def test_initialize_and_generate(self, downloaded):
        client = _runtime_client()
        provider = _provider(downloaded, client_factory=lambda: client)

        assert await provider.initialize()
        result = await provider.generate("system", "user", 200)

        assert result.success
        assert result.text == "Protein is on track."
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["max_tokens"] == 200
        assert kwargs["model"] == "model.gguf"
        assert kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    async def test_initialize_twice_reuses_client(self, downloaded):
        factory = MagicMock(return_value=_runtime_client())
        provider = _provider(downloaded, client_factory=factory)

        await provider.initialize()
        await provider.initialize()

        factory.assert_called_once()

    async def test_unreachable_runtime(self, downloaded):
        client = _runtime_client()
        client.models.list = AsyncMock(side_effect=_connection_error())
        provider = _provider(downloaded, client_factory=lambda: client)

        assert not await provider.initialize()
        client.close.assert_awaited_once()
        assert not provider.is_loaded
        assert await provider.get_status() == ModelStatus.error

    async def test_generate_without_load(self, downloaded):
        result = await _provider(downloaded).generate("system", "user", 200)

        assert not result.success
        assert result.error == "Model not loaded"

    async def test_generation_error(self, downloaded):
        client = _runtime_client()
        client.chat.completions.create = AsyncMock(side_effect=_connection_error())
        provider = _provider(downloaded, client_factory=lambda: client)
        await provider.initialize()

        result = await provider.generate("system", "user", 200)

        assert not result.success
        assert result.error

    async def test_empty_completion(self, downloaded):
        provider = _provider(downloaded, client_factory=lambda: _runtime_client(content=None))
        await provider.initialize()

        result = await provider.generate("system", "user", 200)

        assert result.success
        assert result.text == ""

    async def test_unload(self, downloaded):
        client = _runtime_client()
        provider = _provider(downloaded, client_factory=lambda: client)
        await provider.initialize()

        await provider.unload()

        client.close.assert_awaited_once()
        assert not provider.is_loaded
