"""設定スナップショットの取得とキャッシュ"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any, Protocol, Union

import httpx

from .exceptions import ConfigError, ConfigErrorCodes, FeatureFlagError, FeatureFlagErrorCodes
from .loader import load, validate_config
from .schema import EMPTY_CONFIG, FeatureDefinition, FeatureFlagsConfig, RouteDefinition

logger = logging.getLogger(__name__)

RawConfig = Union[FeatureFlagsConfig, Mapping[str, Any]]
ConfigFactory = Callable[[], Union[RawConfig, Awaitable[RawConfig]]]


class ConfigSource(Protocol):
    """設定ソースプロトコル。"""

    async def load(self) -> FeatureFlagsConfig: ...


class StaticConfigSource:
    """固定の設定スナップショットを返すソース。"""

    def __init__(self, config: FeatureFlagsConfig) -> None:
        self._config = config

    async def load(self) -> FeatureFlagsConfig:
        return self._config


class FileConfigSource:
    """YAML / JSON ファイルから設定を読み込むソース。"""

    def __init__(self, path: Path) -> None:
        self._path = path

    async def load(self) -> FeatureFlagsConfig:
        return await asyncio.to_thread(load, self._path)


class CallableConfigSource:
    """任意の関数（同期・非同期）から設定を取得するソース。"""

    def __init__(self, factory: ConfigFactory) -> None:
        self._factory = factory

    async def load(self) -> FeatureFlagsConfig:
        result = self._factory()
        if inspect.isawaitable(result):
            result = await result
        return validate_config(result)


class HttpConfigSource:
    """HTTP で JSON 設定を取得するソース。"""

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = timeout

    async def load(self) -> FeatureFlagsConfig:
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(self._url, timeout=self._timeout)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise FeatureFlagError(
                code=FeatureFlagErrorCodes.CONNECTION_ERROR,
                message=f"Failed to fetch feature flags config from {self._url}: {e}",
                cause=e,
            ) from e
        try:
            data = resp.json()
        except ValueError as e:
            raise ConfigError(
                code=ConfigErrorCodes.PARSE,
                message=f"Invalid JSON from {self._url}",
                cause=e,
            ) from e
        return validate_config(data)


class CachedConfigProvider:
    """TTL キャッシュ付きの設定スナップショットプロバイダ。

    更新に失敗した場合はキャッシュ済みのスナップショットを返し、
    キャッシュが無ければ fallback を返す。
    """

    def __init__(
        self,
        source: ConfigSource,
        ttl_seconds: float = 300,
        fallback: FeatureFlagsConfig = EMPTY_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._ttl_seconds = ttl_seconds
        self._fallback = fallback
        self._clock = clock
        self._cached: FeatureFlagsConfig | None = None
        self._loaded_at: float = 0.0
        self._lock = asyncio.Lock()

    def _is_cache_valid(self) -> bool:
        return self._cached is not None and self._clock() - self._loaded_at < self._ttl_seconds

    async def snapshot(self) -> FeatureFlagsConfig:
        """現在の設定スナップショットを返す。"""
        if self._is_cache_valid():
            return self._cached  # type: ignore[return-value]
        async with self._lock:
            if self._is_cache_valid():
                return self._cached  # type: ignore[return-value]
            try:
                config = await self._source.load()
            except Exception as e:
                if self._cached is not None:
                    logger.warning(
                        "config refresh failed, using cached snapshot", extra={"error": str(e)}
                    )
                    return self._cached
                logger.error("config load failed, using fallback snapshot", extra={"error": str(e)})
                config = self._fallback
            self._cached = config
            self._loaded_at = self._clock()
            logger.debug("config snapshot loaded", extra={"features": len(config.features)})
            return config

    def invalidate(self) -> None:
        """キャッシュを破棄する。次回の snapshot() で再読み込みする。"""
        self._cached = None
        self._loaded_at = 0.0

    async def get_feature(self, flag_key: str) -> FeatureDefinition | None:
        return (await self.snapshot()).get_feature(flag_key)

    async def get_routes(self) -> dict[str, RouteDefinition]:
        return dict((await self.snapshot()).routes)
