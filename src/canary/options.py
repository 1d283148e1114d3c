"""canary の初期化オプションとクライアント生成"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .client import FeatureFlagClient
from .logger import new_logger
from .provider import CachedConfigProvider, ConfigSource, FileConfigSource, StaticConfigSource
from .schema import EMPTY_CONFIG
from .store import InMemoryUserContextStore, UserContextStore

logger = logging.getLogger(__name__)


@dataclass
class CanaryOptions:
    """初期化オプション。

    config_source を指定した場合は config_path より優先される。
    どちらも無ければ空の設定で動作する。
    configure_logging を有効にすると new_logger でプロセス全体のログ設定を行う。
    debug / log_level / log_format はその場合のみ使われる。
    """

    config_path: Path | None = None
    config_source: ConfigSource | None = None
    cache_ttl: float = 300
    configure_logging: bool = False
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "json"
    persist_variants: bool = False


def _build_source(options: CanaryOptions) -> ConfigSource:
    if options.config_source is not None:
        return options.config_source
    if options.config_path is not None:
        return FileConfigSource(options.config_path)
    return StaticConfigSource(EMPTY_CONFIG)


def init_canary(
    options: CanaryOptions | None = None,
    store: UserContextStore | None = None,
) -> FeatureFlagClient:
    """オプションからクライアントを組み立てる。

    呼び出しごとに新しいクライアントを返す。ログ設定は configure_logging が
    有効な場合だけ変更する。
    """
    options = options or CanaryOptions()
    if options.configure_logging:
        new_logger(
            level="DEBUG" if options.debug else options.log_level,
            format=options.log_format,
        )
    provider = CachedConfigProvider(_build_source(options), ttl_seconds=options.cache_ttl)
    client = FeatureFlagClient(
        provider,
        store or InMemoryUserContextStore(),
        persist_variants=options.persist_variants,
    )
    logger.debug(
        "canary initialized",
        extra={"cache_ttl": options.cache_ttl, "persist_variants": options.persist_variants},
    )
    return client
