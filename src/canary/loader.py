"""フィーチャーフラグ設定ファイル読み込み"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError, ConfigErrorCodes
from .schema import FeatureFlagsConfig


def _read_document(path: Path) -> Any:
    """YAML / JSON ファイルを読み込む。JSON は YAML のサブセットとして解析する。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read feature flags config: {path}",
            cause=e,
        ) from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE,
            message=f"Failed to parse feature flags config: {path}",
            cause=e,
        ) from e


def validate_config(data: Mapping[str, Any] | FeatureFlagsConfig) -> FeatureFlagsConfig:
    """生の設定データを検証して FeatureFlagsConfig を返す。

    Raises:
        ConfigError: 検証に失敗した場合 (VALIDATION_ERROR)
    """
    if isinstance(data, FeatureFlagsConfig):
        return data
    if not isinstance(data, Mapping):
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message="Invalid config: must be an object",
        )
    try:
        return FeatureFlagsConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Invalid config: {e}",
            cause=e,
        ) from e


define_config = validate_config


def load(path: Path) -> FeatureFlagsConfig:
    """設定ファイルを読み込んで FeatureFlagsConfig を返す。"""
    return validate_config(_read_document(path))
