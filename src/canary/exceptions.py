"""canary ライブラリの例外型定義"""

from __future__ import annotations


class FeatureFlagError(Exception):
    """canary ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FeatureFlagErrorCodes:
    """FeatureFlagError のエラーコード定数。"""

    FLAG_NOT_FOUND: str = "FLAG_NOT_FOUND"
    CONNECTION_ERROR: str = "CONNECTION_ERROR"


class ConfigError(FeatureFlagError):
    """設定ファイルの読み込み・検証エラー。"""


class ConfigErrorCodes:
    """ConfigError のエラーコード定数。"""

    READ_FILE: str = "READ_FILE_ERROR"
    PARSE: str = "PARSE_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
