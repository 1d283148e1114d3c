"""FeatureFlagClient プロトコルと実装"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from . import evaluator, routing
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import EvaluationResult, UserContext
from .provider import CachedConfigProvider
from .schema import FeatureDefinition
from .store import UserContextStore

logger = logging.getLogger(__name__)


class FeatureFlagClientProtocol(Protocol):
    """フィーチャーフラグクライアントプロトコル。"""

    async def check_feature(self, flag_key: str, user_id: str | None) -> EvaluationResult: ...

    async def check_features(
        self, flag_keys: Iterable[str], user_id: str | None
    ) -> dict[str, EvaluationResult]: ...

    async def is_enabled(self, flag_key: str, user_id: str | None) -> bool: ...


class FeatureFlagClient:
    """設定プロバイダとユーザーストアを束ねるクライアント。

    評価そのものは evaluator の純粋関数で行い、ここでは入力の取得と
    （persist_variants が有効な場合の）バリアントの永続化だけを行う。
    """

    def __init__(
        self,
        provider: CachedConfigProvider,
        store: UserContextStore,
        persist_variants: bool = False,
    ) -> None:
        self._provider = provider
        self._store = store
        self._persist_variants = persist_variants

    async def _persist(self, user: UserContext, results: Iterable[EvaluationResult]) -> None:
        if not self._persist_variants:
            return
        for result in results:
            if result.assigned and result.variant is not None:
                await self._store.assign_variant(user.user_id, result.flag_key, result.variant)
                logger.debug(
                    "variant persisted",
                    extra={
                        "user_id": user.user_id,
                        "flag_key": result.flag_key,
                        "variant": result.variant,
                    },
                )

    async def check_feature(self, flag_key: str, user_id: str | None) -> EvaluationResult:
        config = await self._provider.snapshot()
        user = await self._store.get(user_id)
        result = evaluator.check_feature(config, flag_key, user)
        await self._persist(user, [result])
        return result

    async def check_features(
        self, flag_keys: Iterable[str], user_id: str | None
    ) -> dict[str, EvaluationResult]:
        """バッチ評価。スナップショットとコンテキストは一度だけ取得する。"""
        config = await self._provider.snapshot()
        user = await self._store.get(user_id)
        results = evaluator.check_features(config, flag_keys, user)
        await self._persist(user, results.values())
        return results

    async def is_enabled(self, flag_key: str, user_id: str | None) -> bool:
        result = await self.check_feature(flag_key, user_id)
        return result.enabled

    async def get_flag(self, flag_key: str) -> FeatureDefinition:
        definition = await self._provider.get_feature(flag_key)
        if definition is None:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.FLAG_NOT_FOUND,
                f"Feature flag not found: {flag_key}",
            )
        return definition

    async def get_user_info(self, user_id: str | None) -> UserContext:
        return await self._store.get(user_id)

    async def join_group(self, user_id: str | None, group: str) -> UserContext:
        """グループに参加する。user_id が None の場合は新しい ID を発行して保存する。"""
        if user_id is None:
            context = await self._store.get(None)
            await self._store.save(context)
            user_id = context.user_id
        return await self._store.join_group(user_id, group)

    async def leave_group(self, user_id: str, group: str) -> UserContext:
        return await self._store.leave_group(user_id, group)

    async def resolve_redirect(self, path: str, user_id: str | None) -> str | None:
        config = await self._provider.snapshot()
        user = await self._store.get(user_id)
        return routing.resolve_redirect(config, path, user)
