"""ユーザーコンテキストの永続化"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .hashing import generate_user_id
from .models import UserContext

logger = logging.getLogger(__name__)


class UserContextStore(ABC):
    """ユーザーコンテキストストア抽象基底クラス。

    評価ロジックはコンテキストを読むだけで、書き込みはすべてこのストアが担う。
    """

    @abstractmethod
    async def get(self, user_id: str | None) -> UserContext:
        """コンテキストを取得する。未知の ID は空のコンテキスト、None は新規 ID を発行する。"""
        ...

    @abstractmethod
    async def save(self, context: UserContext) -> None:
        ...

    async def join_group(self, user_id: str, group: str) -> UserContext:
        """ユーザーをグループに追加する。既に所属していれば何もしない。"""
        context = await self.get(user_id)
        updated = context.with_group(group)
        if updated is not context:
            await self.save(updated)
            logger.info("user joined group", extra={"user_id": user_id, "group": group})
        return updated

    async def leave_group(self, user_id: str, group: str) -> UserContext:
        """ユーザーをグループから外す。"""
        context = await self.get(user_id)
        updated = context.without_group(group)
        if updated != context:
            await self.save(updated)
            logger.info("user left group", extra={"user_id": user_id, "group": group})
        return updated

    async def assign_variant(self, user_id: str, feature_key: str, variant: str) -> UserContext:
        """バリアント割り当てを永続化する。"""
        context = await self.get(user_id)
        updated = context.with_variant(feature_key, variant)
        await self.save(updated)
        return updated


class InMemoryUserContextStore(UserContextStore):
    """テスト用インメモリストア。"""

    def __init__(self) -> None:
        self._contexts: dict[str, UserContext] = {}

    async def get(self, user_id: str | None) -> UserContext:
        if user_id is None:
            return UserContext(user_id=generate_user_id())
        return self._contexts.get(user_id) or UserContext(user_id=user_id)

    async def save(self, context: UserContext) -> None:
        self._contexts[context.user_id] = UserContext(
            user_id=context.user_id,
            groups=tuple(context.groups),
            variants=dict(context.variants),
        )
