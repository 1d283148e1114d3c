"""評価コンテキストと評価結果のデータモデル"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum


class EvaluationReason(str, Enum):
    """評価結果の理由（診断用）。"""

    NOT_FOUND = "not found"
    NOT_IN_GROUP = "user not in required group"
    GLOBALLY_DISABLED = "globally disabled"
    NOT_IN_ROLLOUT = "not in rollout"
    ENABLED_WITH_VARIANT = "enabled with variant"
    ENABLED = "enabled"


@dataclass(frozen=True)
class UserContext:
    """ユーザーコンテキスト。

    groups は表示用に追加順を保持するが、評価では集合として扱う。
    variants は過去に永続化されたバリアント割り当て (feature_key -> variant)。
    """

    user_id: str
    groups: tuple[str, ...] = ()
    variants: Mapping[str, str] = field(default_factory=dict, hash=False)

    def in_group(self, group: str) -> bool:
        return group in self.groups

    def assigned_variant(self, feature_key: str) -> str | None:
        return self.variants.get(feature_key) or None

    def with_group(self, group: str) -> UserContext:
        """group を追加した新しいコンテキストを返す。既に所属していればそのまま。"""
        if group in self.groups:
            return self
        return replace(self, groups=(*self.groups, group))

    def without_group(self, group: str) -> UserContext:
        """group を除いた新しいコンテキストを返す。"""
        return replace(self, groups=tuple(g for g in self.groups if g != group))

    def with_variant(self, feature_key: str, variant: str) -> UserContext:
        """バリアント割り当てを追加した新しいコンテキストを返す。"""
        return replace(self, variants={**self.variants, feature_key: variant})


@dataclass(frozen=True)
class EvaluationResult:
    """フラグ評価結果。

    assigned はバリアントを今回計算した（永続化済みでない）場合に True。
    """

    flag_key: str
    enabled: bool
    variant: str | None = None
    reason: EvaluationReason = EvaluationReason.ENABLED
    assigned: bool = False
