"""フィーチャーフラグ評価ロジック

優先順位: 存在確認 → グループバイパス → グローバル有効フラグ → ロールアウト → バリアント。
単体評価とバッチ評価は同じ evaluate() を通るため、結果は常に一致する。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .hashing import assign_variant, is_in_rollout
from .models import EvaluationReason, EvaluationResult, UserContext
from .schema import FeatureDefinition, FeatureFlagsConfig

logger = logging.getLogger(__name__)


def _resolve_variant(
    flag_key: str, definition: FeatureDefinition, user: UserContext
) -> tuple[str, bool]:
    """(variant, 今回割り当てたか) を返す。"""
    variants = definition.variants or ()
    persisted = user.assigned_variant(flag_key)
    if persisted is not None:
        return persisted, False
    # グループバイパスで到達した場合、ロールアウト外のバケットでもアクセスは取り消さない
    computed = assign_variant(user.user_id, flag_key, variants, definition.effective_rollout)
    return computed or definition.default_variant or variants[0], True


def _grant(flag_key: str, definition: FeatureDefinition, user: UserContext) -> EvaluationResult:
    if not definition.variants:
        return EvaluationResult(flag_key=flag_key, enabled=True, reason=EvaluationReason.ENABLED)
    variant, assigned = _resolve_variant(flag_key, definition, user)
    return EvaluationResult(
        flag_key=flag_key,
        enabled=True,
        variant=variant,
        reason=EvaluationReason.ENABLED_WITH_VARIANT,
        assigned=assigned,
    )


def _deny(flag_key: str, reason: EvaluationReason) -> EvaluationResult:
    return EvaluationResult(flag_key=flag_key, enabled=False, reason=reason)


def evaluate(
    flag_key: str, definition: FeatureDefinition | None, user: UserContext
) -> EvaluationResult:
    """単一フィーチャーを評価する。

    definition は検証済みであることを前提とし、入力を変更しない。
    例外は送出せず、すべての結果を EvaluationResult で表す。
    """
    if definition is None:
        result = _deny(flag_key, EvaluationReason.NOT_FOUND)
    elif definition.user_groups and not definition.user_groups.isdisjoint(user.groups):
        result = _grant(flag_key, definition, user)
    elif definition.user_groups and not definition.enabled:
        result = _deny(flag_key, EvaluationReason.NOT_IN_GROUP)
    elif not definition.enabled:
        result = _deny(flag_key, EvaluationReason.GLOBALLY_DISABLED)
    elif not is_in_rollout(user.user_id, flag_key, definition.effective_rollout):
        result = _deny(flag_key, EvaluationReason.NOT_IN_ROLLOUT)
    else:
        result = _grant(flag_key, definition, user)

    logger.debug(
        "feature evaluated",
        extra={
            "flag_key": flag_key,
            "user_id": user.user_id,
            "enabled": result.enabled,
            "variant": result.variant,
            "reason": result.reason.value,
        },
    )
    return result


def check_feature(config: FeatureFlagsConfig, flag_key: str, user: UserContext) -> EvaluationResult:
    """設定スナップショットからフィーチャーを引いて評価する。"""
    return evaluate(flag_key, config.get_feature(flag_key), user)


def check_features(
    config: FeatureFlagsConfig, flag_keys: Iterable[str], user: UserContext
) -> dict[str, EvaluationResult]:
    """複数フィーチャーを同一スナップショット・同一コンテキストで評価する。"""
    return {key: check_feature(config, key, user) for key in flag_keys}
