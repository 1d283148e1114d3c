"""フィーチャー・グループに基づくルートのリダイレクト判定"""

from __future__ import annotations

from .evaluator import check_feature
from .models import UserContext
from .schema import (
    FeatureFlagsConfig,
    FeatureGatedRule,
    GroupGatedRule,
    GroupRouteRule,
    RouteRule,
)


def _apply_rule(
    config: FeatureFlagsConfig, rule: RouteRule, path: str, user: UserContext
) -> str | None:
    if isinstance(rule, GroupGatedRule):
        return None if user.in_group(rule.group) else rule.fallback
    if isinstance(rule, FeatureGatedRule):
        result = check_feature(config, rule.feature, user)
        return rule.enabled if result.enabled else rule.disabled
    if isinstance(rule, GroupRouteRule):
        for group in user.groups:
            target = rule.routes.get(group)
            if target is not None and target != path:
                return target
        return None
    raise TypeError(f"unsupported route rule: {type(rule).__name__}")


def resolve_redirect(config: FeatureFlagsConfig, path: str, user: UserContext) -> str | None:
    """path に対するリダイレクト先を返す。リダイレクト不要なら None。

    ルールは定義順に評価し、path と異なる行き先を最初に返したルールが採用される。
    フィーチャー判定は evaluator と同じ優先順位で行う。
    """
    route = config.get_route(path)
    if route is None:
        return None
    for rule in route.rules:
        target = _apply_rule(config, rule, path, user)
        if target is not None and target != path:
            return target
    return None
