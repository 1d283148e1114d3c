"""フィーチャーフラグ設定の型定義（pydantic BaseModel）"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
)

Percentage = Annotated[StrictInt, Field(ge=0, le=100)]


class FeatureDefinition(BaseModel):
    """単一フィーチャーの定義。"""

    model_config = _MODEL_CONFIG

    enabled: StrictBool
    rollout: Percentage | None = None
    variants: Annotated[tuple[StrictStr, ...], Field(min_length=1)] | None = None
    default_variant: StrictStr | None = None
    user_groups: frozenset[StrictStr] | None = None
    description: str = ""

    @property
    def effective_rollout(self) -> int:
        """rollout 未指定時は 100%。"""
        return 100 if self.rollout is None else self.rollout


class FeatureGatedRule(BaseModel):
    """フィーチャーの有効・無効でリダイレクト先を切り替えるルール。"""

    model_config = _MODEL_CONFIG

    kind: Literal["feature-gated"] = "feature-gated"
    feature: StrictStr
    enabled: StrictStr | None = None
    disabled: StrictStr | None = None


class GroupGatedRule(BaseModel):
    """グループ所属を必須とするルール。非所属ユーザーは fallback へ。"""

    model_config = _MODEL_CONFIG

    kind: Literal["group-gated"] = "group-gated"
    group: StrictStr
    fallback: StrictStr = "/"


class GroupRouteRule(BaseModel):
    """グループごとの専用ルート (group -> path)。"""

    model_config = _MODEL_CONFIG

    kind: Literal["group-route"] = "group-route"
    routes: dict[StrictStr, StrictStr]


RouteRule = Annotated[
    Union[FeatureGatedRule, GroupGatedRule, GroupRouteRule],
    Field(discriminator="kind"),
]

# フラット形式で予約されているキー。それ以外のキーはグループ名として扱う。
_FLAT_RESERVED_KEYS = frozenset(
    {"feature", "enabled", "disabled", "requiresGroup", "requires_group", "fallback", "description"}
)


def _flat_to_rules(raw: Mapping[str, Any]) -> list[dict[str, Any]]:
    rules: list[dict[str, Any]] = []
    group = raw.get("requiresGroup", raw.get("requires_group"))
    if group is not None:
        rules.append({"kind": "group-gated", "group": group, "fallback": raw.get("fallback", "/")})
        # 必須グループ自身のルートはフィーチャー判定より先に適用する
        if isinstance(raw.get(group), str):
            rules.append({"kind": "group-route", "routes": {group: raw[group]}})
    if "feature" in raw:
        rules.append(
            {
                "kind": "feature-gated",
                "feature": raw["feature"],
                "enabled": raw.get("enabled"),
                "disabled": raw.get("disabled"),
            }
        )
    group_routes = {k: v for k, v in raw.items() if k not in _FLAT_RESERVED_KEYS}
    if group_routes:
        rules.append({"kind": "group-route", "routes": group_routes})
    return rules


class RouteDefinition(BaseModel):
    """ルート単位のリダイレクト定義。rules は先頭から順に評価される。

    {"rules": [...]} 形式に加えて、feature / enabled / disabled /
    requiresGroup / fallback と任意のグループ名キーを並べたフラット形式も受け付ける。
    """

    model_config = _MODEL_CONFIG

    rules: tuple[RouteRule, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_form(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "rules" not in data:
            return {"rules": _flat_to_rules(data)}
        return data


class FeatureFlagsConfig(BaseModel):
    """検証済みの設定スナップショット。"""

    model_config = _MODEL_CONFIG

    features: dict[StrictStr, FeatureDefinition]
    routes: dict[StrictStr, RouteDefinition] = Field(default_factory=dict)

    @field_validator("routes", mode="before")
    @classmethod
    def _none_routes(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def _check_routes(self) -> FeatureFlagsConfig:
        for path, route in self.routes.items():
            if not path.startswith("/"):
                raise ValueError(f'route path "{path}" must start with /')
            for rule in route.rules:
                if isinstance(rule, FeatureGatedRule) and rule.feature not in self.features:
                    raise ValueError(
                        f'route "{path}" references non-existent feature "{rule.feature}"'
                    )
        return self

    def get_feature(self, flag_key: str) -> FeatureDefinition | None:
        return self.features.get(flag_key)

    def get_route(self, path: str) -> RouteDefinition | None:
        return self.routes.get(path)


EMPTY_CONFIG = FeatureFlagsConfig(features={})
