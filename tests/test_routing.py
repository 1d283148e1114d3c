"""ルートリダイレクト判定のユニットテスト"""

from canary.hashing import is_in_rollout
from canary.models import UserContext
from canary.routing import resolve_redirect
from canary.schema import FeatureFlagsConfig

CONFIG = FeatureFlagsConfig.model_validate(
    {
        "features": {
            "new-dashboard": {"enabled": True},
            "old-checkout": {"enabled": False},
            "internal-tools": {"enabled": False, "userGroups": ["internal"]},
            "route-flag": {"enabled": True, "rollout": 25},
        },
        "routes": {
            "/dashboard": {
                "feature": "new-dashboard",
                "enabled": "/dashboard-v2",
                "disabled": "/dashboard",
            },
            "/checkout": {"feature": "old-checkout", "enabled": "/checkout-v1", "disabled": "/checkout-v2"},
            "/tools": {"feature": "internal-tools", "enabled": "/tools-internal"},
            "/labs": {"requiresGroup": "beta", "fallback": "/waitlist", "beta": "/labs"},
            "/home": {"beta": "/home-beta", "internal": "/home-internal"},
            "/rollout": {"feature": "route-flag", "enabled": "/rollout-new", "disabled": "/rollout-old"},
            "/explicit": {
                "rules": [
                    {"kind": "group-gated", "group": "staff"},
                    {"kind": "group-route", "routes": {"staff": "/explicit-staff"}},
                ]
            },
        },
    }
)


def user(user_id: str = "user-1", *groups: str) -> UserContext:
    return UserContext(user_id=user_id, groups=groups)


def test_unconfigured_path() -> None:
    """ルート定義の無いパスはリダイレクトしない。"""
    assert resolve_redirect(CONFIG, "/about", user()) is None


def test_feature_enabled_redirect() -> None:
    """フィーチャー有効時は enabled のルートへ。"""
    assert resolve_redirect(CONFIG, "/dashboard", user()) == "/dashboard-v2"


def test_feature_disabled_redirect() -> None:
    """フィーチャー無効時は disabled のルートへ。"""
    assert resolve_redirect(CONFIG, "/checkout", user()) == "/checkout-v2"


def test_no_redirect_to_same_path() -> None:
    """行き先が現在のパスと同じならリダイレクトしない。"""
    config = FeatureFlagsConfig.model_validate(
        {
            "features": {"f": {"enabled": False}},
            "routes": {"/page": {"feature": "f", "enabled": "/page-v2", "disabled": "/page"}},
        }
    )
    assert resolve_redirect(config, "/page", user()) is None


def test_feature_gate_uses_group_bypass() -> None:
    """フィーチャー判定はグループバイパスを含む評価と一致すること。"""
    assert resolve_redirect(CONFIG, "/tools", user("user-1", "internal")) == "/tools-internal"
    assert resolve_redirect(CONFIG, "/tools", user("user-1")) is None


def test_feature_gate_uses_rollout() -> None:
    """ロールアウト判定に従ってリダイレクト先が変わること。"""
    for i in range(20):
        user_id = f"user-{i}"
        expected = "/rollout-new" if is_in_rollout(user_id, "route-flag", 25) else "/rollout-old"
        assert resolve_redirect(CONFIG, "/rollout", user(user_id)) == expected


def test_group_gated_non_member_goes_to_fallback() -> None:
    """必須グループ非所属は fallback へ。"""
    assert resolve_redirect(CONFIG, "/labs", user()) == "/waitlist"


def test_group_gated_member_passes() -> None:
    """必須グループ所属ならそのまま表示。"""
    assert resolve_redirect(CONFIG, "/labs", user("user-1", "beta")) is None


def test_group_route_first_matching_group() -> None:
    """所属グループ順で最初に一致したルートへ。"""
    assert resolve_redirect(CONFIG, "/home", user("user-1", "internal", "beta")) == "/home-internal"
    assert resolve_redirect(CONFIG, "/home", user("user-1", "beta")) == "/home-beta"
    assert resolve_redirect(CONFIG, "/home", user("user-1", "other")) is None


def test_explicit_rules_form() -> None:
    """kind 付きルール列でも同じように判定すること。"""
    assert resolve_redirect(CONFIG, "/explicit", user()) == "/"
    assert resolve_redirect(CONFIG, "/explicit", user("user-1", "staff")) == "/explicit-staff"


def test_required_group_route_wins_over_feature() -> None:
    """必須グループ所属者はフィーチャーより先にグループのルートへ。"""
    config = FeatureFlagsConfig.model_validate(
        {
            "features": {"f": {"enabled": True}},
            "routes": {
                "/p": {"requiresGroup": "beta", "beta": "/p-beta", "feature": "f", "enabled": "/p-new"},
            },
        }
    )
    assert resolve_redirect(config, "/p", user("user-1", "beta")) == "/p-beta"
    assert resolve_redirect(config, "/p", user("user-1")) == "/"
