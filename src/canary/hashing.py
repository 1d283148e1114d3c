"""決定的ハッシュによるロールアウト判定とバリアント割り当て"""

from __future__ import annotations

import math
import secrets
import time
from collections.abc import Sequence

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 0x01000193
_UINT32_MAX = 2**32

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _fnv1a32(data: bytes) -> int:
    hval = _FNV_OFFSET_BASIS
    for byte in data:
        hval ^= byte
        hval = (hval * _FNV_PRIME) % _UINT32_MAX
    return hval


def hash_string(value: str) -> float:
    """文字列を [0, 1) の値に写像する。

    FNV-1a (32bit) を UTF-8 バイト列に適用し 2**32 で正規化する。
    プロセスをまたいでも同じ入力なら同じ値を返す。
    """
    return _fnv1a32(value.encode("utf-8")) / _UINT32_MAX


def is_in_rollout(user_id: str, feature_key: str, rollout_percent: float) -> bool:
    """ユーザーがロールアウト対象に含まれるかを判定する。

    0% 以下は常に False、100% は常に True。
    """
    if rollout_percent <= 0:
        return False
    return hash_string(f"{user_id}:{feature_key}:rollout") * 100 <= rollout_percent


def assign_variant(
    user_id: str,
    feature_key: str,
    variants: Sequence[str],
    rollout_percent: float = 100,
) -> str | None:
    """ユーザーにバリアントを決定的に割り当てる。

    variants が空、またはロールアウト対象外の場合は None。
    ロールアウト判定とは別の名前空間 (":variant") でハッシュするため、
    ロールアウト対象かどうかとバリアントのバケットは相関しない。
    """
    if not variants:
        return None
    if not is_in_rollout(user_id, feature_key, rollout_percent):
        return None
    value = hash_string(f"{user_id}:{feature_key}:variant")
    return variants[math.floor(value * len(variants))]


def generate_user_id() -> str:
    """匿名ユーザー用の ID を生成する。"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(13))
    return f"user_{int(time.time() * 1000)}_{suffix}"
