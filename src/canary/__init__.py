"""canary feature flag library."""

from .client import FeatureFlagClient, FeatureFlagClientProtocol
from .evaluator import check_feature, check_features, evaluate
from .exceptions import ConfigError, ConfigErrorCodes, FeatureFlagError, FeatureFlagErrorCodes
from .hashing import assign_variant, generate_user_id, hash_string, is_in_rollout
from .loader import define_config, load, validate_config
from .logger import new_logger
from .models import EvaluationReason, EvaluationResult, UserContext
from .options import CanaryOptions, init_canary
from .provider import (
    CachedConfigProvider,
    CallableConfigSource,
    ConfigSource,
    FileConfigSource,
    HttpConfigSource,
    StaticConfigSource,
)
from .routing import resolve_redirect
from .schema import (
    EMPTY_CONFIG,
    FeatureDefinition,
    FeatureFlagsConfig,
    FeatureGatedRule,
    GroupGatedRule,
    GroupRouteRule,
    RouteDefinition,
)
from .store import InMemoryUserContextStore, UserContextStore

__all__ = [
    "CachedConfigProvider",
    "CallableConfigSource",
    "CanaryOptions",
    "ConfigError",
    "ConfigErrorCodes",
    "ConfigSource",
    "EMPTY_CONFIG",
    "EvaluationReason",
    "EvaluationResult",
    "FeatureDefinition",
    "FeatureFlagClient",
    "FeatureFlagClientProtocol",
    "FeatureFlagError",
    "FeatureFlagErrorCodes",
    "FeatureFlagsConfig",
    "FeatureGatedRule",
    "FileConfigSource",
    "GroupGatedRule",
    "GroupRouteRule",
    "HttpConfigSource",
    "InMemoryUserContextStore",
    "RouteDefinition",
    "StaticConfigSource",
    "UserContext",
    "UserContextStore",
    "assign_variant",
    "check_feature",
    "check_features",
    "define_config",
    "evaluate",
    "generate_user_id",
    "hash_string",
    "init_canary",
    "is_in_rollout",
    "load",
    "new_logger",
    "resolve_redirect",
    "validate_config",
]
