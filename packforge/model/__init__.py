"""清单数据模型"""

from .manifest import (
    Manifest,
    FileInstall,
    Feature,
    LaunchModifier,
    MIN_PROTOCOL_VERSION,
    DEFAULT_SPLASH_DISMISSALS,
)

__all__ = [
    "Manifest",
    "FileInstall",
    "Feature",
    "LaunchModifier",
    "MIN_PROTOCOL_VERSION",
    "DEFAULT_SPLASH_DISMISSALS",
]
