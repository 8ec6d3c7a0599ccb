"""
packforge - 整合包内容寻址清单构建器

Builds content-addressed distribution manifests for game mod packs.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.schema import PackConfig
from .build.builder import Builder

__all__ = ["PackConfig", "Builder", "__version__"]
