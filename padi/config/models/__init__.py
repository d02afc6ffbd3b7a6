"""Configuration model exports.

    from padi.config.models import LedgerConfig, TranscriptConfig
"""

from padi.config.models.ledger import LedgerConfig, PointCostsConfig
from padi.config.models.observability import LoggingConfig, ObservabilityConfig
from padi.config.models.profile import ProfileConfig
from padi.config.models.storage import StorageConfig
from padi.config.models.transcript import TranscriptConfig

__all__ = [
    "LedgerConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "PointCostsConfig",
    "ProfileConfig",
    "StorageConfig",
    "TranscriptConfig",
]
