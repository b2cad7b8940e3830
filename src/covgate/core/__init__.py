from covgate.core.config import LOG_FORMAT, GateConfig, load_config
from covgate.core.verify import VerificationResult, Violation, evaluate

__all__ = [
    "LOG_FORMAT",
    "GateConfig",
    "VerificationResult",
    "Violation",
    "evaluate",
    "load_config",
]
