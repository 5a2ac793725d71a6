from opmocks.logger import get_logger

__version__ = "0.1.0"

log = get_logger("opmocks")

from opmocks.orchestrator import generate_mocks  # noqa: E402
from opmocks.registry import ArtifactRegistry, deep_merge  # noqa: E402

__all__ = ["ArtifactRegistry", "__version__", "deep_merge", "generate_mocks", "log"]
