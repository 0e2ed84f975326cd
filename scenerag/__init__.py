"""SceneRAG: hybrid scene retrieval and retrieval-augmented chat for advertising videos."""

from .config.settings import SceneRAGConfig
from .container import Services, build_services

__version__ = "0.1.0"

__all__ = ["SceneRAGConfig", "Services", "build_services", "__version__"]
