from .config import PipelineConfig
from .models import ProtocolRecord, RiskAnalysis, UserPosition
from .normalize import normalize
from .pipeline import ProtocolPipeline, fetch_all_protocols
from .risk_score import score

__all__ = [
    "PipelineConfig",
    "ProtocolRecord",
    "RiskAnalysis",
    "UserPosition",
    "normalize",
    "score",
    "ProtocolPipeline",
    "fetch_all_protocols",
]
