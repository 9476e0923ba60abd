from app.models.weight import WeightRecord
from app.models.body_metrics import BodyMetrics
from app.models.progress_photo import ProgressPhoto

__all__ = [
    "WeightRecord",
    "BodyMetrics",
    "ProgressPhoto",
]
