from .linear import linear_score_fusion

__all__ = ["linear_score_fusion"]
