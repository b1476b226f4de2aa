from footfall.models.alert import Alert
from footfall.models.footfall_sample import FootfallSample
from footfall.models.store import Store

__all__ = [
    "Alert",
    "FootfallSample",
    "Store",
]
