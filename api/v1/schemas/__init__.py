"""Re-export individual schema modules for easy imports."""

from .meal import AnalyzeMealIn
from .plan import GeneratePlanIn
from .mascot import MascotIn, MascotOut

__all__ = [
    "AnalyzeMealIn",
    "GeneratePlanIn",
    "MascotIn",
    "MascotOut",
]
