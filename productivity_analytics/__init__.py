"""
Productivity Analytics - activity pattern and productivity analytics engine
"""

__version__ = "0.1.0"

from .services.scoring import ScoringEngine
from .services.patterns import PatternRecognizer
from .services.insights import InsightGenerator
from .services.orchestrator import AnalysisOrchestrator, WindowSelector
from .models.observation import Observation

__all__ = [
    'ScoringEngine',
    'PatternRecognizer',
    'InsightGenerator',
    'AnalysisOrchestrator',
    'WindowSelector',
    'Observation',
]
