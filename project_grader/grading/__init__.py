"""Grading analysis for student project submissions using LLMs."""

from .analyzer import ProjectAnalyzer
from .assistant import GradingAssistant
from .batch_analyzer import BatchAnalyzer
from .confidence import ConfidenceBand, classify_confidence
from .integrity import IntegrityChecker
from .models import (
    AnalysisResult,
    AssignmentConfig,
    FileAttachment,
    PlagiarismGroup,
    StudentSubmission,
)
from .normalizer import normalize_analysis
from .outcomes import OutcomeGenerator

__all__ = [
    'ProjectAnalyzer',
    'GradingAssistant',
    'BatchAnalyzer',
    'ConfidenceBand',
    'classify_confidence',
    'IntegrityChecker',
    'AnalysisResult',
    'AssignmentConfig',
    'FileAttachment',
    'PlagiarismGroup',
    'StudentSubmission',
    'normalize_analysis',
    'OutcomeGenerator',
]
