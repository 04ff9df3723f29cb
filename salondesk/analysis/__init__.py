"""AI-written business analyses and helpers to render them."""
from salondesk.analysis.engine import LLMAnalyst
from salondesk.analysis.parser import AnalysisBlock, parse_analysis

__all__ = ["AnalysisBlock", "LLMAnalyst", "parse_analysis"]
