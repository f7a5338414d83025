"""
Intent classification for Nullistant.
Ordered-priority pattern matching over normalized transcripts; no ML.
"""
from nullistant.intent.models import IntentAnalysis, IntentCategory, Transcript, Urgency
from nullistant.intent.classifier import IntentClassifier, normalize

__all__ = ["IntentAnalysis", "IntentCategory", "IntentClassifier", "Transcript", "Urgency", "normalize"]
