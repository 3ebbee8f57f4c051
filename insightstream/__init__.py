"""
InsightStream

Market intelligence feed for food delivery account managers. Collects news
from live keyword search and subscribed feeds, merges them into one timeline,
annotates items with AI analysis on demand, and serves filtered views.
"""

__version__ = "1.0.0"
__author__ = "InsightStream Team"
__description__ = "AI-annotated market intelligence feed"
