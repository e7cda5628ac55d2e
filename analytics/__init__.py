"""
PI Analytics aggregation engine.

Pure, synchronous analyzers over entity snapshots. Nothing here fetches
data, touches the network or mutates its inputs.

Exports:
    SummaryAnalyzer, PipelineAnalyzer, LeadQualityAnalyzer,
    AttributionAnalyzer, DataQualityAnalyzer, MigrationParityComparator,
    ListingEnricher
"""
from analytics.attribution import AttributionAnalyzer
from analytics.data_quality import DataQualityAnalyzer
from analytics.leads import LeadQualityAnalyzer
from analytics.listings import ListingEnricher
from analytics.migration import MigrationParityComparator
from analytics.pipeline import PipelineAnalyzer
from analytics.summary import SummaryAnalyzer

__all__ = [
    "AttributionAnalyzer",
    "DataQualityAnalyzer",
    "LeadQualityAnalyzer",
    "ListingEnricher",
    "MigrationParityComparator",
    "PipelineAnalyzer",
    "SummaryAnalyzer",
]
