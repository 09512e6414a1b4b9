"""
Data Ingestion Module

Transforms applied to source-store records before analysis:
- Asset class label normalization
"""

__version__ = "0.1.0"
