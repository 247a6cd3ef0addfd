"""LP Analyzer: product and price extraction for Japanese landing pages."""
__version__ = "1.0.0"
