"""
Chat Exporter - Export a DeepSeek conversation page to Markdown, PDF and PNG.
"""

__version__ = "1.8.2"
