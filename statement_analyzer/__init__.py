"""Statement Analyzer.

A web service that unlocks PDF bank and credit card statements, extracts
their text, has Gemini analyze it, and renders the analysis as an Excel
workbook.
"""

__version__ = "3.0.0"
__author__ = "Statement Analyzer Team"
