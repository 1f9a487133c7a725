"""
Shelfarr - Library organization and reverse-indexing engine
"""

__version__ = "1.0.0"
