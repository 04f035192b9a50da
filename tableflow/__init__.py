"""
Tableflow: table, order and preparation-screen coordination for restaurants.
"""

__version__ = "1.0.0"
