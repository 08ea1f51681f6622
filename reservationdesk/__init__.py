"""
reservationdesk - Restaurant reservation desk with table availability engine.
"""

__version__ = "0.1.0"
