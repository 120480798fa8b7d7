"""Restaurant POS reservations backend"""

__version__ = "1.0.0"
