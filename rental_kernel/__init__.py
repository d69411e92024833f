"""
Rental Kernel

Persistence and domain layer for the vehicle-rental back office:
- Immutable Contract / Billing / Customer / Vehicle value types
- Relational repositories for contracts and billing (SQLAlchemy)
- Document repositories for customers and vehicles (PyMongo)
- Typed error taxonomy and structured logging
"""

__version__ = "0.1.0"
