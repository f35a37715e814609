# Initialize the meterboard package
from .database import Base, SessionLocal, engine

__all__ = ['Base', 'SessionLocal', 'engine']
