"""Repositories over the SQLAlchemy session of a unit of work"""
