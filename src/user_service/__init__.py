"""User record service with a read-through cache over a relational store."""

__version__ = "0.1.0"
