"""Recurring-task scheduling core for the practice platform."""

__version__ = "0.1.0"
