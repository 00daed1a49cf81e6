"""
QAP Orchestrator Module
=======================

Configuration, logging setup and the command-line interface.

Usage:
    python -m qap.orchestrator.cli build --decisions d.json --submit
"""

from .config import Settings, WorkflowConfig, LoggingConfig, get_settings
from .logging_config import setup_logging

__all__ = [
    "Settings",
    "WorkflowConfig",
    "LoggingConfig",
    "get_settings",
    "setup_logging",
]
