"""
Handover Core Config — Public API
===================================
"""

from core.config.settings import EngineSettings, load_engine_settings

__all__ = ["EngineSettings", "load_engine_settings"]
