from config.settings import AnalyzerSettings, LLMSettings, get_analyzer_settings, get_llm_settings

__all__ = ["AnalyzerSettings", "LLMSettings", "get_analyzer_settings", "get_llm_settings"]
