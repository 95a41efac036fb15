"""FastAPI web layer for Stock Analyzer.

Re-exports the application factory so consumers can import directly:
    from Stock_Analyzer.web import create_app
"""

from Stock_Analyzer.web.app import create_app

__all__ = ["create_app"]
