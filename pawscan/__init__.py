"""
PawScan scan core.

Barcode scan sessions resolved against the product catalog, with the
safety evaluation rendered for display.

Structure:
- domain/: Scan models, state machine, debounce, renderer
- infrastructure/: Catalog HTTP client, code readers
- application/: Scan session orchestration
- scripts/: Command line tools
- tests/: Test suite
"""

__version__ = "1.0.0"
