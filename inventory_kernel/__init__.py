"""
Inventory Kernel - analytics foundation

An append-only stock history with:
- Typed, fail-fast stock change events
- Read-only event streaming for replay
- Structured JSON logging
- Decimal-only cost arithmetic
"""

__version__ = "0.1.0"
