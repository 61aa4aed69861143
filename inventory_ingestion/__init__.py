"""
Inventory ingestion: file adapters that stream stock history exports.

File I/O only.  Adapters yield plain record dicts; turning a record into a
StockEvent is the caller's job (see StockEvent.from_record).
"""
