"""Receipt Processor.

Scores purchase receipts by a fixed set of points rules and serves the
scores back by id, over plain HTTP routes and as MCP tools.
"""

__version__ = "0.1.0"
