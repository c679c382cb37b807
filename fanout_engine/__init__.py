"""Fan-out engine: run one SQL script against many same-schema databases.

The script is grammar-checked once, executed on every target under a
concurrency bound, and the rows from all targets are combined into a single
CSV-style file tagged with their target identifier.
"""

__version__ = "0.3.0"
