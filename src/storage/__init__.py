"""
Persistence

Modules:
- gateway: Abstract persistence contract and errors
- memory: Dict-backed gateway
- csv_store: CSV-folder gateway
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "InMemoryGateway":
        from src.storage.memory import InMemoryGateway
        return InMemoryGateway
    if name == "CsvGateway":
        from src.storage.csv_store import CsvGateway
        return CsvGateway
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
