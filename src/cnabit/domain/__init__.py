"""Domain layer for cnabit."""

__all__ = [
    "BalanceService",
    "FailureReason",
    "FileProcessingService",
    "ProcessingResult",
    "FileQueryService",
    "TransactionQueryService",
    "FileUploadService",
    "UploadResult",
]

_LOCATIONS = {
    "BalanceService": "cnabit.domain.balance",
    "FailureReason": "cnabit.domain.file_processing",
    "FileProcessingService": "cnabit.domain.file_processing",
    "ProcessingResult": "cnabit.domain.file_processing",
    "FileQueryService": "cnabit.domain.queries",
    "TransactionQueryService": "cnabit.domain.queries",
    "FileUploadService": "cnabit.domain.upload",
    "UploadResult": "cnabit.domain.upload",
}


# Services import the database layer, which imports domain entities; load them
# lazily so importing either package first works.
def __getattr__(name):
    if name in _LOCATIONS:
        import importlib

        return getattr(importlib.import_module(_LOCATIONS[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
