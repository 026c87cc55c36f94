"""Domain layer for reelcost application."""

# Services are imported lazily: the database layer imports domain entities,
# and the services import the database layer.
_SERVICES = {
    "ProjectService": "reelcost.domain.project",
    "BudgetService": "reelcost.domain.budget",
    "AllocationService": "reelcost.domain.allocation",
    "InvoiceService": "reelcost.domain.invoice",
    "IngestionService": "reelcost.domain.ingestion",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
