"""Domain layer for microcompta application."""

_SERVICES = {
    "AccountService": "microcompta.domain.account",
    "DashboardService": "microcompta.domain.dashboard",
    "ExpenseService": "microcompta.domain.ledger",
    "IncomeTaxService": "microcompta.domain.income_tax",
    "InvoiceService": "microcompta.domain.ledger",
    "PaymentService": "microcompta.domain.ledger",
    "SettingsService": "microcompta.domain.settings",
    "UrssafService": "microcompta.domain.urssaf",
    "VatService": "microcompta.domain.vat",
}

__all__ = sorted(_SERVICES)


# Services import the database layer, which imports domain.entities;
# resolve them lazily to avoid circular dependencies
def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
