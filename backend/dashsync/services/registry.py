"""Known sync domains, keyed by their URL segment."""

from dashsync.services.calendar import CalendarAdapter
from dashsync.services.domain import DomainAdapter
from dashsync.services.expenses import ExpensesAdapter
from dashsync.services.quick_links import QuickLinksAdapter
from dashsync.services.sales import SalesAdapter
from dashsync.services.todos import TodosAdapter

DOMAINS: dict[str, DomainAdapter] = {
    adapter.name: adapter
    for adapter in (
        TodosAdapter(),
        SalesAdapter(),
        ExpensesAdapter(),
        QuickLinksAdapter(),
        CalendarAdapter(),
    )
}


def get_domain(name: str) -> DomainAdapter | None:
    return DOMAINS.get(name)
