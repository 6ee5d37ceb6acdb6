"""Tests for the per-domain wire <-> record adapters."""

from datetime import datetime, timezone

import pytest

from dashsync.core.exceptions import SnapshotValidationError
from dashsync.schemas.sales import format_color_label, normalize_available_colors
from dashsync.services.calendar import CalendarAdapter
from dashsync.services.expenses import ExpensesAdapter
from dashsync.services.quick_links import QuickLinksAdapter, favicon_for
from dashsync.services.registry import DOMAINS, get_domain
from dashsync.services.sales import SalesAdapter
from dashsync.services.todos import TodosAdapter
from factories import event, reminder, todo, todo_payload


def _snapshot(adapter, payload):
    return adapter.to_snapshot(adapter.parse(payload))


class TestParsing:
    @pytest.mark.parametrize("data", [[], "todos", None, 3])
    def test_non_object_rejected(self, data):
        with pytest.raises(SnapshotValidationError) as excinfo:
            TodosAdapter().parse(data)

        assert excinfo.value.message == "Invalid data format"

    def test_missing_required_field_reports_location(self):
        bad = todo("t1")
        del bad["title"]

        with pytest.raises(SnapshotValidationError) as excinfo:
            TodosAdapter().parse(todo_payload(todos=[bad]))

        assert excinfo.value.details[0]["field"] == "todos -> 0 -> title"

    def test_unknown_status_rejected(self):
        with pytest.raises(SnapshotValidationError):
            TodosAdapter().parse(todo_payload(todos=[todo("t1", status="someday")]))

    def test_snake_case_input_accepted(self):
        item = todo("t1")
        del item["dueDate"]
        item["due_date"] = "2026-02-01T08:00:00Z"

        payload = TodosAdapter().parse({"todos": [item]})

        assert payload.todos[0].due_date is not None


class TestRecords:
    def test_absent_collection_is_none(self):
        snapshot = _snapshot(TodosAdapter(), {"todos": [todo("t1")]})

        assert snapshot.get("categories") is None
        assert [r.key for r in snapshot.get("todos")] == ["t1"]

    def test_timestamps_default_to_now(self):
        before = datetime.now(timezone.utc)
        record = _snapshot(TodosAdapter(), {"todos": [todo("t1")]}).get("todos")[0]

        assert record.fields["created_at"] >= before
        assert record.fields["updated_at"] >= before

    @pytest.mark.parametrize(
        "adapter, collection, item",
        [
            (TodosAdapter(), "todos", todo("t1")),
            (SalesAdapter(), "sales", {
                "id": "s1", "name": "Order", "placementDate": "2026-03-01",
                "deliveryMethod": "local", "status": "fulfilled",
            }),
            (ExpensesAdapter(), "expenses", {
                "id": "e1", "paidBy": "dylan", "name": "Paper", "category": "office",
            }),
            (QuickLinksAdapter(), "quickLinks", {"id": "q1", "name": "Docs", "url": "https://a.io"}),
            (CalendarAdapter(), "events", event("e1")),
        ],
    )
    def test_client_updated_at_kept(self, adapter, collection, item):
        item = {**item, "updatedAt": "2026-01-02T00:00:00Z"}

        snapshot = _snapshot(adapter, {collection: [item]})
        record = next(records for records in snapshot.collections.values() if records)[0]

        assert record.fields["updated_at"] == datetime(2026, 1, 2, tzinfo=timezone.utc)

    def test_iso_strings_become_utc_datetimes(self):
        record = _snapshot(
            TodosAdapter(), {"todos": [todo("t1", dueDate="2026-02-01T12:00:00")]}
        ).get("todos")[0]

        assert record.fields["due_date"] == datetime(2026, 2, 1, 12, tzinfo=timezone.utc)

    def test_children_carry_parent_key(self):
        record = _snapshot(
            TodosAdapter(), {"todos": [todo("t1", subtasks=[("s1", "a")])]}
        ).get("todos")[0]

        assert record.children["subtasks"][0].fields["todo_id"] == "t1"

    def test_child_under_two_parents_rejected(self):
        payload = {"todos": [todo("t1", subtasks=[("s1", "a")]), todo("t2", subtasks=[("s1", "a")])]}

        with pytest.raises(SnapshotValidationError):
            _snapshot(TodosAdapter(), payload)

    def test_update_columns_exclude_identity_and_creation(self):
        spec = TodosAdapter().collections[-1]

        assert "id" not in spec.update_columns
        assert "created_at" not in spec.update_columns
        assert "title" in spec.update_columns


class TestSales:
    def test_palette_normalization(self):
        raw = ["#ff0000", {"value": "#00ff00", "name": " Green "}, {"value": ""}, "#ff0000", 7]

        assert normalize_available_colors(raw, "#0000ff") == [
            {"value": "#0000ff", "name": "#0000FF"},
            {"value": "#ff0000", "name": "#FF0000"},
            {"value": "#00ff00", "name": "Green"},
        ]

    def test_base_color_not_duplicated(self):
        assert normalize_available_colors(["#123456"], "#123456") == [
            {"value": "#123456", "name": "#123456"},
        ]

    def test_non_list_palette(self):
        assert normalize_available_colors(None, "") == []

    def test_color_label(self):
        assert format_color_label("navy") == "navy"
        assert format_color_label("  ") == "Unknown"

    def test_sale_without_product(self):
        payload = {
            "sales": [{
                "id": "s1",
                "name": "Order",
                "placementDate": "2026-03-01",
                "deliveryMethod": "local",
                "status": "fulfilled",
                "productId": "",
            }]
        }

        record = _snapshot(SalesAdapter(), payload).get("sales")[0]

        assert record.fields["product_id"] is None
        assert record.fields["delivery_method"] == "local"


class TestQuickLinks:
    def test_favicon_derived_from_host(self):
        assert favicon_for("https://docs.python.org/3/") == (
            "https://www.google.com/s2/favicons?domain=docs.python.org&sz=64"
        )

    def test_unparseable_url_has_no_favicon(self):
        assert favicon_for("not a url") == ""

    def test_explicit_favicon_kept(self):
        payload = {"quickLinks": [{
            "id": "q1", "name": "Docs", "url": "https://example.com", "faviconUrl": "https://cdn/x.ico",
        }]}

        record = _snapshot(QuickLinksAdapter(), payload).get("quick_links")[0]

        assert record.fields["favicon_url"] == "https://cdn/x.ico"

    def test_missing_favicon_filled_in(self):
        payload = {"quickLinks": [{"id": "q1", "name": "Docs", "url": "https://example.com/a"}]}

        record = _snapshot(QuickLinksAdapter(), payload).get("quick_links")[0]

        assert "domain=example.com" in record.fields["favicon_url"]
        assert record.fields["order_index"] == 0


class TestExpenses:
    def test_vendor_and_cost_default(self):
        payload = {"expenses": [{
            "id": "e1", "paidBy": "dylan", "name": "Paper", "vendor": None, "category": "office",
        }]}

        record = _snapshot(ExpensesAdapter(), payload).get("expenses")[0]

        assert record.fields["vendor"] == ""
        assert record.fields["cost_cents"] == 0

    def test_paid_by_options_on_the_wire(self):
        assert "paidByOptions" in ExpensesAdapter().empty_state()


class TestCalendar:
    def test_reminders_nested_under_events(self):
        payload = {
            "events": [event("e1"), event("e2")],
            "calendarTypes": [],
            "reminders": [reminder("r1", "e1"), reminder("r2", "e1", 60)],
        }

        events = _snapshot(CalendarAdapter(), payload).get("events")

        assert [r.key for r in events[0].children["reminders"]] == ["r1", "r2"]
        assert events[1].children["reminders"] == []
        assert events[0].children["reminders"][1].fields["minutes_before"] == 60

    def test_dangling_reminder_rejected(self):
        payload = {"events": [event("e1")], "reminders": [reminder("r1", "gone")]}

        with pytest.raises(SnapshotValidationError):
            CalendarAdapter().parse(payload)

    def test_to_wire_flattens_reminders(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        rows = {
            "events": [{
                "id": "e1", "title": "Standup", "start_time": now, "end_time": now,
                "all_day": False, "created_at": now, "updated_at": now,
            }],
            "calendar_types": [],
        }
        children = {"reminders": {"e1": [{"id": "r1", "event_id": "e1", "minutes_before": 5}]}}

        data = CalendarAdapter().to_wire(rows, children)

        assert data["reminders"] == [
            {"id": "r1", "eventId": "e1", "minutesBefore": 5, "createdAt": None},
        ]
        assert data["events"][0]["startTime"].startswith("2026-01-01T00:00:00")


class TestRegistry:
    def test_all_domains_registered(self):
        assert set(DOMAINS) == {"todos", "sales", "expenses", "quick-links", "calendar"}
        assert get_domain("notes") is None

    @pytest.mark.parametrize("name", sorted(DOMAINS))
    def test_empty_state_lists_every_collection(self, name):
        adapter = DOMAINS[name]
        state = adapter.empty_state()

        assert state and all(value == [] for value in state.values())

    @pytest.mark.parametrize("name", sorted(DOMAINS))
    def test_every_domain_has_one_primary_collection(self, name):
        assert len(DOMAINS[name].primary_names) == 1
