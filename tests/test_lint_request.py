from datetime import datetime, timezone
from pathlib import Path

from smart_scheduler.core.io.load_request import load_request
from smart_scheduler.core.lint.lint_request import lint_request


EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


def _codes(errors):
    return [e.code for e in errors]


def test_lint_clean_request():
    assert lint_request(load_request(str(EXAMPLES / "basic-request.yaml"))) == []


def test_lint_duplicate_title_reports_later_occurrence():
    errors = lint_request(load_request(str(EXAMPLES / "duplicate-title.yaml")))
    assert _codes(errors) == ["L_DUPLICATE_TITLE"]
    assert errors[0].path == "tasks[2].title"
    assert "count=2" in errors[0].message


def test_lint_cycle_path_in_message():
    errors = lint_request(load_request(str(EXAMPLES / "invalid-cycle.yaml")))
    assert _codes(errors) == ["L_CYCLE_DETECTED"]
    assert "A -> B -> A" in errors[0].message or "B -> A -> B" in errors[0].message


def test_lint_self_and_repeated_dependencies():
    request = {
        "tasks": [
            {"title": "A", "estimated_hours": 1},
            {"title": "B", "estimated_hours": 1, "dependencies": ["B", "A", "A", " "]},
        ]
    }
    codes = _codes(lint_request(request))
    assert "L_SELF_DEPENDENCY" in codes
    assert "L_DUPLICATE_DEPENDENCY" in codes
    assert "L_CYCLE_DETECTED" not in codes


def test_lint_due_date_in_past_only_with_now():
    request = {
        "tasks": [
            {"title": "A", "estimated_hours": 1, "dueDate": "2025-06-01T00:00:00Z"},
            {"title": "B", "estimated_hours": 1, "due_date": "2027-06-01T00:00:00Z"},
        ]
    }
    assert lint_request(request) == []
    errors = lint_request(request, now=datetime(2026, 1, 1, tzinfo=timezone.utc))
    assert _codes(errors) == ["L_DUE_DATE_IN_PAST"]
    assert errors[0].path == "tasks[0].due_date"


def test_lint_ignores_malformed_shapes():
    assert lint_request({"tasks": "nope"}) == []
    assert lint_request({"tasks": [None, {"title": 3}]}) == []


def test_lint_long_chain_listed_dependent_first():
    size = 3000
    request = {
        "tasks": [
            {"title": f"T{i}", "estimated_hours": 1, "dependencies": [f"T{i - 1}"] if i else []}
            for i in reversed(range(size))
        ]
    }
    assert lint_request(request) == []


def test_lint_long_cycle_is_reported_once():
    size = 3000
    request = {
        "tasks": [
            {"title": f"T{i}", "estimated_hours": 1, "dependencies": [f"T{(i - 1) % size}"]}
            for i in reversed(range(size))
        ]
    }
    errors = lint_request(request)
    assert _codes(errors) == ["L_CYCLE_DETECTED"]


def test_lint_cycle_from_later_duplicate_occurrence():
    request = {
        "tasks": [
            {"title": "A", "estimated_hours": 1},
            {"title": "B", "estimated_hours": 1, "dependencies": ["A"]},
            {"title": "A", "estimated_hours": 1, "dependencies": ["B"]},
        ]
    }
    errors = lint_request(request)
    assert sorted(_codes(errors)) == ["L_CYCLE_DETECTED", "L_DUPLICATE_TITLE"]


def test_lint_self_dependency_on_later_duplicate_uses_its_own_index():
    request = {
        "tasks": [
            {"title": "A", "estimated_hours": 1},
            {"title": "A", "estimated_hours": 1, "dependencies": ["A"]},
        ]
    }
    errors = [e for e in lint_request(request) if e.code == "L_SELF_DEPENDENCY"]
    assert [e.path for e in errors] == ["tasks[1].dependencies"]
