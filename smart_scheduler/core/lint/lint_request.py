from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Iterator, Optional

from smart_scheduler.core.errors import InvalidInputError
from smart_scheduler.core.io.load_request import normalize_task
from smart_scheduler.core.timestamps import as_utc, parse_timestamp


# Advisory rules, run on the raw request:
# - L_DUPLICATE_TITLE: the same title appears on more than one task
# - L_SELF_DEPENDENCY: a task lists itself as a dependency
# - L_DUPLICATE_DEPENDENCY: a dependency is listed more than once on a task
# - L_CYCLE_DETECTED: dependency cycle exists (reports the cycle path)
# - L_DUE_DATE_IN_PAST: due date is already behind `now`


def lint_request(request: dict[str, Any], *, now: Optional[datetime] = None) -> list[InvalidInputError]:
    """Lint a schedule request.

    Lint runs *in addition to* request parsing. It works best effort on
    partially-invalid input; the CLI prints lint + parse errors together.
    """

    file = _cast_optional_str(request.get("__file__"))

    tasks = request.get("tasks")
    if not isinstance(tasks, list):
        return []

    title_to_index: dict[str, int] = {}
    title_to_raw: dict[str, dict[str, Any]] = {}
    titles: list[str] = []

    for i, raw in enumerate(tasks):
        if not isinstance(raw, dict):
            continue
        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            continue
        titles.append(title)
        title_to_index.setdefault(title, i)
        title_to_raw.setdefault(title, raw)

    errors: list[InvalidInputError] = []

    # Rule: duplicate titles
    counts = Counter(titles)
    dupes = {k: v for k, v in counts.items() if v > 1}
    if dupes:
        seen: set[str] = set()
        for i, raw in enumerate(tasks):
            if not isinstance(raw, dict):
                continue
            title = raw.get("title")
            if not isinstance(title, str) or title not in dupes:
                continue
            if title not in seen:
                seen.add(title)
                continue
            errors.append(
                InvalidInputError(
                    code="L_DUPLICATE_TITLE",
                    message=f"duplicate task title: {title} (count={dupes[title]})",
                    file=file,
                    path=f"tasks[{i}].title",
                )
            )

    # Every occurrence of a title contributes edges, as in the graph builder.
    title_to_deps: dict[str, list[str]] = {t: [] for t in title_to_raw}
    occurrences: list[tuple[int, str, list[str]]] = []
    for i, raw in enumerate(tasks):
        if not isinstance(raw, dict):
            continue
        title = raw.get("title")
        if not isinstance(title, str) or title not in title_to_deps:
            continue
        deps_raw = raw.get("dependencies")
        deps: list[str] = []
        if isinstance(deps_raw, list):
            deps = [d for d in deps_raw if isinstance(d, str) and d.strip()]
        title_to_deps[title].extend(deps)
        occurrences.append((i, title, deps))

    # Rules: self and repeated dependencies
    for i, title, deps in occurrences:
        path = f"tasks[{i}].dependencies"
        if title in deps:
            errors.append(
                InvalidInputError(
                    code="L_SELF_DEPENDENCY",
                    message=f"task depends on itself: {title}",
                    file=file,
                    path=path,
                )
            )
        for dep, n in sorted(Counter(deps).items()):
            if n > 1:
                errors.append(
                    InvalidInputError(
                        code="L_DUPLICATE_DEPENDENCY",
                        message=f"dependency listed {n} times: {dep}",
                        file=file,
                        path=path,
                    )
                )

    # Rule: cycle detection (self loops are reported above)
    for title, msg in _detect_cycles(title_to_deps):
        errors.append(
            InvalidInputError(
                code="L_CYCLE_DETECTED",
                message=msg,
                file=file,
                path=f"tasks[{title_to_index.get(title, 0)}].dependencies",
            )
        )

    # Rule: due dates already passed
    if now is not None:
        cutoff = as_utc(now)
        for title, raw in title_to_raw.items():
            due_raw = normalize_task(raw).get("due_date")
            if due_raw is None:
                continue
            try:
                due = parse_timestamp(due_raw)
            except ValueError:
                continue
            if due < cutoff:
                errors.append(
                    InvalidInputError(
                        code="L_DUE_DATE_IN_PAST",
                        message=f"due date {due.isoformat()} is before {cutoff.isoformat()}",
                        file=file,
                        path=f"tasks[{title_to_index[title]}].due_date",
                    )
                )

    return _sorted(errors)


def _detect_cycles(title_to_deps: dict[str, list[str]]) -> list[tuple[str, str]]:
    WHITE, GRAY, BLACK = 0, 1, 2
    state: dict[str, int] = {t: WHITE for t in title_to_deps.keys()}
    emitted: set[frozenset[str]] = set()
    out: list[tuple[str, str]] = []

    for root in list(state.keys()):
        if state[root] != WHITE:
            continue
        # Explicit frames keep long chains clear of the recursion limit.
        path: list[str] = [root]
        frames: list[tuple[str, Iterator[str]]] = [(root, iter(title_to_deps.get(root, [])))]
        state[root] = GRAY
        while frames:
            u, deps = frames[-1]
            v = next(deps, None)
            if v is None:
                frames.pop()
                path.pop()
                state[u] = BLACK
                continue
            if v not in state or v == u:
                continue
            if state[v] == GRAY:
                # cycle: v ... u -> v
                cycle = path[path.index(v):] + [v]
                key = frozenset(cycle)
                if key not in emitted:
                    emitted.add(key)
                    out.append((u, "dependency cycle detected: " + " -> ".join(cycle)))
            elif state[v] == WHITE:
                state[v] = GRAY
                path.append(v)
                frames.append((v, iter(title_to_deps.get(v, []))))

    return out


def _sorted(errors: list[InvalidInputError]) -> list[InvalidInputError]:
    return sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))


def _cast_optional_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None
