"""Status views, name search and sort orders applied to a loaded page.

Filtering and sorting operate on what is already loaded (one page, or the
scholarships a user has marked); they never change store pagination.
"""

from collections.abc import Iterable, Mapping, Sequence

from src.core.schemas import SEE_WEBSITE, Scholarship

VIEWS: tuple[str, ...] = ("available", "applied", "hidden")
SORT_OPTIONS: tuple[str, ...] = ("amount-high", "amount-low", "deadline", "relevance")

# Quiz answers that count toward relevance, each worth RELEVANCE_WEIGHT on a hit.
RELEVANCE_KEYS: tuple[str, ...] = ("field_of_study", "career_goal", "primary_hobby")
RELEVANCE_WEIGHT = 2


def matches_search(scholarship: Scholarship, query: str | None) -> bool:
    """Case-insensitive substring match on the name. A blank query matches all."""
    if not query or not query.strip():
        return True
    return query.strip().lower() in scholarship.name.lower()


def filter_scholarships(
    items: Iterable[Scholarship],
    statuses: Mapping[str, str],
    show: str = "available",
    search: str | None = None,
) -> list[Scholarship]:
    """Keep the items belonging to ``show`` that match ``search``.

    "available" means neither applied nor hidden; "applied" and "hidden"
    keep only items carrying that status.
    """
    if show not in VIEWS:
        msg = f"Unknown view '{show}'. Expected one of: {', '.join(VIEWS)}"
        raise ValueError(msg)

    kept = []
    for s in items:
        if not matches_search(s, search):
            continue
        status = statuses.get(s.id)
        if show == "available" and status is not None:
            continue
        if show != "available" and status != show:
            continue
        kept.append(s)
    return kept


def relevance_score(scholarship: Scholarship, quiz_answers: Mapping[str, str]) -> int:
    text = " ".join(
        [scholarship.name, scholarship.description, *scholarship.requirements],
    ).lower()
    keywords = [
        quiz_answers[key].strip().lower()
        for key in RELEVANCE_KEYS
        if quiz_answers.get(key, "").strip()
    ]
    return sum(RELEVANCE_WEIGHT for keyword in keywords if keyword in text)


def _deadline_key(scholarship: Scholarship) -> tuple[int, str]:
    # ISO dates sort lexically; "See Website" goes last.
    if scholarship.deadline == SEE_WEBSITE:
        return (1, "")
    return (0, scholarship.deadline)


def sort_scholarships(
    items: Sequence[Scholarship],
    sort: str | None,
    quiz_answers: Mapping[str, str] | None = None,
) -> list[Scholarship]:
    """Return a sorted copy. Ties keep their incoming order.

    ``None`` keeps the incoming order, as does "relevance" without quiz answers.
    """
    if sort is None:
        return list(items)
    if sort == "amount-high":
        return sorted(items, key=lambda s: s.amount, reverse=True)
    if sort == "amount-low":
        return sorted(items, key=lambda s: s.amount)
    if sort == "deadline":
        return sorted(items, key=_deadline_key)
    if sort == "relevance":
        if not quiz_answers:
            return list(items)
        return sorted(items, key=lambda s: relevance_score(s, quiz_answers), reverse=True)
    msg = f"Unknown sort '{sort}'. Expected one of: {', '.join(SORT_OPTIONS)}"
    raise ValueError(msg)
