from typing import Any, Iterable


def get_path(obj: Any, path: str) -> Any:
    """
    Dotted lookup over nested dicts, e.g. "ragContext.text".
    Returns None as soon as a segment is missing or not a dict.
    """
    cur = obj
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
        if cur is None:
            return None
    return cur


def first_present(obj: Any, paths: Iterable[str], default: Any = None) -> Any:
    """
    Tries each path in order and returns the first truthy value.
    Mirrors a `a || b || c` alias chain over variant payload shapes.
    """
    for path in paths:
        value = get_path(obj, path)
        if value:
            return value
    return default


def first_string(obj: Any, paths: Iterable[str]) -> str | None:
    value = first_present(obj, paths)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a score
    return isinstance(value, (int, float)) and not isinstance(value, bool)
