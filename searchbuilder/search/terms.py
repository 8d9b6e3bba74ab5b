_SEPARATORS = ("-", "_", ".")


def split_terms(text: str) -> list[str]:
    """Split a search phrase into unique terms, keeping first-seen order.

    `-`, `_` and `.` count as word separators, so "foo-bar_baz.bar"
    yields ["foo", "bar", "baz"].
    """
    for sep in _SEPARATORS:
        text = text.replace(sep, " ")
    return list(dict.fromkeys(t for t in text.split() if t))
