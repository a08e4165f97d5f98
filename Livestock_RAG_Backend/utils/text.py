import re

_hyphen_break_re = re.compile(r"(\w)-\n(\w)")
_spaces_re = re.compile(r"[ \t]+")
_blank_lines_re = re.compile(r"\n{3,}")
# consumes the terminator; callers re-join with ". "
_sentence_split_re = re.compile(r"[.!?]\s+")


def clean_whitespace(text: str) -> str:
    """
    Unifies line endings, rejoins words hyphenated across PDF lines,
    squeezes runs of spaces/tabs and keeps at most one blank line.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _hyphen_break_re.sub(r"\1\2", text)
    text = _spaces_re.sub(" ", text)
    return _blank_lines_re.sub("\n\n", text).strip()


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _sentence_split_re.split(text) if s.strip()]
