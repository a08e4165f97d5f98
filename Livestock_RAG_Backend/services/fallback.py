import re

from Livestock_RAG_Backend.utils.text import clean_whitespace, split_sentences

NO_ANSWER_MESSAGE = "Unable to generate answer. Please try rephrasing your question."

CONTEXT_JOINER = "\n\n"
MAX_CONTEXTS = 5
MIN_SENTENCE_CHARS = 30
MAX_SENTENCE_CHARS = 500
MAX_SENTENCES = 20
MIN_ANSWER_CHARS = 100
FIRST_CONTEXT_SENTENCES = 10
ELLIPSIS = "..."

# sections of the veterinary handbooks that are never useful as an answer
BOILERPLATE_PATTERNS = [
    re.compile(r"Appearance:.*?behaviour\.", re.DOTALL),
    re.compile(r"Natural functions:.*?milk\.", re.DOTALL),
    re.compile(r"Discharges:.*?discharge\.", re.DOTALL),
    re.compile(r"Swellings:.*?appearances\.", re.DOTALL),
    re.compile(r"DISEASE DIAGNOSIS"),
    re.compile(r"CATEGORIES OF DISEASES"),
    re.compile(r"CONTROL OF DISEASES"),
]


def strip_boilerplate(text: str) -> str:
    for pattern in BOILERPLATE_PATTERNS:
        text = pattern.sub("", text)
    return clean_whitespace(text)


def _join(sentences: list[str], limit: int) -> str:
    answer = ". ".join(sentences[:limit]).strip()
    if len(sentences) > limit:
        answer += ELLIPSIS
    return answer


def format_contexts_as_answer(query: str, contexts: list[str]) -> str:
    """Builds a readable answer straight from retrieved text.

    Used when no model produced a usable synthesis. ``query`` is not used
    yet; it is part of the signature so sentence selection can later be
    ranked against it.
    """
    if not contexts:
        return NO_ANSWER_MESSAGE

    cleaned = strip_boilerplate(CONTEXT_JOINER.join(contexts[:MAX_CONTEXTS]))
    sentences = [
        s for s in split_sentences(cleaned)
        if MIN_SENTENCE_CHARS <= len(s) < MAX_SENTENCE_CHARS
    ]
    answer = _join(sentences, MAX_SENTENCES)
    if len(answer) >= MIN_ANSWER_CHARS:
        return answer

    first = split_sentences(contexts[0])
    first = [s for s in first if len(s) >= MIN_SENTENCE_CHARS]
    answer = _join(first, FIRST_CONTEXT_SENTENCES)
    if answer:
        return answer

    # short chunk with no full sentence: hand it back as-is
    return contexts[0].strip()[:MAX_SENTENCE_CHARS] or NO_ANSWER_MESSAGE
