import re

MAX_PROMPT_CONTEXTS = 10
CONTEXT_SEPARATOR = "\n\n---\n\n"

SYSTEM_INSTRUCTION = """
You are a helpful assistant that provides accurate information about livestock health based on veterinary documents.

When answering questions about diseases or conditions:
- Organize your answer by categories (e.g., Bacterial Diseases, Viral Diseases, Other Conditions)
- List each disease with a brief, clear description
- Use simple, professional language appropriate for farmers
- Do NOT include disclaimers, legal text, document metadata, or formatting instructions
- Focus on providing a comprehensive, well-structured list of the requested information
- For questions asking "what are common X" or "list X", provide a clear, organized list format
""".strip()

_list_question_re = re.compile(
    r"^(what are|list|name|tell me about|common|types of|kinds of)", re.IGNORECASE
)


def is_list_question(query: str) -> bool:
    return bool(_list_question_re.match(query.strip()))


def build_prompt(query: str, contexts: list[str], caller_context: str | None = None) -> str:
    combined = CONTEXT_SEPARATOR.join(contexts[:MAX_PROMPT_CONTEXTS])

    extra = ""
    if caller_context and caller_context.strip():
        extra = f"\n\nAdditional context from the user:\n{caller_context.strip()}"

    if is_list_question(query):
        task = f"""
Based on the following context from veterinary documents, provide a comprehensive, well-organized list answering: {query}

Context:
{combined}{extra}

Format your answer as a clear list with categories where appropriate. Include ALL relevant items from the context. Do not truncate or shorten your answer - provide complete information.
"""
    else:
        task = f"""
Based on the following context from veterinary documents, answer this question: {query}

Context:
{combined}{extra}

Provide a clear, well-organized, and COMPLETE answer with specific examples from the context. Do not truncate or shorten your answer - include all relevant information.
"""

    return f"{SYSTEM_INSTRUCTION}\n\n{task.strip()}"
