from Livestock_RAG_Backend.services.rag import SYSTEM_INSTRUCTION, build_prompt, is_list_question
from Livestock_RAG_Backend.utils.text import clean_whitespace, split_sentences


def test_clean_whitespace():
    assert clean_whitespace("exam-\nple\r\n\r\n\r\n\r\nnext   line\t here ") == "example\n\nnext line here"
    assert clean_whitespace("") == ""


def test_split_sentences():
    assert split_sentences("One. Two!  Three? Four.") == ["One", "Two", "Three", "Four."]
    assert split_sentences("   ") == []


def test_list_questions_detected():
    assert is_list_question("What are common diseases in goats?")
    assert is_list_question("  list vaccines for calves")
    assert not is_list_question("How do I treat mastitis?")


def test_prompt_carries_query_and_contexts():
    prompt = build_prompt("How do I treat mastitis?", ["ctx one", "ctx two"])

    assert prompt.startswith(SYSTEM_INSTRUCTION)
    assert "answer this question: How do I treat mastitis?" in prompt
    assert "ctx one\n\n---\n\nctx two" in prompt
    assert "Additional context" not in prompt


def test_list_prompt_and_context_cap():
    contexts = [f"chunk-{i}" for i in range(12)]
    prompt = build_prompt("What are common cattle diseases?", contexts)

    assert "well-organized list answering" in prompt
    assert "chunk-9" in prompt
    assert "chunk-10" not in prompt


def test_caller_context_included():
    prompt = build_prompt("How do I treat mastitis?", ["ctx"], caller_context="  Herd of 40 dairy cows ")
    assert "Additional context from the user:\nHerd of 40 dairy cows" in prompt
