import pytest

from Livestock_RAG_Backend.services.context_normalizer import (
    ContextChunk,
    extract_raw_contexts,
    extract_scores,
    normalize_retrieval_response,
)


def test_nested_contexts_with_parallel_scores(cattle_payload):
    result = normalize_retrieval_response(cattle_payload)

    assert len(result.chunks) == 2
    assert result.scores == [0.8, 0.4]
    assert result.chunks[0].score == 0.8
    assert result.chunks[1].title == "Dairy Herd Diseases"
    assert result.chunks[1].source_uri == "gs://vet-corpus/dairy-herd.pdf"
    assert result.texts[0].startswith("Foot and mouth disease")


@pytest.mark.parametrize(
    "payload",
    [
        {"contexts": [{"text": "plain list"}]},
        {"contexts": {"contexts": [{"text": "plain list"}]}},
        {"ragContexts": [{"content": "plain list"}]},
        {"contextChunks": {"contextChunks": [{"contextText": "plain list"}]}},
        {"contexts": {"text": "plain list"}},
        {"contexts": [{"ragContext": {"text": "plain list"}}]},
    ],
)
def test_payload_shapes(payload):
    result = normalize_retrieval_response(payload)
    assert result.texts == ["plain list"]


def test_empty_contexts_fall_through_to_next_field():
    payload = {"contexts": [], "ragContexts": [{"text": "from rag contexts"}]}
    assert [c["text"] for c in extract_raw_contexts(payload)] == ["from rag contexts"]


def test_chunks_without_text_are_dropped():
    payload = {"contexts": [{"text": "   "}, {"sourceUri": "https://x"}, {"text": "kept"}, "junk"]}
    result = normalize_retrieval_response(payload)

    assert result.texts == ["kept"]


def test_missing_title_becomes_placeholder():
    result = normalize_retrieval_response({"contexts": [{"text": "body"}]})
    assert result.chunks == [ContextChunk(text="body", score=None, source_uri=None, title="Reference")]


def test_per_chunk_scores_capped_at_five():
    raw = [{"text": f"t{i}", "score": 0.1 * i} for i in range(1, 8)]
    scores = extract_scores({}, raw)

    assert len(scores) == 5
    assert scores[0] == pytest.approx(0.1)


def test_bool_and_string_scores_ignored():
    raw = [{"text": "a", "score": True}, {"text": "b", "_score": "0.9"}, {"text": "c", "_score": 0.7}]
    assert extract_scores({}, raw) == [0.7]


def test_reported_confidence_is_kept():
    result = normalize_retrieval_response({"contexts": [{"text": "a"}], "confidence": 0.9})
    assert result.confidence == 0.9
    assert result.scores == []


def test_unknown_payload_is_empty():
    result = normalize_retrieval_response(None)
    assert result.chunks == []
    assert result.confidence is None


def test_sdk_object_with_to_dict():
    class Response:
        def to_dict(self):
            return {"contexts": [{"text": "from sdk", "score": 0.5}]}

    result = normalize_retrieval_response(Response())
    assert result.texts == ["from sdk"]
    assert result.scores == [0.5]
