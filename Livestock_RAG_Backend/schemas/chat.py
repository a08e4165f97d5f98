from typing import Any

from pydantic import BaseModel, Field, model_validator

from Livestock_RAG_Backend.utils.lookup import get_path

# body shapes accepted for the question, first non-empty match wins
PROMPT_PATHS = ("prompt", "query", "data.prompt", "data.query")


class AskIn(BaseModel):
    prompt: Any = None          # type is checked by the pipeline so it can 400 with a clear message
    context: str | None = None
    procedure: str | None = None  # sent by the tRPC-style client, ignored

    @model_validator(mode="before")
    @classmethod
    def unwrap_aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("body must be a JSON object")

        for path in PROMPT_PATHS:
            value = get_path(data, path)
            if value:
                scope = data["data"] if path.startswith("data.") else data
                return {
                    "prompt": value,
                    "context": scope.get("context"),
                    "procedure": data.get("procedure"),
                }
        raise ValueError("no prompt field")


class SourceOut(BaseModel):
    uri: str
    title: str


class AnswerOut(BaseModel):
    text: str
    sources: list[SourceOut]
    confidence: float = Field(ge=0.0, le=1.0)


class ErrorOut(BaseModel):
    error: str
    details: str | None = None
