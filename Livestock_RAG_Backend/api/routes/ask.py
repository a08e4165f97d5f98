from fastapi import APIRouter, Depends

from Livestock_RAG_Backend.api.deps import check_origin, get_pipeline
from Livestock_RAG_Backend.schemas.chat import AnswerOut, AskIn, ErrorOut
from Livestock_RAG_Backend.services.pipeline import AnswerPipeline

router = APIRouter(dependencies=[Depends(check_origin)])

ERROR_RESPONSES = {
    400: {"model": ErrorOut},
    403: {"model": ErrorOut},
    404: {"model": ErrorOut},
    500: {"model": ErrorOut},
    502: {"model": ErrorOut},
    503: {"model": ErrorOut},
}


# plain def: the pipeline blocks on HTTP calls, so FastAPI runs it in the threadpool
@router.post("/ragQuery", response_model=AnswerOut, responses=ERROR_RESPONSES)
def rag_query(
    payload: AskIn,
    pipeline: AnswerPipeline = Depends(get_pipeline),
):
    return pipeline.ask(payload.prompt, payload.context)


@router.post("/trpc", response_model=AnswerOut, responses=ERROR_RESPONSES)
def trpc_query(
    payload: AskIn,
    pipeline: AnswerPipeline = Depends(get_pipeline),
):
    return pipeline.ask(payload.prompt, payload.context)


# tRPC clients may put the procedure in the path (e.g. /trpc/health.askRag); it is not used for routing
@router.post("/trpc/{procedure:path}", response_model=AnswerOut, responses=ERROR_RESPONSES)
def trpc_procedure_query(
    procedure: str,
    payload: AskIn,
    pipeline: AnswerPipeline = Depends(get_pipeline),
):
    return pipeline.ask(payload.prompt, payload.context)
