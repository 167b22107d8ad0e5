import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Form, Response
from fastapi.responses import JSONResponse

from .config import settings
from .errors import ShareError
from .globals import session_manager, vocab_manager
from .models import AnswerRecord, QuizSummary, SessionState, SessionStatus, ShareText
from .share import check_locale, format_share_text, render_result_image
from .vocabulary import BUILTIN_TOPIC, RemoteWordSource, load_remote

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_INVALID = {"error": "Session invalid"}


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def _result_error(session) -> Optional[JSONResponse]:
    if session is None:
        return JSONResponse(SESSION_INVALID, status_code=401)
    if session.status == SessionStatus.unavailable:
        return JSONResponse(
            {"error": "Quiz content unavailable", "detail": session.error},
            status_code=503,
        )
    if not session.is_finished():
        return JSONResponse({"error": "Quiz not finished"}, status_code=409)
    return None


# --- Routes ---
@router.get("/health")
async def health():
    return {"status": "ok", "version": settings.VERSION}


@router.get("/api/topics")
async def get_topics():
    return vocab_manager.get_topics()


@router.post("/start", response_model=SessionState)
async def start_quiz_session(
    response: Response,
    topic: str = Form(BUILTIN_TOPIC),
    quiz: Optional[str] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
):
    if session_id:
        session_manager.discard(session_id)

    loop = asyncio.get_running_loop()
    if quiz:
        new_id = session_manager.create(loop, topic=f"remote:{quiz}")
        entry = session_manager.get_entry(new_id)
        source = RemoteWordSource(
            settings.QUIZ_SOURCE_URL, timeout=settings.QUIZ_FETCH_TIMEOUT
        )
        entry.loader = asyncio.create_task(load_remote(entry.session, source, quiz))
    else:
        words = vocab_manager.get_words(topic)
        if not words:
            logger.warning(f"Unknown topic {topic}, using {BUILTIN_TOPIC}")
            topic = BUILTIN_TOPIC
            words = vocab_manager.get_words(topic)
        new_id = session_manager.create(loop, topic=topic, words=words)
        entry = session_manager.get_entry(new_id)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return entry.session.state()


@router.get("/api/quiz", response_model=SessionState)
async def get_quiz_state(session_id: Optional[str] = Depends(get_session_id)):
    session = session_manager.get(session_id)
    if not session:
        return JSONResponse(SESSION_INVALID, status_code=401)
    return session.state()


@router.post("/api/input", response_model=SessionState)
async def update_input(
    text: str = Form(""), session_id: Optional[str] = Depends(get_session_id)
):
    session = session_manager.get(session_id)
    if not session:
        return JSONResponse(SESSION_INVALID, status_code=401)
    session.set_input(text)
    return session.state()


@router.post("/submit_answer", response_model=AnswerRecord)
async def submit_answer(
    answer: Optional[str] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
):
    session = session_manager.get(session_id)
    if not session:
        return JSONResponse(SESSION_INVALID, status_code=401)
    record = session.submit(answer)
    if record is None:
        return JSONResponse(
            {"error": "No question is being asked", "status": session.status.value},
            status_code=409,
        )
    return record


@router.get("/api/result", response_model=QuizSummary)
async def get_result_data(session_id: Optional[str] = Depends(get_session_id)):
    session = session_manager.get(session_id)
    error = _result_error(session)
    if error:
        return error
    return session.summary()


@router.get("/api/result/share", response_model=ShareText)
async def share_result(
    locale: str = settings.DEFAULT_LOCALE,
    session_id: Optional[str] = Depends(get_session_id),
):
    session = session_manager.get(session_id)
    error = _result_error(session)
    if error:
        return error
    try:
        return format_share_text(session.summary(), locale)
    except ShareError as e:
        logger.warning(f"Share failed: {e}")
        return JSONResponse({"error": str(e)}, status_code=400)


@router.get("/api/result/image")
async def export_result_image(
    locale: str = settings.DEFAULT_LOCALE,
    session_id: Optional[str] = Depends(get_session_id),
):
    session = session_manager.get(session_id)
    error = _result_error(session)
    if error:
        return error
    try:
        check_locale(locale)
    except ShareError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    try:
        image = await asyncio.to_thread(render_result_image, session.summary(), locale)
    except ShareError as e:
        logger.warning(f"Image export failed: {e}")
        return JSONResponse({"error": str(e)}, status_code=503)
    return Response(
        content=image,
        media_type="image/png",
        headers={"Content-Disposition": 'attachment; filename="quiz-result.png"'},
    )


@router.post("/api/reset")
async def reset_session(
    response: Response, session_id: Optional[str] = Depends(get_session_id)
):
    if session_id:
        session_manager.discard(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}
