import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from ekwento.config import settings
from ekwento.database import engine, Base
from ekwento.init_admin import create_admin
from ekwento.utils.logging_config import configure_logging
from ekwento.api import (
    categories, codes, games, notifications, quiz, reports, stories, student, users,
    settings as settings_api
)
from ekwento.services.result import UnauthorizedError
from ekwento.services.student_session import (
    student_session_service, STUDENT_INFO_COOKIE, PRIVACY_CONSENT_COOKIE
)

# Register every table on Base.metadata
import ekwento.models  # noqa: F401

logger = configure_logging()

def startup_tasks():
    Base.metadata.create_all(bind=engine)
    create_admin()

app = FastAPI(
    title="E-Kwento API",
    description="Story library, access codes and quizzes for the E-Kwento classroom app",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def refresh_student_cookies(request: Request, call_next):
    """Slide the student cookies' expiry forward on every student request"""
    response = await call_next(request)
    if not request.url.path.startswith("/student"):
        return response

    token = request.cookies.get(STUDENT_INFO_COOKIE)
    if not token or request.cookies.get(PRIVACY_CONSENT_COOKIE) != "true":
        return response
    # The endpoint already issued a new session
    if any(h.startswith(f"{STUDENT_INFO_COOKIE}=") for h in response.headers.getlist("set-cookie")):
        return response

    try:
        identity = student_session_service.read_token(token)
    except UnauthorizedError:
        return response

    student.set_student_cookies(response, student_session_service.issue_token(identity))
    return response

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)")
    return response

# Include routers
app.include_router(student.router)
app.include_router(stories.router)
app.include_router(categories.router)
app.include_router(quiz.router)
app.include_router(codes.router)
app.include_router(reports.router)
app.include_router(settings_api.router)
app.include_router(notifications.router)
app.include_router(users.public_router)
app.include_router(users.router)
app.include_router(games.public_router)
app.include_router(games.router)

@app.on_event("startup")
async def startup_event():
    startup_tasks()

@app.get("/")
async def root():
    return {
        "message": "E-Kwento API",
        "features": [
            "Access codes that unlock stories",
            "Story view tracking per student",
            "One quiz submission per student and code",
            "Weekly teacher reports"
        ]
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
