from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from datetime import datetime
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from tutorhub.config import get_settings, validate_runtime_config
from tutorhub.database.database import init_db
from tutorhub.logger import logger
from tutorhub.utilities import format_validation_errors

### ROUTERS
from tutorhub.routers.admin import router as admin_router
from tutorhub.routers.authentication import router as auth_router, limiter
from tutorhub.routers.feedback import router as feedback_router
from tutorhub.routers.materials import router as materials_router
from tutorhub.routers.sessions import router as sessions_router
from tutorhub.routers.tutor import router as tutor_router
from tutorhub.routers.videos import router as videos_router


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging all HTTP requests and responses.

    Logs request method, URL, response status, and timing information.
    Handles errors by logging exceptions.
    """
    async def dispatch(self, request: Request, call_next):
        start_time = datetime.now()
        logger.info(f"Request: {request.method} {request.url}")

        try:
            response = await call_next(request)
            duration = (datetime.now() - start_time).total_seconds()
            logger.info(f"Response: {response.status_code} - Duration: {duration:.3f}s")
            return response
        except Exception as e:
            logger.error(f"Error processing request: {str(e)}")
            raise

app = FastAPI(
    title=get_settings().app_name,
    version=get_settings().app_version,
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.limiter = limiter

# Add logging middleware
app.add_middleware(LoggingMiddleware)

# The cookie only carries the session id, the record lives in the session store
app.add_middleware(
    SessionMiddleware,
    secret_key=get_settings().secret_key,
    max_age=get_settings().session_expire_minutes * 60,  # Convert minutes to seconds
    same_site="lax",
    https_only=get_settings().https_enabled
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    max_age=3600
)

#########################
#### ERROR HANDLERS #####
#########################

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with a readable message, never a 422."""
    return JSONResponse(status_code=400, content={"message": format_validation_errors(exc.errors())})

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"message": "Too many requests"})

@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})

# Include routers
app.include_router(admin_router, prefix='/api', tags=['admin'])
app.include_router(auth_router, prefix='/api', tags=['authentication'])
app.include_router(feedback_router, prefix='/api', tags=['feedback'])
app.include_router(materials_router, prefix='/api', tags=['materials'])
app.include_router(sessions_router, prefix='/api', tags=['sessions'])
app.include_router(tutor_router, prefix='/api', tags=['tutors'])
app.include_router(videos_router, prefix='/api', tags=['videos'])

@app.get("/")
def read_root():
    """
    Root endpoint returning API welcome message.

    Returns:
    - dict: Welcome message
    """
    return {"message": "Welcome to the TutorHub API"}

@app.on_event("startup")
async def startup_event():
    """
    Application startup handler.
    Refuses to start with an unsafe configuration, then creates missing tables.
    """
    validate_runtime_config(get_settings())
    init_db()
    logger.info("Server starting up...")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Server shutting down...")

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host=get_settings().app_host, port=get_settings().app_port)
