import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mockupdesk.api.v1 import approvals, collections, comments, posts, public
from mockupdesk.config import settings
from mockupdesk.database import Base, engine
from mockupdesk.errors import WorkflowError
from mockupdesk.logging_config import configure_structlog
from mockupdesk.middleware.logging import RequestIdMiddleware

configure_structlog()
logger = structlog.get_logger()

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    logger.info("workflow_error", error=type(exc).__name__, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


API_PREFIX = "/api/v1"

app.include_router(posts.router, prefix=f"{API_PREFIX}/posts", tags=["posts"])
app.include_router(approvals.router, prefix=f"{API_PREFIX}/approvals", tags=["approvals"])
app.include_router(collections.router, prefix=f"{API_PREFIX}/collections", tags=["collections"])
app.include_router(comments.router, prefix=API_PREFIX, tags=["comments"])
app.include_router(public.router, prefix=f"{API_PREFIX}/public", tags=["public"])


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    logger.info("app_startup", environment=settings.ENVIRONMENT)


@app.get("/health")
def health():
    return {"status": "ok", "version": settings.APP_VERSION}


if __name__ == "__main__":
    uvicorn.run("mockupdesk.main:app", host=settings.HOST, port=settings.PORT, reload=settings.is_development)
