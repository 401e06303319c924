from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from core.exceptions import PointsException

from db import Base, engine
from core.config import settings
from core.logging import logger

from models.user import User  # noqa: F401
from models.category import Category  # noqa: F401
from models.points import UserCategoryPoints, PointsHistory  # noqa: F401
from models.tournament import Tournament, TournamentResult  # noqa: F401

# ROUTES
from api.routers.tournaments import router as tournaments_router
from api.routers.rankings import router as rankings_router
from api.routers.users import router as users_router
from api.routers.categories import router as categories_router


app = FastAPI(title="Tournament Points API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PointsException)
async def points_exception_handler(request: Request, exc: PointsException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "points_error"}
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "type": "validation_error"}
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    import traceback
    error_traceback = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"Unhandled exception: {error_traceback}")
    content = {"detail": "Server error", "type": type(exc).__name__}
    if settings.debug:
        content["traceback"] = error_traceback
    return JSONResponse(status_code=500, content=content)


@app.on_event("startup")
async def startup_event():
    logger.info("Starting up application...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application...")


app.include_router(tournaments_router)
app.include_router(rankings_router)
app.include_router(users_router)
app.include_router(categories_router)
