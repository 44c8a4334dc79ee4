import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tuition.api.v1.activities.router import router as activities_router
from tuition.api.v1.batches.router import router as batches_router
from tuition.api.v1.courses.router import router as courses_router
from tuition.api.v1.institutions.router import router as institutions_router
from tuition.api.v1.months.router import router as months_router
from tuition.api.v1.payments.router import router as payments_router
from tuition.api.v1.references.router import router as references_router
from tuition.api.v1.students.router import router as students_router
from tuition.core.config import settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=logging.getLevelName(level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Tuition Center Backend")

    # CORS: allow the admin frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(batches_router)
    app.include_router(courses_router)
    app.include_router(months_router)
    app.include_router(institutions_router)
    app.include_router(students_router)
    app.include_router(payments_router)
    app.include_router(references_router)
    app.include_router(activities_router)

    return app


app = create_app()
