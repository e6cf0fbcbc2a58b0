from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.middleware_correlation import CorrelationIdMiddleware
from app.core.logging import setup_logging
from app.core.errors import register_exception_handlers


# Routers
from app.api.routes.health import router as health_router
from app.api.routes.auth import router as auth_router
from app.api.routes.genres import router as genres_router
from app.api.routes.books import router as books_router
from app.api.routes.transactions import router as transactions_router


setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Bookstore API - catalog of genres and books, and purchase transactions.",
    version="1.0.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
)

# CORS middleware - allow docs UI to make API requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:8000", "http://127.0.0.1:8000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middlewares
app.add_middleware(CorrelationIdMiddleware)

# Root endpoint
@app.get("/")
async def root():
    """API root endpoint with basic information."""
    return {
        "message": "Welcome to Bookstore API",
        "version": "1.0.0",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "endpoints": {
            "health": f"{settings.API_PREFIX}/health-check",
            "auth": f"{settings.API_PREFIX}/auth",
            "genres": f"{settings.API_PREFIX}/genre",
            "books": f"{settings.API_PREFIX}/books",
            "transactions": f"{settings.API_PREFIX}/transactions",
        },
        "authentication": {
            "type": "Bearer token",
            "required_for": [f"{settings.API_PREFIX}/transactions", f"{settings.API_PREFIX}/auth/me"],
        },
    }

register_exception_handlers(app)

# Mount routers
api = APIRouter(prefix=settings.API_PREFIX)
api.include_router(health_router)
api.include_router(auth_router)
api.include_router(genres_router)
api.include_router(books_router)
api.include_router(transactions_router)
app.include_router(api)
