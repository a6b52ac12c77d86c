import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pymongo.database import Database

from database import connect, ensure_indexes
from errors import validation_exception_handler
from routers import (
    about,
    admin_pages,
    auth,
    blogs,
    case_studies,
    contact,
    content,
    footer,
    heroes,
    hire,
    industries,
    media,
    pages,
    services,
    team,
    testimonials,
    trusted,
    why_choose,
)
from security import AdminAuthMiddleware
from settings import Settings, setup_logging
from uploads import UploadStore

# Public paths listed in /sitemap.xml: (path, changefreq, priority)
SITEMAP_PATHS = [
    ("/", "daily", "1.0"),
    ("/about", "weekly", "0.8"),
    ("/blogs", "daily", "0.7"),
    ("/services", "weekly", "0.9"),
    ("/case-studies", "weekly", "0.7"),
    ("/hire", "weekly", "0.6"),
    ("/contact", "monthly", "0.8"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.db is not None:
        ensure_indexes(app.state.db)
    yield


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the site. ``database`` overrides the connection from DATABASE_URL (used by tests)."""
    settings = settings or Settings()

    app = FastAPI(title="Marketing Site CMS", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database if database is not None else connect(settings.database_url, settings.database_name)
    app.state.uploads = UploadStore(settings.upload_dir, settings.upload_url_prefix)

    app.add_middleware(AdminAuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    for module in (auth, blogs, case_studies, industries, team, testimonials, trusted,
                   footer, why_choose, heroes, content, contact, media, services, hire, about):
        app.include_router(module.router)
    app.include_router(pages.router)
    app.include_router(admin_pages.router)

    @app.get("/sitemap.xml", include_in_schema=False)
    def sitemap() -> Response:
        base = settings.site_url.rstrip("/")
        entries = "".join(
            f"<url><loc>{base}{path}</loc><changefreq>{freq}</changefreq><priority>{priority}</priority></url>"
            for path, freq, priority in SITEMAP_PATHS
        )
        xml = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
        )
        return Response(content=xml, media_type="application/xml")

    return app


load_dotenv()
setup_logging(os.getenv("LOG_LEVEL", "INFO"))
app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
