import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import auth
import database
import media
import summary
from routes import blog, campaigns, contacts, donations, events, gallery, news, testimonials

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("pesantren")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        try:
            database.ensure_indexes(database.db)
            auth.ensure_default_admin(database.db)
        except PyMongoError as e:
            logger.warning("Skipping index creation and admin seed (database unavailable): %s", e)
    else:
        logger.warning("DATABASE_URL not set, running without a database")
    yield


app = FastAPI(title="Pesantren CMS API", lifespan=lifespan)
app.state.summary_cache = summary.new_summary_cache()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error envelopes

def _field_errors(errors) -> dict:
    details = {}
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        details[".".join(loc) or "_schema"] = err.get("msg")
    return details


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Validation error", "details": _field_errors(exc.errors())},
    )


@app.exception_handler(ValidationError)
async def document_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Validation error", "details": _field_errors(exc.errors())},
    )


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    return JSONResponse(
        status_code=409,
        content={"success": False, "error": "A record with this slug or identifier already exists"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


@app.get("/")
def read_root():
    return {"message": "Pesantren CMS API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "media": "✅ Configured" if media.is_configured() else "❌ Not Configured",
        "collections": []
    }
    if database.db is not None:
        try:
            response["collections"] = database.db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


app.include_router(auth.router)
app.include_router(media.router)
app.include_router(summary.router)
for module in (news, blog, events, gallery, testimonials, campaigns, donations, contacts):
    app.include_router(module.router)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
