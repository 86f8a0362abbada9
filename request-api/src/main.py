import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Depends, File, Form, Request, Response, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import ValidationError
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from slack_sdk import WebClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

import crud
from config import (
    STATIC_MAX_AGE_SECONDS,
    STATUS_VALUES,
    UPLOADS_MAX_AGE_SECONDS,
    Settings,
    get_settings,
)
from database import Database, init_database
from duplicate_guard import check_duplicate_request
from exceptions import (
    CustomException,
    NotFoundException,
    StartupException,
    StorageException,
    ValidationException,
)
from origin_policy import CachedStaticFiles, OriginPolicyMiddleware
from request_model import models, schemas
from schema import HealthCheckResponse, HealthStatus, DependencyHealth
from uploads import has_document, remove_document, resolve_download, save_document

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

MAX_REQUEST_ID = 2**31 - 1

if os.environ.get("SENTRY_ENABLED", "false").lower() == "true":
    sentry_sdk.init(
        enable_tracing=os.environ.get("SENTRY_TRACING_ENABLED", "false").lower()
        == "true",
        traces_sample_rate=float(os.environ.get("SENTRY_TRACING_SAMPLE_RATE", "0.01")),
        release=os.environ.get("GIT_COMMIT"),
        integrations=[
            StarletteIntegration(transaction_style="url"),
            FastApiIntegration(transaction_style="url"),
        ],
        debug=os.environ.get("SENTRY_DEBUG", "false").lower() == "true",
    )


def send_slack_alert(message):
    slack_token = os.environ.get("SLACK_BOT_TOKEN", "")
    slack_channel = os.environ.get("SLACK_CHANNEL", "")
    if not slack_token or not slack_channel:
        logging.warning("Slack token or channel is missing.")
        return
    client = WebClient(token=slack_token)
    bot_name = "Benefit Requests DB"
    client.chat_postMessage(channel=slack_channel, text=message, username=bot_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    database = Database.from_url(settings.database_url)
    try:
        await run_in_threadpool(
            init_database,
            database,
            attempts=settings.db_connect_attempts,
            delay=settings.db_connect_delay_seconds,
        )
    except StartupException as e:
        logger.critical(f"{e.message}, exiting")
        send_slack_alert("DB connection issue detected in benefit-request-backend..")
        database.dispose()
        raise
    app.state.database = database
    logger.info("Application startup complete")
    yield
    database.dispose()
    logger.info("Database pool closed, application shut down")


settings = get_settings()
app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(settings.origin_allow_list),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(OriginPolicyMiddleware, allowed_origins=settings.origin_allow_list)


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(CustomException)
async def custom_exception_handler(request: Request, exc: CustomException):
    include_details = exc.status_code < 500 or get_settings().is_development
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_content(include_details)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    content = {"error": "Internal server error"}
    if get_settings().is_development:
        content["details"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/health", response_model=HealthCheckResponse)
def healthcheck(response: Response, db: Session = Depends(get_db)):
    try:
        db_result = db.execute(text("SELECT 1"))
        db_reachable = len(db_result.all()) == 1
    except SQLAlchemyError:
        logger.exception("Health check of request-db failed")
        db_reachable = False

    response.status_code = 200 if db_reachable else 500

    return HealthCheckResponse(
        name="request-api",
        version=os.environ.get("GIT_COMMIT", "unknown"),
        dependencies=[
            DependencyHealth(
                name="request-db",
                status=HealthStatus.HEALTHY if db_reachable else HealthStatus.UNHEALTHY,
            ),
        ],
    )


@app.post("/api/requests", status_code=201, response_model=schemas.Request)
def create_request(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    emp_id: Optional[str] = Form(None, alias="empId"),
    program: Optional[str] = Form(None),
    program_time: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    reason: Optional[str] = Form(None),
    loan_type: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    document: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # any client supplied status is ignored, new requests are always Pending
    request = _build_request_create(
        name=name,
        email=email,
        emp_id=emp_id,
        program=program,
        program_time=program_time,
        request_date=date,
        reason=reason,
        loan_type=loan_type,
        amount=amount,
    )

    document_path = None
    try:
        check_duplicate_request(
            db, request.emp_id, request.program, settings.one_time_programs
        )
        if has_document(document):
            document_path = save_document(document, settings.upload_dir)
        request_model = crud.create_request(db, request, document_path)
    except SQLAlchemyError as e:
        logger.exception("Error creating request")
        if document_path:
            remove_document(document_path, settings.upload_dir)
        raise StorageException("Failed to create request", details=str(e)) from e

    return _map_to_schema(request_model)


@app.get("/api/requests", response_model=List[schemas.Request])
def read_requests(db: Session = Depends(get_db)):
    try:
        request_models = crud.get_requests(db)
    except SQLAlchemyError as e:
        logger.exception("Error fetching requests")
        raise StorageException("Failed to fetch requests", details=str(e)) from e
    return [_map_to_schema(request_model) for request_model in request_models]


@app.get("/api/requests/emp/{emp_id}", response_model=List[schemas.Request])
def read_requests_by_emp_id(emp_id: str, db: Session = Depends(get_db)):
    try:
        request_models = crud.get_requests_by_emp_id(db, emp_id)
    except SQLAlchemyError as e:
        logger.exception("Error fetching requests by empId")
        raise StorageException("Failed to fetch requests", details=str(e)) from e
    return [_map_to_schema(request_model) for request_model in request_models]


@app.get("/api/requests/{request_id}", response_model=schemas.Request)
def read_request(request_id: str, db: Session = Depends(get_db)):
    try:
        request_model = crud.get_request(db, _parse_request_id(request_id))
    except SQLAlchemyError as e:
        logger.exception("Error fetching request")
        raise StorageException("Failed to fetch request", details=str(e)) from e
    if request_model is None:
        raise NotFoundException("Request not found")
    return _map_to_schema(request_model)


@app.put("/api/requests/{request_id}", response_model=schemas.Request)
def update_request(
    request_id: str, update: schemas.StatusUpdate, db: Session = Depends(get_db)
):
    if update.status not in STATUS_VALUES:
        raise ValidationException("Invalid status value")
    try:
        request_model = crud.update_request_status(
            db, _parse_request_id(request_id), update.status
        )
    except SQLAlchemyError as e:
        logger.exception("Error updating request")
        raise StorageException("Failed to update request", details=str(e)) from e
    if request_model is None:
        raise NotFoundException("Request not found")
    logger.info(f"Request {request_model.id} set to {update.status}")
    return _map_to_schema(request_model)


@app.get("/download/{filename:path}")
def download(filename: str, settings: Settings = Depends(get_settings)):
    path = resolve_download(filename, settings.upload_dir)
    return FileResponse(path, filename=path.name)


@app.get("/")
def employee_page(settings: Settings = Depends(get_settings)):
    return _page(settings.frontend_dir)


@app.get("/hr")
def hr_page(settings: Settings = Depends(get_settings)):
    return _page(settings.hr_page_dir)


app.mount(
    "/Uploads",
    CachedStaticFiles(
        directory=settings.upload_dir, check_dir=False, max_age=UPLOADS_MAX_AGE_SECONDS
    ),
    name="uploads",
)


# registered last so API routes and the /Uploads mount take precedence
@app.api_route(
    "/{asset_path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def static_asset(
    asset_path: str, request: Request, settings: Settings = Depends(get_settings)
):
    if request.method not in ("GET", "HEAD"):
        raise StarletteHTTPException(status_code=404)
    root = Path(settings.static_dir).resolve()
    path = (root / asset_path).resolve()
    if root not in path.parents or not path.is_file():
        raise StarletteHTTPException(status_code=404)
    return FileResponse(
        path, headers={"Cache-Control": f"public, max-age={STATIC_MAX_AGE_SECONDS}"}
    )


def _page(directory: str):
    index = Path(directory) / "index.html"
    if not index.is_file():
        raise NotFoundException("Page not found")
    return FileResponse(index)


def _parse_request_id(request_id: str) -> int:
    if not (request_id.isascii() and request_id.isdigit()):
        raise NotFoundException("Request not found")
    parsed = int(request_id)
    # ids are a 32-bit integer column
    if parsed > MAX_REQUEST_ID:
        raise NotFoundException("Request not found")
    return parsed


def _build_request_create(**fields) -> schemas.RequestCreate:
    fields = {key: value or None for key, value in fields.items()}
    required = ("name", "email", "emp_id", "program", "request_date")
    if not all(fields[key] for key in required):
        raise ValidationException("Missing required fields")
    try:
        return schemas.RequestCreate(**fields)
    except ValidationError as e:
        raise ValidationException(
            "Invalid request",
            details=[
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ],
        ) from e


def _map_to_schema(request_model: models.Request) -> schemas.Request:
    return schemas.Request.model_validate(request_model)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
