from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from database import connect_to_mongo, close_mongo_connection
from admin.routes import router as admin_router
from doctor.routes import router as doctor_router
from user.routes import router as user_router
from payment.routes import router as payment_router, webhook_router
import logging
import config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Prescripto API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    if errors and errors[0].get("loc"):
        message = f"{errors[0]['loc'][-1]}: {message}"
    return JSONResponse(status_code=422, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


@app.on_event("startup")
async def startup():
    config.validate_runtime_config()
    await connect_to_mongo()


@app.on_event("shutdown")
async def shutdown():
    await close_mongo_connection()


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "API WORKING"

# All Routes Endpoint Setup
app.include_router(admin_router, prefix="/api", tags=["admin"])
app.include_router(doctor_router, prefix="/api", tags=["doctor"])
app.include_router(user_router, prefix="/api", tags=["user"])
app.include_router(payment_router, prefix="/api", tags=["payment"])
app.include_router(webhook_router, tags=["payment"])
