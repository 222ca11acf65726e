# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi import Request
import logging

# import your routers and db init
from app.routers import employee_router
from app.database import init_db
from app.utils import success_resp


# Initialize database
init_db()

# Create a single FastAPI app instance (do NOT create it twice)
app = FastAPI(title="Empleados API", version="1.0.0", description="Employee records and HR statistics API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(employee_router.router)

logger = logging.getLogger("uvicorn.error")


# Exception handlers to return uniform error shape
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    # exc.detail may be dict or str
    msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(content={"success": False, "message": msg or "Error", "data": {}}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # loc is (source, field, ...); drop the source ("body"/"query")
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        content=jsonable_encoder({"success": False, "message": "Validation failed", "data": {"errors": errors}}),
        status_code=422,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(content={"success": False, "message": "Internal server error", "data": {}}, status_code=500)


@app.get("/")
def root():
    return success_resp("Empleados API is running")


@app.get("/health")
def health_check():
    return success_resp("Service is healthy", {"status": "healthy"})
