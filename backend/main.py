# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db

# Router imports
from routes.auth import router as auth_router
from routes.admin import router as admin_router
from routes.products import router as products_router
from routes.cart import router as cart_router
from routes.wishlist import router as wishlist_router
from routes.orders import router as orders_router
from routes.addresses import router as addresses_router
from routes.bbq import router as bbq_router
from routes.reviews import router as reviews_router

logger = logging.getLogger(__name__)

# Initialization
init_db()

app = FastAPI(title="Firewood Storefront API", version="1.0.0")

# CORS Configuration
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.SESSION_HEADER_NAME],
)


# Every error leaves the API as {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse({"error": message}, status_code=400)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": str(getattr(exc, "orig", None) or exc)}, status_code=500)


# Router registration
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(wishlist_router)
app.include_router(orders_router)
app.include_router(addresses_router)
app.include_router(bbq_router)
app.include_router(reviews_router)

@app.get("/")
def read_root():
    return {"message": "Firewood Storefront API is running"}
