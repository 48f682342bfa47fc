import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from fastapi import FastAPI, Depends, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import repository
from auth import change_password, login, require_admin
from database import db
from errors import PayloadTooLarge, StorageError, StoreError, UnsupportedMediaError, ValidationError
from schemas import CamelModel, OrderItem, Price

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# App setup
app = FastAPI(title="Store API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.mount("/uploads", StaticFiles(directory=str(config.UPLOAD_DIR), check_dir=False), name="uploads")


# Error handling
def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query"))
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return error_response(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "Internal server error")


@app.on_event("startup")
def startup():
    config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    db.initialize()


# Schemas (request/response)
class LoginRequest(BaseModel):
    password: Optional[str] = None


class PasswordChangeRequest(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class SettingsUpdate(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    store_name: Optional[str] = None
    hero_title: Optional[str] = None
    hero_description: Optional[str] = None
    currency: Optional[str] = None
    language: Optional[str] = None
    store_status: Optional[bool] = None
    contact: Optional[Dict[str, Any]] = None
    social: Optional[Dict[str, Any]] = None
    logo: Optional[str] = None
    store_url: Optional[str] = None


class CategoryIn(BaseModel):
    name: str
    description: str = ""


class CategoryUpdate(BaseModel):
    id: int
    name: Optional[str] = None
    description: Optional[str] = None


class ProductIn(CamelModel):
    name: str
    description: str = ""
    price: Price
    currency: str = "DA"
    category: str = ""
    status: bool = True
    images: List[str] = []


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Price] = None
    currency: Optional[str] = None
    category: Optional[str] = None
    status: Optional[bool] = None
    images: Optional[List[str]] = None


class OrderIn(CamelModel):
    items: List[OrderItem] = []
    customer_name: str
    phone: str
    description: str = ""
    total: Optional[float] = Field(None, ge=0)


class OrderStatusUpdate(BaseModel):
    status: str


# Health and helpers
@app.get("/")
def root():
    return {"message": "Store API running"}


@app.get("/api/health")
def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": "Server is running correctly",
        "environment": config.ENVIRONMENT,
    }


@app.get("/api/debug")
def debug():
    response = {
        "backend": "✅ Running",
        "data_file": "❌ Not Available",
        "environment": config.ENVIRONMENT,
    }
    status = db.status()
    if status["hasData"]:
        response["data_file"] = "✅ Loaded & Valid"
    response.update(status)
    return response


# Auth
@app.post("/api/login")
def login_route(payload: LoginRequest):
    token, user = login(payload.password)
    return {"success": True, "token": token, "user": user}


@app.get("/api/user")
def profile(_: dict = Depends(require_admin)):
    return repository.get_profile()


@app.put("/api/user/password")
def change_password_route(payload: PasswordChangeRequest, _: dict = Depends(require_admin)):
    change_password(payload.current_password, payload.new_password)
    return {"success": True, "message": "Password updated successfully"}


# Settings
@app.get("/api/settings")
def get_settings():
    return repository.get_settings()


@app.put("/api/settings")
def update_settings(payload: SettingsUpdate, _: dict = Depends(require_admin)):
    settings = repository.update_settings(payload.model_dump(by_alias=True, exclude_unset=True))
    return {"success": True, "message": "Settings updated successfully", "settings": settings}


# Categories
@app.get("/api/categories")
def list_categories():
    return repository.list_categories()


@app.post("/api/categories")
def add_category(payload: CategoryIn, _: dict = Depends(require_admin)):
    category = repository.add_category(payload.name, payload.description)
    return {"success": True, "category": category}


@app.put("/api/categories")
def update_category(payload: CategoryUpdate, _: dict = Depends(require_admin)):
    fields = payload.model_dump(exclude={"id"}, exclude_unset=True)
    category = repository.update_category(payload.id, fields)
    return {"success": True, "category": category}


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: int, _: dict = Depends(require_admin)):
    repository.delete_category(category_id)
    return {"success": True, "message": "Category deleted successfully"}


# Products
@app.get("/api/products")
def list_products():
    return repository.list_products()


@app.get("/api/products/{product_id}")
def get_product(product_id: int):
    return repository.get_product(product_id)


@app.post("/api/products")
def create_product(payload: ProductIn, _: dict = Depends(require_admin)):
    product = repository.add_product(payload.model_dump(by_alias=True))
    return {"success": True, "product": product}


@app.put("/api/products/{product_id}")
def update_product(product_id: int, payload: ProductUpdate, _: dict = Depends(require_admin)):
    product = repository.update_product(product_id, payload.model_dump(by_alias=True, exclude_unset=True))
    return {"success": True, "product": product}


@app.delete("/api/products/{product_id}")
def delete_product(product_id: int, _: dict = Depends(require_admin)):
    repository.delete_product(product_id)
    return {"success": True, "message": "Product deleted successfully"}


# Orders
@app.get("/api/orders")
def list_orders(_: dict = Depends(require_admin)):
    return repository.list_orders()


@app.get("/api/orders/{order_id}")
def get_order(order_id: int, _: dict = Depends(require_admin)):
    return repository.get_order(order_id)


@app.post("/api/orders")
def create_order(payload: OrderIn):
    order = repository.create_order(payload.model_dump(by_alias=True, exclude_none=True))
    return {
        "success": True,
        "orderId": order["id"],
        "message": "Your order has been received! We will contact you soon by WhatsApp or phone.",
    }


@app.put("/api/orders/{order_id}/status")
def update_order_status(order_id: int, payload: OrderStatusUpdate, _: dict = Depends(require_admin)):
    order = repository.update_order_status(order_id, payload.status)
    return {"success": True, "message": "Order status updated successfully", "order": order}


# Uploads
@app.post("/api/upload")
def upload_image(image: Optional[UploadFile] = File(None), _: dict = Depends(require_admin)):
    if image is None:
        raise ValidationError("No image file provided")
    extension = ALLOWED_IMAGE_TYPES.get(image.content_type or "")
    if extension is None:
        raise UnsupportedMediaError(f"File type not allowed: {image.content_type}")
    content = image.file.read(config.MAX_UPLOAD_BYTES + 1)
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise PayloadTooLarge(f"Image must be at most {config.MAX_UPLOAD_BYTES} bytes")

    file_name = f"image-{int(time.time() * 1000)}-{secrets.token_hex(3)}{extension}"
    try:
        config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        (config.UPLOAD_DIR / file_name).write_bytes(content)
    except OSError as e:
        logger.error(f"Upload error: {e}")
        raise StorageError("Failed to upload image") from e
    image_url = f"/uploads/{file_name}"
    logger.info(f"Image uploaded: {image_url} ({len(content)} bytes)")
    return {"success": True, "imageUrl": image_url, "message": "Image uploaded successfully"}


# Analytics
@app.post("/api/analytics/visitor")
def track_visitor():
    repository.track_visitor()
    return {"success": True}


@app.get("/api/analytics")
def get_analytics(_: dict = Depends(require_admin)):
    return repository.get_analytics()


@app.get("/api/dashboard/stats")
def dashboard_stats(_: dict = Depends(require_admin)):
    return repository.dashboard_stats()


@app.post("/api/reset-data")
def reset_data(_: dict = Depends(require_admin)):
    summary = db.reset()
    return {"success": True, "message": "Store data has been completely reset", "resetSummary": summary}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
