import logging
import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Database helpers
from database import (
    CATEGORIES,
    ORDERS,
    PRODUCTS,
    ConfigurationError,
    MissingTableError,
    StoreError,
    TableStore,
    connect,
)

# Schemas
from schemas import (
    CategoriesSave,
    Category,
    CategoryAdd,
    CategoryDelete,
    LoginRequest,
    Order,
    OrderSubmit,
    Product,
    ProductsSave,
    StatusUpdate,
)

import auth
from normalize import (
    DEFAULT_CATEGORY,
    normalize_categories,
    normalize_orders,
    normalize_products,
    order_to_storage,
    product_from_storage,
    product_to_storage,
)
from sample_data import sample_categories, sample_products


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Bar do Vaqueiro backend...")
    try:
        db = connect()
    except ConfigurationError as e:
        logger.critical("%s", e)
        sys.exit(1)
    app.state.store = TableStore(db)
    if await run_in_threadpool(auth.ensure_admin_credentials, app.state.store):
        logger.info("System ready")
    else:
        logger.warning("System loaded, but admin credentials may need attention")
    yield


# App
app = FastAPI(title="Bar do Vaqueiro API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def invalid_body(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# Utility

def get_store(request: Request) -> TableStore:
    return request.app.state.store


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def store_failure(context: str, e: Exception) -> HTTPException:
    logger.error("%s: %s", context, e)
    return HTTPException(status_code=500, detail=f"{context}: {e}")


# Basic health
@app.get("/")
def read_root():
    return {
        "message": "Bar do Vaqueiro backend is running",
        "status": "OK",
        "timestamp": now_iso(),
    }


# Public menu endpoints
@app.get("/api/products")
def list_products(store: TableStore = Depends(get_store)):
    try:
        rows = store.select(PRODUCTS, order_by=[("display_order", True), ("id", True)])
    except MissingTableError:
        logger.info("Products table does not exist, returning sample menu")
        return {"products": sample_products(table_missing=True)}
    except StoreError as e:
        logger.error("Failed to fetch products: %s", e)
        return {"products": []}

    logger.info("%d products found", len(rows))
    if not rows:
        return {"products": sample_products(table_missing=False)}

    # unset display_order sorts last
    rows = sorted(rows, key=lambda r: r.get("display_order") is None)
    return {"products": normalize_products([product_from_storage(r) for r in rows])}


@app.get("/api/categories")
def list_categories(store: TableStore = Depends(get_store)):
    try:
        rows = store.select(CATEGORIES, order_by=[("name", True)])
    except MissingTableError:
        logger.info("Categories table does not exist, returning sample categories")
        return {"categories": sample_categories(table_missing=True)}
    except StoreError as e:
        logger.error("Failed to fetch categories: %s", e)
        return {"categories": []}

    logger.info("%d categories found", len(rows))
    if not rows:
        return {"categories": sample_categories(table_missing=False)}
    return {"categories": normalize_categories(rows)}


# Orders
@app.get("/api/orders")
def list_orders(store: TableStore = Depends(get_store)):
    try:
        rows = store.select(ORDERS, order_by=[("created_at", False)])
    except MissingTableError:
        logger.info("Orders table does not exist, returning no orders")
        return {"orders": []}
    except StoreError as e:
        logger.error("Failed to fetch orders: %s", e)
        return {"orders": []}
    logger.info("%d orders found", len(rows))
    return {"orders": normalize_orders(rows)}


@app.post("/api/orders")
def submit_order(payload: OrderSubmit, store: TableStore = Depends(get_store)):
    order_data = payload.orderData
    if not order_data or not order_data.get("customerName"):
        raise HTTPException(status_code=400, detail="Invalid order data")

    logger.info("Saving order for %s", order_data["customerName"])
    try:
        order = Order(**order_to_storage(order_data), created_at=now_iso())
        saved = store.insert(ORDERS, [order.model_dump()])
    except (StoreError, ValidationError) as e:
        raise store_failure("Error saving order", e)

    return {"success": True, "message": "Order registered", "orderId": saved[0]["id"]}


@app.post("/api/orders/update-status")
def update_order_status(payload: StatusUpdate, store: TableStore = Depends(get_store)):
    if not payload.orderId or not payload.status:
        raise HTTPException(status_code=400, detail="Order id and status are required")

    logger.info("Updating order %s to %s", payload.orderId, payload.status)
    try:
        store.update(ORDERS, {"status": payload.status, "updated_at": now_iso()}, {"id": payload.orderId})
    except StoreError as e:
        raise store_failure("Error updating order status", e)

    return {"success": True, "message": f"Order status updated to {payload.status}"}


# Auth
@app.post("/api/auth/login")
def login(payload: LoginRequest, store: TableStore = Depends(get_store)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    logger.info("Login attempt: %s", payload.username)
    try:
        return auth.login(store, payload.username, payload.password)
    except auth.Unauthorized as e:
        raise HTTPException(status_code=401, detail=e.message)


@app.get("/api/auth/verify")
def verify(request: Request):
    token = auth.bearer_token(request.headers.get("authorization"))
    return auth.verify(token)


# Admin endpoints
@app.post("/api/products")
def save_products(payload: ProductsSave, store: TableStore = Depends(get_store), _: str = Depends(auth.require_admin)):
    products = normalize_products(payload.products)
    logger.info("Saving %d products...", len(products))
    try:
        rows = [Product(**product_to_storage(p)).model_dump() for p in products]
        store.delete(PRODUCTS)
        if rows:
            store.insert(PRODUCTS, rows)
    except (StoreError, ValueError) as e:
        raise store_failure("Error saving products", e)

    return {"success": True, "message": f"{len(products)} products saved"}


@app.post("/api/categories")
def save_categories(payload: CategoriesSave, store: TableStore = Depends(get_store), _: str = Depends(auth.require_admin)):
    categories = normalize_categories(payload.categories)
    if not categories:
        raise HTTPException(status_code=400, detail="No categories provided")

    logger.info("Saving %d categories...", len(categories))
    try:
        rows = [Category(**{**c, "id": str(c["id"])}).model_dump() for c in categories]
        store.delete(CATEGORIES, exclude={"id": [r["id"] for r in rows]})
        store.upsert(CATEGORIES, rows, on_conflict="id")
    except (StoreError, ValidationError) as e:
        raise store_failure("Error saving categories", e)

    return {"success": True, "message": f"{len(categories)} categories saved"}


@app.post("/api/categories/add")
def add_category(payload: CategoryAdd, store: TableStore = Depends(get_store), _: str = Depends(auth.require_admin)):
    category = payload.category
    if not category or not category.get("id") or not category.get("name"):
        raise HTTPException(status_code=400, detail="Invalid category data")

    logger.info("Adding category %s (id: %s)", category["name"], category["id"])
    try:
        row = Category(
            id=str(category["id"]),
            name=category["name"],
            description=category.get("description") or f"Category of {category['name']}",
        )
        store.upsert(CATEGORIES, [row.model_dump()], on_conflict="id")
    except (StoreError, ValidationError) as e:
        raise store_failure("Error adding category", e)

    return {"success": True, "message": f'Category "{row.name}" added'}


@app.post("/api/categories/delete")
def delete_category(payload: CategoryDelete, store: TableStore = Depends(get_store), _: str = Depends(auth.require_admin)):
    category_id = payload.categoryId
    if not category_id:
        raise HTTPException(status_code=400, detail="Category id is required")

    logger.info("Deleting category %s", category_id)
    try:
        try:
            in_category = store.select(PRODUCTS, {"category": category_id})
        except MissingTableError:
            in_category = []
        if in_category:
            store.update(PRODUCTS, {"category": DEFAULT_CATEGORY}, {"category": category_id})
            logger.info("Moved %d products to category %s", len(in_category), DEFAULT_CATEGORY)
        store.delete(CATEGORIES, {"id": category_id})
    except StoreError as e:
        raise store_failure("Error deleting category", e)

    return {
        "success": True,
        "message": f"Category deleted. {len(in_category)} products were moved to the default category.",
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
