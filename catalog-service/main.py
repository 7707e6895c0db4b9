import sys
import time
import uuid
from typing import List, Optional
from fastapi import Depends, FastAPI, File, Form, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from config import SERVICE_NAME, settings
from models import ProductNotFound, ProductRepository, seed_products
from schemas import ProductResponse, ProductValidationError, validate_create, validate_update
from storage import ImageStore, UploadTooLarge, read_upload

NOT_FOUND_MESSAGE = "Product with given id was not found"

# Config logging JSON (niveaux INFO, WARNING, ERROR)
logger.remove()
logger.add(
    sink=settings.log_file,
    format="{time:YYYY-MM-DDTHH:mm:ss.SSSZ} | {level} | {message} | {extra}",
    level=settings.log_level,
    serialize=True,
    rotation="1 day",
)

# Prometheus metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["service", "method", "endpoint"]
)
ERROR_COUNT = Counter(
    "http_errors_total",
    "Total HTTP errors",
    ["service", "endpoint", "error_type"]
)
UPLOAD_COUNT = Counter(
    "image_uploads_total",
    "Total product image uploads",
    ["service", "status"]
)

app = FastAPI(title="Catalog Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Etat de l'application: catalogue en mémoire et dossier des images
app.state.repository = ProductRepository(seed_products())
app.state.images = ImageStore(settings.upload_dir)
app.state.images.ensure_directory()

# Images servies en lecture seule
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


def get_repository(request: Request) -> ProductRepository:
    return request.app.state.repository


def get_images(request: Request) -> ImageStore:
    return request.app.state.images


# Middleware pour logger les requests avec correlation ID
@app.middleware("http")
async def log_requests(request: Request, call_next):
    # Generate or propagate correlation ID (trace-id)
    trace_id = request.headers.get("X-Trace-ID", str(uuid.uuid4()))
    start_time = time.time()

    # Bind trace_id to logger context
    with logger.contextualize(trace_id=trace_id, service=SERVICE_NAME):
        logger.info(
            f"Request: {request.method} {request.url.path}",
            extra={"method": request.method, "url": str(request.url), "trace_id": trace_id}
        )

        response = await call_next(request)

        latency = time.time() - start_time

        REQUEST_COUNT.labels(
            service=SERVICE_NAME,
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        REQUEST_LATENCY.labels(
            service=SERVICE_NAME,
            method=request.method,
            endpoint=request.url.path
        ).observe(latency)

        logger.info(
            f"Response status: {response.status_code}",
            extra={"status": response.status_code, "latency": latency, "trace_id": trace_id}
        )

        response.headers["X-Trace-ID"] = trace_id
        return response


@app.exception_handler(ProductNotFound)
async def product_not_found_handler(request: Request, exc: ProductNotFound):
    logger.warning(f"Product {exc.product_id} not found")
    ERROR_COUNT.labels(service=SERVICE_NAME, endpoint="/api/products/{id}", error_type="not_found").inc()
    return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)


@app.exception_handler(ProductValidationError)
async def validation_error_handler(request: Request, exc: ProductValidationError):
    logger.warning(f"Invalid product payload: {exc}", extra={"field": exc.field})
    ERROR_COUNT.labels(service=SERVICE_NAME, endpoint=request.url.path, error_type="validation_error").inc()
    return JSONResponse(status_code=400, content={"detail": exc.to_dict()})


@app.get("/metrics")
async def metrics():
    """Endpoint /metrics compatible Prometheus"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy", "service": SERVICE_NAME}


async def store_upload(upload: Optional[UploadFile], images: ImageStore) -> Optional[str]:
    """Size check, then image store. None means no usable file was sent.

    Oversized files are dropped like files of a refused type: the request
    goes on without an image reference.
    """
    try:
        data = await read_upload(upload, settings.max_upload_size)
    except UploadTooLarge as e:
        logger.warning(f"Upload {upload.filename!r} dropped: {e}")
        UPLOAD_COUNT.labels(service=SERVICE_NAME, status="too_large").inc()
        return None
    if data is None:
        return None
    path = images.store(data, upload.filename, upload.content_type)
    UPLOAD_COUNT.labels(service=SERVICE_NAME, status="stored" if path else "rejected_type").inc()
    return path


def form_fields(**fields) -> dict:
    # Les champs absents sont laissés à la validation
    return {key: value for key, value in fields.items() if value is not None}


@app.get("/api/products", response_model=List[ProductResponse])
async def get_products(repository: ProductRepository = Depends(get_repository)):
    logger.info("Fetching all products")
    return repository.list()


@app.get("/api/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, repository: ProductRepository = Depends(get_repository)):
    logger.info(f"Fetching product {product_id}")
    return repository.get(product_id)


@app.post("/api/products", response_model=ProductResponse)
async def create_product(
    name: Optional[str] = Form(None),
    details: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    productImage: Optional[UploadFile] = File(None),
    repository: ProductRepository = Depends(get_repository),
    images: ImageStore = Depends(get_images),
):
    image_path = await store_upload(productImage, images)
    payload = validate_create(
        form_fields(name=name, details=details, price=price, productImage=image_path)
    )

    product = repository.create(payload.name, payload.details, payload.price, payload.productImage)
    logger.info(f"Product created with ID {product.id}")
    return product


@app.put("/api/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    details: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    productImage: Optional[UploadFile] = File(None),
    repository: ProductRepository = Depends(get_repository),
    images: ImageStore = Depends(get_images),
):
    image_path = await store_upload(productImage, images)
    repository.get(product_id)  # 404 avant la validation
    payload = validate_update(
        form_fields(name=name, details=details, price=price, productImage=image_path)
    )

    product = repository.update(product_id, payload.name, payload.details, payload.price, payload.productImage)
    logger.info(f"Product {product_id} updated")
    return product


@app.delete("/api/products/{product_id}", response_model=List[ProductResponse])
async def delete_product(product_id: str, repository: ProductRepository = Depends(get_repository)):
    remaining = repository.delete(product_id)
    logger.info(f"Product {product_id} deleted, {len(remaining)} left")
    return remaining


def run():
    # Bannière de démarrage aussi sur la console
    logger.add(sys.stderr, level=settings.log_level)
    logger.info(f"Starting Catalog Service on http://localhost:{settings.port}")
    logger.info(
        "Endpoints: GET /api/products, GET /api/products/{id}, POST /api/products, "
        "PUT /api/products/{id}, DELETE /api/products/{id}, static images under /uploads"
    )
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
