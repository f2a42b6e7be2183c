import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from cardledger.api.acquisitions import router as acquisitions_router
from cardledger.api.events import router as events_router
from cardledger.api.lots import router as lots_router
from cardledger.api.prices import router as prices_router
from cardledger.api.reconcile import router as reconcile_router
from cardledger.container import Container
from cardledger.exceptions import AllocationMismatchError, InsufficientInventoryError, NotFoundError

logger = logging.getLogger("cardledger.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    yield
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="CardLedger", version="0.1.0", lifespan=lifespan)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InsufficientInventoryError)
async def insufficient_inventory_handler(request: Request, exc: InsufficientInventoryError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "requested": exc.requested, "available": exc.available},
    )


@app.exception_handler(AllocationMismatchError)
async def allocation_mismatch_handler(request: Request, exc: AllocationMismatchError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "expected_cent": exc.expected_cent, "actual_cent": exc.actual_cent},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lots_router)
app.include_router(acquisitions_router)
app.include_router(prices_router)
app.include_router(events_router)
app.include_router(reconcile_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
