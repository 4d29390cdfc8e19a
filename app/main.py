import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.invoices import router as invoices_router
from app.config import configure_logging
from app.errors import BillingError

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Billing Ledger API",
    version="0.1.0",
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        message = "Internal Server Error" if exc.status_code == 500 else exc.message
    else:
        message = exc.message
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(invoices_router)
