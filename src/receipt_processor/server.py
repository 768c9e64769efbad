"""Receipt Processor server.

FastMCP server exposing the receipt HTTP routes alongside MCP tools.
Run: receipt-processor
"""

from __future__ import annotations

import logging
import os

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import JSONResponse

from .core.errors import InvalidReceiptIdError, ReceiptNotFoundError, ReceiptRejectedError
from .core.service import ReceiptService
from .core.store import ScoreStore

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_MAX_BODY_BYTES = 1 << 20

MISSING_BODY_MESSAGE = "Missing request body. Please provide a JSON object representing a receipt."
BODY_TOO_LARGE_MESSAGE = "The receipt is too large."
NOT_FOUND_MESSAGE = "No receipt found for that ID."

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
WRITE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)


def _get_int_setting(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _error(message: str, status_code: int, reasons: list[str] | None = None) -> JSONResponse:
    body: dict = {"error": message}
    if reasons is not None:
        body["reasons"] = reasons
    return JSONResponse(body, status_code=status_code)


def create_server(
    service: ReceiptService,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> FastMCP:
    """Build the server around a single shared ``ReceiptService``."""
    mcp = FastMCP(
        "Receipt Processor",
        instructions="Submit purchase receipts to score them by the points rules, then look the points up by receipt id.",
        host=host,
        port=port,
    )

    # ─── HTTP Routes ─────────────────────────────────────────────────────────

    @mcp.custom_route("/receipts/process", methods=["POST"])
    async def process_receipt_route(request: Request) -> JSONResponse:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > max_body_bytes:
            return _error(BODY_TOO_LARGE_MESSAGE, 400)

        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > max_body_bytes:
                return _error(BODY_TOO_LARGE_MESSAGE, 400)
        if not body.strip():
            return _error(MISSING_BODY_MESSAGE, 400)

        try:
            receipt_id = service.process(bytes(body))
        except ReceiptRejectedError as exc:
            return _error(exc.message, 400, exc.reasons)
        return JSONResponse({"id": receipt_id}, status_code=202)

    @mcp.custom_route("/receipts/{id}/points", methods=["GET"])
    async def receipt_points_route(request: Request) -> JSONResponse:
        try:
            points = service.points(request.path_params["id"])
        except InvalidReceiptIdError as exc:
            return _error(str(exc), 400)
        except ReceiptNotFoundError:
            return _error(NOT_FOUND_MESSAGE, 404)
        return JSONResponse({"points": points})

    @mcp.custom_route("/health", methods=["GET"])
    async def health_route(request: Request) -> JSONResponse:
        return JSONResponse({"ok": True, "service": "receipt-processor", "receipts": len(service.store)})

    # ─── MCP Tools ───────────────────────────────────────────────────────────

    @mcp.tool(annotations=WRITE)
    def process_receipt(receipt: dict) -> dict:
        """Score a receipt and store its points.

        Args:
            receipt: Receipt object with retailer, purchaseDate (YYYY-MM-DD),
                     purchaseTime (HH:MM), items [{shortDescription, price}] and total.
        """
        return {"id": service.process(receipt)}

    @mcp.tool(annotations=READ_ONLY)
    def get_receipt_points(receipt_id: str) -> dict:
        """Points awarded to a previously processed receipt.

        Args:
            receipt_id: The id returned by process_receipt.
        """
        return {"points": service.points(receipt_id)}

    @mcp.tool(annotations=READ_ONLY)
    def score_receipt_preview(receipt: dict) -> dict:
        """Per-rule points breakdown for a receipt, without storing it.

        Args:
            receipt: Receipt object in the same shape process_receipt accepts.
        """
        return service.preview(receipt).model_dump()

    return mcp


def main():
    """Entry point for the CLI command."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    host = os.environ.get("RECEIPT_PROCESSOR_HOST", DEFAULT_HOST)
    port = _get_int_setting("RECEIPT_PROCESSOR_PORT", DEFAULT_PORT)
    max_body_bytes = _get_int_setting("RECEIPT_PROCESSOR_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES)

    service = ReceiptService(ScoreStore())
    server = create_server(service, host=host, port=port, max_body_bytes=max_body_bytes)
    logger.info("Starting receipt processor on %s:%d", host, port)
    server.run(transport="streamable-http")


if __name__ == "__main__":
    main()
