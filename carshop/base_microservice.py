import os
import logging
from fastapi import status as http_status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Any, Dict

# Setup logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("carshop")

class MCPResponse(JSONResponse):
    """
    Standard response envelope for all API endpoints.
    """
    def __init__(self, data: Any = None, message: str = "success", status: str = "ok", **kwargs):
        content = {
            "status": status,
            "message": message,
            "data": jsonable_encoder(data),
        }
        super().__init__(content=content, **kwargs)

class BaseMicroservice:
    """
    Base class for the resource services. Provides:
    - Error/event logging
    - Standard response envelope
    """
    def __init__(self, name: str = None):
        self.logger = logging.getLogger(f"carshop.{name}") if name else logger

    def mcp_response(
        self,
        data: Any = None,
        message: str = "success",
        status: str = "ok",
        status_code: int = http_status.HTTP_200_OK,
        headers: Dict[str, str] = None,
    ):
        """
        Return a standard response envelope.
        """
        return MCPResponse(
            data=data, message=message, status=status,
            status_code=status_code, headers=headers,
        )

    def error_response(self, message: str, status_code: int, headers: Dict[str, str] = None):
        return self.mcp_response(
            message=message, status="error", status_code=status_code, headers=headers
        )

    def log_event(self, event: str, details: Dict[str, Any] = None):
        self.logger.info(f"EVENT: {event} | Details: {details}")

    def log_error(self, error: Exception, context: str = ""):
        self.logger.error(f"ERROR: {str(error)} | Context: {context}")
