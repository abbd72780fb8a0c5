# Local application imports
from civicvoice.schemas.common.base_schemas import CamelModel
from civicvoice.schemas.common.response_schemas import BaseResponse, ErrorDetails

__all__ = ["BaseResponse", "CamelModel", "ErrorDetails"]
