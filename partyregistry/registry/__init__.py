from .results import (
    RegistryError, ValidationError, NotFound, StorageFailure, CrossOriginRejected,
    Success, Failure, Result,
)
from .gateway import PartyGateway, make_char18_id
from .attachments import LogoStore
from .service import PartyService, Upload

__all__ = [
    "RegistryError", "ValidationError", "NotFound", "StorageFailure", "CrossOriginRejected",
    "Success", "Failure", "Result",
    "PartyGateway", "make_char18_id", "LogoStore", "PartyService", "Upload",
]
