"""harbordns package"""

from .endpoint import Endpoint, endpoints_for_hostname, infer_record_type
from .models import ContainerSnapshot, NetworkAttachment
from .resolver import endpoints_from_containers

__all__ = [
    "ContainerSnapshot",
    "Endpoint",
    "NetworkAttachment",
    "endpoints_for_hostname",
    "endpoints_from_containers",
    "infer_record_type",
]
