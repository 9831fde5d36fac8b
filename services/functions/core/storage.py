"""
Storage context propagation.

The blob store context is handed to the executed function through a
base64-encoded JSON request header, so the handler can reach the store
without an extra round trip.
"""

import base64
import json
from typing import Dict, Optional

import httpx

from ..models.environment import StorageContext

BLOBS_INFO_HEADER = "x-nf-blobs-info"


def get_blobs_event_property(context: StorageContext) -> Dict[str, Optional[str]]:
    return {
        "primary_region": context.primary_region,
        "url": context.edge_url,
        "url_uncached": context.edge_url,
        "token": context.token,
    }


def encode_storage_context(context: StorageContext) -> str:
    payload = json.dumps(get_blobs_event_property(context))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def attach_storage_context(request: httpx.Request, context: StorageContext) -> None:
    request.headers[BLOBS_INFO_HEADER] = encode_storage_context(context)
