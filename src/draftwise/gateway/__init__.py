"""Draft and publish gateways."""

from draftwise.gateway.client import DraftGateway, PublishGateway, create_gateway
from draftwise.gateway.filesystem import FileDraftGateway
from draftwise.gateway.http import HttpDraftGateway, HttpGatewayError
from draftwise.gateway.memory import InMemoryDraftGateway
from draftwise.gateway.types import (
    DraftNotFoundError,
    DraftRecord,
    GatewayError,
    LoadedDraft,
    PublishRequest,
    SaveDraftRequest,
)

__all__ = [
    "DraftGateway",
    "DraftNotFoundError",
    "DraftRecord",
    "FileDraftGateway",
    "GatewayError",
    "HttpDraftGateway",
    "HttpGatewayError",
    "InMemoryDraftGateway",
    "LoadedDraft",
    "PublishGateway",
    "PublishRequest",
    "SaveDraftRequest",
    "create_gateway",
]
