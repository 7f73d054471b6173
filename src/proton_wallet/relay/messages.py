"""Relay message envelope and the closed set of message types.

Every message is ``{"messageType": <tag>, "data": <payload>}``. Tags outside
:class:`MessageType` are not errors; receivers drop them.

Routing (who a message is for) depends on which process sent it:

==================  ===========================================  ===========
sender              types                                        destination
==================  ===========================================  ===========
engine              saveWalletResponse, walletActiveStatus, ...  UI
engine              backendStopped, loaded                       supervisor
UI                  stopRequest, openNewWallet, saveWalletAs,     engine
                    config
UI                  loaded, frontReady, closeToTrayToggle, ...   supervisor
==================  ===========================================  ===========
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Self


class MessageType(enum.StrEnum):
    """Closed, versionless set of message tags."""

    # Relay types
    CONFIG = "config"
    STOP_REQUEST = "stopRequest"
    BACKEND_STOPPED = "backendStopped"
    SAVE_WALLET_RESPONSE = "saveWalletResponse"
    WALLET_ACTIVE_STATUS = "walletActiveStatus"
    PRIMARY_ADDRESS = "primaryAddress"
    TRANSACTION_LIST = "transactionList"
    SYNC_STATUS = "syncStatus"
    BALANCE = "balance"
    NODE_FEE = "nodeFee"
    SEND_TRANSACTION_RESPONSE = "sendTransactionResponse"
    BACKEND_LOG_LINE = "backendLogLine"
    OPEN_NEW_WALLET = "openNewWallet"
    SAVE_WALLET_AS = "saveWalletAs"

    # Supervisor control types
    LOADED = "loaded"
    FRONT_READY = "frontReady"
    CLOSE_TO_TRAY_TOGGLE = "closeToTrayToggle"
    CONFIG_UPDATE = "configUpdate"
    WINDOW_CLOSE_REQUESTED = "windowCloseRequested"
    WINDOW_CLOSED = "windowClosed"
    SHOW_WINDOW = "showWindow"
    HIDE_WINDOW = "hideWindow"
    FOCUS_WINDOW = "focusWindow"
    CLOSE_WINDOW = "closeWindow"


class Route(enum.Enum):
    """Where an inbound message goes next."""

    ENGINE = enum.auto()
    UI = enum.auto()
    SUPERVISOR = enum.auto()
    DROP = enum.auto()


ENGINE_TO_UI = frozenset(
    {
        MessageType.SAVE_WALLET_RESPONSE,
        MessageType.WALLET_ACTIVE_STATUS,
        MessageType.PRIMARY_ADDRESS,
        MessageType.TRANSACTION_LIST,
        MessageType.SYNC_STATUS,
        MessageType.BALANCE,
        MessageType.NODE_FEE,
        MessageType.SEND_TRANSACTION_RESPONSE,
        MessageType.BACKEND_LOG_LINE,
    }
)

ENGINE_TO_SUPERVISOR = frozenset({MessageType.BACKEND_STOPPED, MessageType.LOADED})

UI_TO_ENGINE = frozenset(
    {
        MessageType.STOP_REQUEST,
        MessageType.OPEN_NEW_WALLET,
        MessageType.SAVE_WALLET_AS,
        MessageType.CONFIG,
    }
)

UI_TO_SUPERVISOR = frozenset(
    {
        MessageType.LOADED,
        MessageType.FRONT_READY,
        MessageType.CLOSE_TO_TRAY_TOGGLE,
        MessageType.CONFIG_UPDATE,
        MessageType.WINDOW_CLOSE_REQUESTED,
        MessageType.WINDOW_CLOSED,
    }
)


def route_from_engine(message_type: MessageType) -> Route:
    if message_type in ENGINE_TO_UI:
        return Route.UI
    if message_type in ENGINE_TO_SUPERVISOR:
        return Route.SUPERVISOR
    return Route.DROP


def route_from_ui(message_type: MessageType) -> Route:
    if message_type in UI_TO_ENGINE:
        return Route.ENGINE
    if message_type in UI_TO_SUPERVISOR:
        return Route.SUPERVISOR
    return Route.DROP


@dataclass(frozen=True)
class RelayMessage:
    """One typed message crossing a process boundary."""

    type: MessageType
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"messageType": str(self.type), "data": self.data}

    @classmethod
    def from_dict(cls, raw: Any) -> Self | None:
        """Build a message from a decoded envelope; ``None`` for unknown tags."""
        if not isinstance(raw, dict):
            return None
        try:
            message_type = MessageType(raw.get("messageType"))
        except ValueError:
            return None
        return cls(type=message_type, data=raw.get("data"))
