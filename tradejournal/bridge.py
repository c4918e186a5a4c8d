"""Brokerage deal source — fetches MT5 deal history through the Expert Advisor's ZeroMQ socket."""

import asyncio
import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

import zmq
import zmq.asyncio
from loguru import logger
from pydantic import ValidationError

from tradejournal.config import settings
from tradejournal.errors import BrokerError
from tradejournal.models.deal import Deal


class DealSource(ABC):
    @abstractmethod
    async def fetch_deals(
        self, account: str, from_time: datetime, to_time: datetime
    ) -> list[Deal]:
        """Return the account's deals in [from_time, to_time], in any order."""


def parse_deals(records: list[Any]) -> list[Deal]:
    """Validate raw deal records, skipping (and logging) any that are malformed."""
    deals = []
    for record in records:
        try:
            deals.append(Deal.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping invalid deal record {record!r}: {e.error_count()} errors")
    return deals


class MT5Bridge(DealSource):
    def __init__(self, address: str | None = None, timeout_ms: int | None = None):
        self.address = address or settings.zmq_rep_address
        self.timeout_ms = timeout_ms or settings.mt5_request_timeout_ms
        self.ctx = zmq.asyncio.Context()
        self.req_socket: zmq.asyncio.Socket | None = None
        self._connected = False
        self._req_lock = asyncio.Lock()

    def _new_socket(self) -> zmq.asyncio.Socket:
        sock = self.ctx.socket(zmq.REQ)
        sock.setsockopt(zmq.RCVTIMEO, self.timeout_ms)
        sock.setsockopt(zmq.SNDTIMEO, self.timeout_ms)
        sock.setsockopt(zmq.LINGER, 0)
        sock.connect(self.address)
        return sock

    async def connect(self):
        """Connect to the MT5 EA's REP socket."""
        try:
            self.req_socket = self._new_socket()
            self._connected = True
            logger.info(f"ZMQ connected — REQ: {self.address}")
        except zmq.ZMQError as e:
            logger.error(f"ZMQ connection failed: {e}")
            self._connected = False
            raise

    async def disconnect(self):
        if self.req_socket:
            self.req_socket.close()
            self.req_socket = None
        self.ctx.term()
        self._connected = False
        logger.info("ZMQ disconnected")

    @property
    def connected(self) -> bool:
        return self._connected

    async def _send_command(self, command: str, params: dict[str, Any] | None = None) -> dict:
        """Send a command to the EA and return the response.

        EA expects: {"command": "CMD", "params": {...}}
        EA returns: {"success": true, "data": ...} or {"success": false, "error": "..."}
        """
        if not self._connected or not self.req_socket:
            raise BrokerError("ZMQ not connected")

        payload: dict[str, Any] = {"command": command}
        if params:
            payload["params"] = params

        async with self._req_lock:
            try:
                await self.req_socket.send_string(json.dumps(payload))
                response = await self.req_socket.recv_string()
                return json.loads(response)
            except zmq.error.Again:
                # A REQ socket is stuck after a missed reply; replace it
                logger.warning(f"ZMQ timeout on command: {command}")
                self.req_socket.close()
                self.req_socket = self._new_socket()
                return {"success": False, "error": "Timeout"}
            except (zmq.ZMQError, json.JSONDecodeError) as e:
                logger.error(f"ZMQ command error ({command}): {e}")
                return {"success": False, "error": str(e)}

    async def fetch_deals(
        self, account: str, from_time: datetime, to_time: datetime
    ) -> list[Deal]:
        resp = await self._send_command(
            "GET_DEALS",
            {
                "account": account,
                "from_date": from_time.isoformat(),
                "to_date": to_time.isoformat(),
            },
        )
        if not resp.get("success", False):
            raise BrokerError(
                f"Deal history request failed for account {account}: {resp.get('error', 'Unknown')}"
            )
        data = resp.get("data") or []
        if isinstance(data, dict):
            data = data.get("deals", [])
        deals = parse_deals(data)
        logger.info(f"Fetched {len(deals)} deals for account {account}")
        return deals

    async def ping(self) -> bool:
        resp = await self._send_command("PING")
        return resp.get("success", False)
