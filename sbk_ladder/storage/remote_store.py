"""
Remote ladder store backed by a Supabase (PostgREST) table.

Each ladder is one row; ladder_steps is a jsonb column holding the step list.
Writes are pessimistic: a call returns only after the server confirmed it,
and any failure surfaces as PersistenceError with nothing assumed written.

Table setup (Supabase SQL editor):

    create table ladders (
        id text primary key,
        name text not null,
        start_stake double precision not null,
        goal_amount double precision not null,
        odds text not null,
        ladder_steps jsonb not null,
        current_amount double precision not null,
        current_step_index integer not null default 0,
        last_updated timestamptz not null,
        created_at timestamptz not null
    );
"""

import logging
from typing import Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .. import config
from ..errors import LadderNotFoundError, PersistenceError
from ..models import Ladder
from .base import LadderStore, ladder_from_record, ladder_to_record

logger = logging.getLogger("RemoteLadderStore")


class RemoteStoreConfigError(RuntimeError):
    pass


class RemoteLadderStore(LadderStore):

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        url = url or config.SUPABASE_URL
        key = key or config.SUPABASE_KEY
        if not url or not key:
            raise RemoteStoreConfigError(
                "Missing Supabase credentials. Set SUPABASE_URL and SUPABASE_KEY for the remote backend."
            )

        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table or config.LADDER_TABLE}"
        self.timeout = timeout or config.REMOTE_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        })

    def _transport(self, method: str, params: dict, payload=None, prefer: Optional[str] = None) -> list:
        headers = {"Prefer": prefer} if prefer else None
        response = self.session.request(
            method,
            self.endpoint,
            params=params,
            json=payload,
            headers=headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        if not response.content:
            return []
        return response.json()

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True
    )
    def _send(self, method: str, params: dict, payload=None, prefer: Optional[str] = None) -> list:
        return self._transport(method, params, payload, prefer)

    # Inserts are not idempotent: retry only when the connection never opened
    @retry(
        retry=retry_if_exception_type(requests.ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True
    )
    def _send_insert(self, params: dict, payload=None, prefer: Optional[str] = None) -> list:
        return self._transport("POST", params, payload, prefer)

    def _request(self, method: str, params: dict, payload=None, prefer: Optional[str] = None) -> list:
        try:
            if method == "POST":
                return self._send_insert(params, payload, prefer)
            return self._send(method, params, payload, prefer)
        except requests.RequestException as e:
            logger.error(f"{method} {self.endpoint} failed: {e}")
            raise PersistenceError(str(e)) from e

    def get(self, ladder_id: str) -> Optional[Ladder]:
        rows = self._request("GET", {"select": "*", "id": f"eq.{ladder_id}"})
        return ladder_from_record(rows[0]) if rows else None

    def list(self) -> list[Ladder]:
        rows = self._request("GET", {"select": "*", "order": "created_at.asc"})
        return [ladder_from_record(r) for r in rows]

    def create(self, ladder: Ladder) -> Ladder:
        rows = self._request("POST", {}, ladder_to_record(ladder), prefer="return=representation")
        return ladder_from_record(rows[0]) if rows else ladder

    def update(self, ladder: Ladder) -> Ladder:
        record = ladder_to_record(ladder)
        patch = {
            "current_amount": record["current_amount"],
            "current_step_index": record["current_step_index"],
            "last_updated": record["last_updated"],
        }
        rows = self._request("PATCH", {"id": f"eq.{ladder.id}"}, patch, prefer="return=representation")
        if not rows:
            raise LadderNotFoundError(ladder.id)
        return ladder_from_record(rows[0])

    def delete(self, ladder_id: str) -> None:
        rows = self._request("DELETE", {"id": f"eq.{ladder_id}"}, prefer="return=representation")
        if not rows:
            raise LadderNotFoundError(ladder_id)
