from __future__ import annotations
import asyncio
import imaplib
import re
from typing import Mapping, Optional

from loguru import logger

from maildraft.domain.entities.parsed_message import FetchResult, ParsedMessage
from maildraft.domain.errors import TransportError
from maildraft.domain.models import Account
from maildraft.infrastructure.email.mapper import rfc822_to_parsed_message

_UID_RE = re.compile(r"UID (\d+)")


def resolve_fetch_range(watermark: int, exists: int, bootstrap_window: Optional[int] = None) -> str:
    """IMAP range to search for one pull.

    Periodic syncs ask for UIDs above the watermark. A first sync with a
    window asks for the last ``bootstrap_window`` sequence numbers instead.
    """
    window = bootstrap_window or 0
    if watermark == 0 and window > 0:
        return f"{max(1, exists - window + 1)}:*"
    return f"{watermark + 1}:*"


class ImapTransportFeed:
    """Fetch messages above a UID watermark from a plain IMAP mailbox.

    Connection and auth only; folder management and flagging are not its job.
    ``passwords`` maps account id to the secret used for LOGIN.
    """

    def __init__(self, passwords: Mapping[str, str], folder: str = "INBOX") -> None:
        self.passwords = passwords
        self.folder = folder

    def _connect(self, account: Account) -> imaplib.IMAP4:
        password = self.passwords.get(account.id)
        if not password:
            raise TransportError(f"No IMAP password available for account {account.id}")

        try:
            if account.secure:
                conn = imaplib.IMAP4_SSL(account.host, account.port)
            else:
                conn = imaplib.IMAP4(account.host, account.port)
            conn.login(account.username or account.email, password)
        except (imaplib.IMAP4.error, OSError) as e:
            raise TransportError(f"IMAP login failed for {account.id}: {e}") from e
        return conn

    def _fetch_blocking(self, account: Account, watermark: int, bootstrap_window: Optional[int]) -> FetchResult:
        conn = self._connect(account)
        try:
            typ, data = conn.select(self.folder, readonly=True)
            if typ != "OK":
                raise TransportError(f"Failed to select folder {self.folder}")
            exists = int(data[0]) if data and data[0] else 0

            fetch_range = resolve_fetch_range(watermark, exists, bootstrap_window)
            if watermark == 0 and bootstrap_window:
                # Sequence-number window; translate to UIDs
                typ, uids_data = conn.search(None, fetch_range) if exists else ("OK", [b""])
                seqs = uids_data[0].split() if typ == "OK" and uids_data and uids_data[0] else []
                uids = self._uids_for_sequences(conn, seqs)
            else:
                typ, uids_data = conn.uid("SEARCH", None, f"UID {fetch_range}")
                if typ != "OK":
                    raise TransportError("UID SEARCH failed")
                uids = [int(x) for x in uids_data[0].split()] if uids_data and uids_data[0] else []

            max_sequence = watermark
            messages: list[ParsedMessage] = []
            for uid in sorted(uids):
                # "N:*" always matches the last message, even below N
                if uid <= watermark:
                    continue
                max_sequence = max(max_sequence, uid)
                typ, msg_data = conn.uid("FETCH", str(uid), "(RFC822)")
                if typ != "OK" or not msg_data or not msg_data[0]:
                    logger.warning(f"Could not fetch UID {uid} for {account.id}")
                    continue
                try:
                    messages.append(rfc822_to_parsed_message(uid, msg_data[0][1]))
                except Exception as e:
                    # Still counted in max_sequence so one bad message cannot pin the watermark
                    logger.warning(f"Skipping unparseable UID {uid} for {account.id}: {e}")

            logger.info(f"Fetched {len(messages)} messages for {account.id} above UID {watermark}")
            return FetchResult(messages=messages, max_sequence=max_sequence)
        except (imaplib.IMAP4.error, OSError) as e:
            raise TransportError(f"IMAP fetch failed for {account.id}: {e}") from e
        finally:
            try:
                conn.logout()
            except (imaplib.IMAP4.error, OSError):
                pass

    def _uids_for_sequences(self, conn: imaplib.IMAP4, seqs: list[bytes]) -> list[int]:
        if not seqs:
            return []
        typ, data = conn.fetch(b",".join(seqs).decode(), "(UID)")
        if typ != "OK":
            raise TransportError("FETCH (UID) failed")
        uids: list[int] = []
        for item in data or []:
            raw = item[0] if isinstance(item, tuple) else item
            if not raw:
                continue
            match = _UID_RE.search(raw.decode(errors="ignore"))
            if match:
                uids.append(int(match.group(1)))
        return uids

    async def fetch_since(
        self,
        account: Account,
        watermark: int,
        bootstrap_window: Optional[int] = None,
    ) -> FetchResult:
        return await asyncio.to_thread(self._fetch_blocking, account, watermark, bootstrap_window)
