# caminho: portal_auth/application/auth/session_store.py
# Funções:
# - SessionStore: único escritor do registro de sessão persistido
# - persist(): grava usuário + sessão numa única escrita multi-chave
# - load(): devolve o registro ou None (metade ausente / ilegível)
# - refresh(): regrava apenas a metade `session`
# - clear(): remove as duas chaves

from __future__ import annotations

import json
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError

from portal_auth.application.auth.dto import StoredSessionPayload, UserAccountPayload
from portal_auth.config.constants import STORAGE_SESSION_KEY, STORAGE_USER_KEY
from portal_auth.domain.sessions.entities import SessionGrant, SessionRecord, utc_now
from portal_auth.infrastructure.storage.key_value import KeyValueStorage
from portal_auth.shared.logging import log_info, log_warning

Clock = Callable[[], datetime]


class SessionStore:
    def __init__(self, storage: KeyValueStorage, *, clock: Clock = utc_now) -> None:
        self._storage = storage
        self._clock = clock

    async def persist(self, record: SessionRecord) -> None:
        user_json = UserAccountPayload.from_domain(record.user).model_dump_json(by_alias=True)
        session_json = StoredSessionPayload.from_domain(record.session).model_dump_json(by_alias=True)
        await self._storage.set_many({STORAGE_USER_KEY: user_json, STORAGE_SESSION_KEY: session_json})
        log_info('SESSION_PERSISTED', {'idus': record.user.idus, 'remember': record.session.remember})

    async def load(self) -> Optional[SessionRecord]:
        raw_user, raw_session = await self._storage.get_many([STORAGE_USER_KEY, STORAGE_SESSION_KEY])
        if raw_user is None or raw_session is None:
            return None
        try:
            user = UserAccountPayload.model_validate(json.loads(raw_user)).to_domain()
            session = StoredSessionPayload.model_validate(json.loads(raw_session)).to_domain()
        except (ValueError, ValidationError) as exc:
            log_warning('SESSION_RECORD_UNREADABLE', {'error': type(exc).__name__})
            return None
        return SessionRecord(user=user, session=session)

    async def refresh(self, session: SessionGrant) -> None:
        session_json = StoredSessionPayload.from_domain(session).model_dump_json(by_alias=True)
        await self._storage.set_many({STORAGE_SESSION_KEY: session_json})

    async def clear(self) -> None:
        await self._storage.delete(STORAGE_USER_KEY, STORAGE_SESSION_KEY)

    def is_valid(self, session: SessionGrant, now: Optional[datetime] = None) -> bool:
        return session.is_valid(now or self._clock())
