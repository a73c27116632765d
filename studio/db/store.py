"""Persistence store — the shared SQLite handle behind a single exclusive section.

Usage:
    store = PersistenceStore(session_factory)

    with store.exclusive() as tx:
        gallery = tx.create_gallery(Gallery(origin_image=img, effect_image=img))
        tx.create_message(Message(gallery_id=gallery.id, role="user", content=prompt))

Every operation runs inside ``exclusive()``: acquire the lock, open a
transaction, commit (or roll back) and release. The section is synchronous, so
it can never span an ``await``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from studio.core.exceptions import NotFoundError
from studio.models.gallery import Gallery
from studio.models.message import Message
from studio.models.setting import Setting
from studio.models.style import Style

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"


class StoreSession:
    """Repository operations bound to one held section / one transaction."""

    def __init__(
        self,
        session: Session,
        default_api_url: str = DEFAULT_API_URL,
        default_model: str = DEFAULT_MODEL,
    ):
        self.session = session
        self.default_api_url = default_api_url
        self.default_model = default_model

    # --- Galleries ---

    def create_gallery(self, gallery: Gallery) -> Gallery:
        self.session.add(gallery)
        self.session.flush()
        return gallery

    def get_gallery(self, gallery_id: str) -> Gallery | None:
        return self.session.get(Gallery, gallery_id)

    def update_gallery(self, gallery: Gallery) -> Gallery:
        """Copy the mutable fields of ``gallery`` onto the stored row."""
        existing = self.session.get(Gallery, gallery.id)
        if existing is None:
            raise NotFoundError(f"Gallery {gallery.id} not found")

        existing.origin_image = gallery.origin_image
        existing.effect_image = gallery.effect_image
        existing.total_input_tokens = gallery.total_input_tokens
        existing.total_output_tokens = gallery.total_output_tokens
        self.session.flush()
        return existing

    def list_galleries(self) -> list[Gallery]:
        stmt = select(Gallery).order_by(Gallery.created_at.desc())
        return list(self.session.scalars(stmt))

    def delete_galleries(self, gallery_ids: list[str]) -> int:
        """Delete galleries (and their messages). Unknown ids are skipped."""
        if not gallery_ids:
            return 0
        galleries = self.session.scalars(select(Gallery).where(Gallery.id.in_(gallery_ids))).all()
        for gallery in galleries:
            self.session.delete(gallery)
        self.session.flush()
        return len(galleries)

    def sum_tokens_between(self, start: datetime, end: datetime) -> int:
        """Total input + output tokens of galleries created in [start, end)."""
        stmt = select(
            func.coalesce(func.sum(Gallery.total_input_tokens + Gallery.total_output_tokens), 0)
        ).where(Gallery.created_at >= start, Gallery.created_at < end)
        return int(self.session.scalar(stmt) or 0)

    # --- Messages ---

    def create_message(self, message: Message) -> Message:
        self.session.add(message)
        self.session.flush()
        return message

    def list_messages(self, gallery_id: str) -> list[Message]:
        stmt = select(Message).where(Message.gallery_id == gallery_id).order_by(Message.created_at.asc())
        return list(self.session.scalars(stmt))

    # --- Settings ---

    def get_setting(self) -> Setting | None:
        return self.session.scalars(select(Setting).limit(1)).first()

    def get_or_create_default_setting(self) -> Setting:
        setting = self.get_setting()
        if setting is not None:
            return setting

        setting = Setting(api_url=self.default_api_url, api_key="", model=self.default_model)
        self.session.add(setting)
        self.session.flush()
        logger.info("Created default settings (api_url=%s, model=%s)", setting.api_url, setting.model)
        return setting

    def save_setting(self, api_url: str, api_key: str, model: str) -> Setting:
        setting = self.get_setting()
        if setting is None:
            setting = Setting(api_url=api_url, api_key=api_key, model=model)
            self.session.add(setting)
        else:
            setting.api_url = api_url
            setting.api_key = api_key
            setting.model = model
        self.session.flush()
        return setting

    # --- Styles ---

    def create_style(self, style: Style) -> Style:
        self.session.add(style)
        self.session.flush()
        return style

    def list_styles(self) -> list[Style]:
        return list(self.session.scalars(select(Style).order_by(Style.created_at.desc())))

    def get_style_by_name(self, name: str) -> Style | None:
        return self.session.scalars(select(Style).where(Style.name == name)).first()

    def delete_style(self, style_id: str) -> bool:
        style = self.session.get(Style, style_id)
        if style is None:
            return False
        self.session.delete(style)
        self.session.flush()
        return True


class PersistenceStore:
    """Shared store handle guarded by one exclusive section (no read sharing)."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        default_api_url: str = DEFAULT_API_URL,
        default_model: str = DEFAULT_MODEL,
        lock_timeout: float = 30.0,
    ):
        """
        Args:
            session_factory: SQLAlchemy sessionmaker bound to the database
            default_api_url: api_url written when no settings row exists
            default_model: model written when no settings row exists
            lock_timeout: Seconds to wait for the section before failing
        """
        self._session_factory = session_factory
        self._lock = threading.Lock()
        self.default_api_url = default_api_url
        self.default_model = default_model
        self.lock_timeout = lock_timeout

    @property
    def locked(self) -> bool:
        """True while some caller holds the exclusive section."""
        return self._lock.locked()

    @contextmanager
    def exclusive(self) -> Iterator[StoreSession]:
        """Hold the section for one transaction. Commits on success, rolls back on error."""
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise TimeoutError(f"Persistence store section not acquired within {self.lock_timeout}s")
        try:
            with self._session_factory.begin() as session:
                yield StoreSession(session, self.default_api_url, self.default_model)
        finally:
            self._lock.release()
