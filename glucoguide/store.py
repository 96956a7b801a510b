from typing import Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from glucoguide import db
from glucoguide.errors import CollaboratorFailure, InvalidInputError
from glucoguide.models import (
    FoodLogEntry,
    ForumLike,
    ForumReply,
    ForumThread,
    LeaderboardEntry,
    ReferenceFood,
    UserProfile,
)

COLLECTIONS = {
    "users": UserProfile,
    "food_logs": FoodLogEntry,
    "reference_foods": ReferenceFood,
    "leaderboard": LeaderboardEntry,
    "forum_threads": ForumThread,
    "forum_replies": ForumReply,
    "forum_likes": ForumLike,
}


class DocumentStore:
    """Collection/document persistence used by the ledger, profile and forum services.

    Documents are plain dicts keyed by field name and always carry their ``id``.
    ``set_document`` with ``merge=True`` touches only the given fields; with
    ``merge=False`` every other field falls back to its default. ``increment``
    applies field-level deltas atomically in the backing store. ``query_equal``
    ANDs the ``field == value`` pair with any extra ``filters``; rows tied on
    ``order_by`` come back in ascending id order.
    """

    def get_document(self, collection: str, doc_id) -> dict | None:
        raise NotImplementedError

    def set_document(self, collection: str, doc_id, fields: dict[str, Any], merge: bool = True) -> dict:
        raise NotImplementedError

    def add_document(self, collection: str, fields: dict[str, Any]) -> dict:
        raise NotImplementedError

    def delete_document(self, collection: str, doc_id) -> bool:
        raise NotImplementedError

    def increment(self, collection: str, doc_id, deltas: dict[str, float]) -> bool:
        raise NotImplementedError

    def query_equal(
        self,
        collection: str,
        field: str | None = None,
        value=None,
        *,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        raise NotImplementedError


def _model_for(collection: str):
    model = COLLECTIONS.get(collection)
    if model is None:
        raise InvalidInputError(f"Unknown collection: {collection}")
    return model


def _column_names(model) -> set[str]:
    return {column.name for column in model.__table__.columns}


def _check_fields(model, names) -> None:
    unknown = set(names) - _column_names(model)
    if unknown:
        raise InvalidInputError(f"Unknown fields for {model.__tablename__}: {', '.join(sorted(unknown))}")


def _reset_to_defaults(row, keep: set[str]) -> None:
    for column in row.__table__.columns:
        if column.primary_key or column.name in keep:
            continue
        default = column.default
        if default is None:
            setattr(row, column.name, None)
        elif default.is_scalar:
            setattr(row, column.name, default.arg)


class SqlDocumentStore(DocumentStore):
    """DocumentStore backed by the SQLAlchemy models in ``glucoguide.models``."""

    def _fail(self, action: str, collection: str, exc: Exception):
        db.session.rollback()
        current_app.logger.error("Store %s failed on %s: %s", action, collection, exc)
        raise CollaboratorFailure(f"Could not {action} {collection} document.") from exc

    def get_document(self, collection, doc_id):
        model = _model_for(collection)
        try:
            row = db.session.get(model, doc_id)
        except SQLAlchemyError as exc:
            self._fail("read", collection, exc)
        return row.to_document() if row else None

    def set_document(self, collection, doc_id, fields, merge=True):
        model = _model_for(collection)
        _check_fields(model, fields)
        try:
            row = db.session.get(model, doc_id)
            if row is None:
                row = model(id=doc_id)
                db.session.add(row)
            elif not merge:
                _reset_to_defaults(row, keep=set(fields))

            for name, value in fields.items():
                if name == "id":
                    continue
                setattr(row, name, value)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("write", collection, exc)
        return row.to_document()

    def add_document(self, collection, fields):
        model = _model_for(collection)
        _check_fields(model, fields)
        row = model(**fields)
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("add", collection, exc)
        return row.to_document()

    def delete_document(self, collection, doc_id):
        model = _model_for(collection)
        try:
            row = db.session.get(model, doc_id)
            if row is None:
                return False
            db.session.delete(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("delete", collection, exc)
        return True

    def increment(self, collection, doc_id, deltas):
        model = _model_for(collection)
        _check_fields(model, deltas)
        if not deltas:
            return True
        values = {getattr(model, name): getattr(model, name) + delta for name, delta in deltas.items()}
        try:
            updated = model.query.filter(model.id == doc_id).update(values, synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("increment", collection, exc)
        return updated > 0

    def query_equal(self, collection, field=None, value=None, *, filters=None, order_by=None, descending=False, limit=None):
        model = _model_for(collection)
        equal = dict(filters or {})
        if field is not None:
            equal[field] = value
        _check_fields(model, [*equal, *([order_by] if order_by else [])])

        query = model.query
        for name, expected in equal.items():
            query = query.filter(getattr(model, name) == expected)
        if order_by:
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
            if order_by != "id":
                # Break ties by id.
                query = query.order_by(model.id.asc())
        if limit:
            query = query.limit(limit)

        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            self._fail("query", collection, exc)
        return [row.to_document() for row in rows]


def get_store() -> DocumentStore:
    return SqlDocumentStore()
