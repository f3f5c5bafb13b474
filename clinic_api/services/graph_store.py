"""
Property-graph storage on top of Flask-SQLAlchemy.

Each node label maps to a model; relationships are foreign keys or
association tables. Every logical operation runs inside one
``graph_session()``, which is committed on success, rolled back on error
and always released.
"""
import logging
from contextlib import contextmanager
from contextvars import ContextVar

from extensions import db
from clinic_api.models import (
    Appointment,
    Clinic,
    Doctor,
    Medicine,
    Patient,
    User,
    WorkShift,
)
from clinic_api.services.db_context import db_context


logger = logging.getLogger(__name__)

LABELS = {
    "Appointment": Appointment,
    "Clinic": Clinic,
    "Doctor": Doctor,
    "Medicine": Medicine,
    "Patient": Patient,
    "User": User,
    "WorkShift": WorkShift,
}

# Nesting depth of graph_session() in the current context
_SESSION_DEPTH: ContextVar[int] = ContextVar("graph_session_depth", default=0)


def _model(label: str):
    try:
        return LABELS[label]
    except KeyError:
        raise ValueError(f"Unknown node label: {label}") from None


@contextmanager
def graph_session():
    """
    Scoped storage handle for one logical operation.

    Re-entrant: nested calls share the outermost session, which alone
    commits and releases it.
    """
    depth = _SESSION_DEPTH.get()
    if depth:
        token = _SESSION_DEPTH.set(depth + 1)
        try:
            yield db.session
        finally:
            _SESSION_DEPTH.reset(token)
        return

    with db_context():
        token = _SESSION_DEPTH.set(1)
        try:
            yield db.session
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        finally:
            _SESSION_DEPTH.reset(token)
            db.session.remove()


def node_exists(label: str, node_id: str) -> bool:
    if not node_id:
        return False
    with graph_session() as session:
        return session.get(_model(label), node_id) is not None


def get_node(label: str, node_id: str):
    """Must run inside an enclosing graph_session() to use the returned node."""
    if not node_id:
        return None
    with graph_session() as session:
        return session.get(_model(label), node_id)


def create_node(label: str, **properties):
    with graph_session() as session:
        node = _model(label)(**properties)
        session.add(node)
        session.flush()
        return node


def update_node(label: str, node_id: str, properties: dict) -> int:
    """Overwrite the given attributes; returns the number of nodes touched."""
    with graph_session() as session:
        node = session.get(_model(label), node_id) if node_id else None
        if node is None:
            return 0
        for key, value in properties.items():
            setattr(node, key, value)
        session.flush()
        return 1


def detach_delete(label: str, node_id: str) -> int:
    """Delete a node with all its relationships; returns nodes deleted."""
    with graph_session() as session:
        node = session.get(_model(label), node_id) if node_id else None
        if node is None:
            return 0
        if isinstance(node, Appointment):
            node.doctors.clear()
        session.delete(node)
        session.flush()
        logger.info(f"[detach_delete] {label} {node_id} removed")
        return 1
