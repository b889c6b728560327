"""Session/role gate for the admin views."""

from feedback_portal.session.gate import Role, Session, SessionGate, SessionRegistry

__all__ = ["Role", "Session", "SessionGate", "SessionRegistry"]
