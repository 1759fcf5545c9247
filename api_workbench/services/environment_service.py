"""
Environment lookup for request execution.

The environment scope is read once per execution or run; the engine
only ever sees the resulting plain mapping.
"""

from sqlalchemy.orm import Session

from ..models.environment import Environment


def get_environment_variables(db: Session, environment_id: int | None) -> dict[str, str]:
    """
    Get the variable set of the specified environment or the active one.

    Args:
        db: Database session
        environment_id: Specific environment ID, or None to use active environment

    Returns:
        Variable dict; empty when no environment matches
    """
    if environment_id is not None:
        env = db.query(Environment).filter(Environment.id == environment_id).first()
    else:
        env = db.query(Environment).filter(Environment.is_active == True).first()

    if not env:
        return {}

    return {var.key: var.value for var in env.variables}
