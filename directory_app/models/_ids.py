import uuid


def new_id() -> str:
    """Primary keys are uuid4 strings, matching the ids handed out by the identity provider."""
    return str(uuid.uuid4())
