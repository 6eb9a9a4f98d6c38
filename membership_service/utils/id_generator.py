"""Record identifier generation.

Identifiers are opaque strings of the form ``{prefix}_{hex}``, where the
prefix names the record kind.

Example: sub_a1b2c3d4e5f6a7b8
"""

import uuid

SUBSCRIPTION_PREFIX = "sub"
PLAN_PREFIX = "plan"
NOTIFICATION_PREFIX = "ntf"
EVENT_PREFIX = "evt"


def generate_id(prefix: str) -> str:
    """Generate a unique record id.

    Args:
        prefix: Record kind (e.g. "sub", "plan")

    Returns:
        Unique id string
    """
    return f"{prefix}_{uuid.uuid4().hex[:16]}"
