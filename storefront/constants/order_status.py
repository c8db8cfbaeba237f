ALLOWED_TRANSITIONS = {
    "draft": ["pending", "cancelled"],
    "pending": ["paid", "shipped", "cancelled"],
    "paid": ["shipped", "cancelled"],
    "shipped": ["completed", "cancelled"],
    "completed": [],
    "cancelled": []
}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])
