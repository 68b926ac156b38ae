MAX_ID = 2**63 - 1


def parse_counter_id(event_id) -> int | None:
    """Plain positive decimal ids only; "+7", " 7 " and "1_0" are not ids."""
    text = str(event_id)
    if not (text.isascii() and text.isdigit()):
        return None
    pk = int(text)
    return pk if 0 < pk <= MAX_ID else None
