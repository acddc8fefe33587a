def json_bool(body, key):
    """Read a true/false flag from a JSON body; None when absent or not boolean-like.

    WTForms BooleanField treats any submitted value (JSON false included) as
    True, so flags are read from the raw body instead.
    """
    val = body.get(key)
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        return val.strip().lower() in ("1", "true", "yes", "on")
    return None
