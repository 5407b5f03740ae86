def first_leaf[E: BaseException](group: BaseExceptionGroup[E]) -> E:
    """Return the first non-group exception inside a (possibly nested) group."""
    error: E | BaseExceptionGroup[E] = group.exceptions[0]
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error
