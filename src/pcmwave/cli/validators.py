def validate_non_negative_integer(type_: object, value: int | None) -> None:
    """Validate that value is >= 0."""
    if value is None:
        return

    if value < 0:
        raise ValueError(f"Value must be >= 0, got {value}")


def validate_positive_integer(type_: object, value: int) -> None:
    """Validate that value is > 0."""
    if value <= 0:
        raise ValueError(f"Value must be > 0, got {value}")
