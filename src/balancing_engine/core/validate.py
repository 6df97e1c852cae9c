"""Input and result validation beyond Pydantic schemas."""

from collections.abc import Sequence

from balancing_engine.core.constants import HEADER_ROW_COUNT, NUMERICAL_TOLERANCE
from balancing_engine.core.schemas import BalancingResult, Cell


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class MalformedSchemaError(ValidationError):
    """Raised when the grid does not carry the two header rows."""

    pass


def validate_header_grid(rows: Sequence[Sequence[Cell]]) -> None:
    """Validate that a grid carries both header rows.

    Args:
        rows: Grid rows, header rows first

    Raises:
        MalformedSchemaError: If fewer than two header rows are present
    """
    if rows is None or len(rows) < HEADER_ROW_COUNT:
        found = 0 if rows is None else len(rows)
        raise MalformedSchemaError(
            f"Grid must have at least {HEADER_ROW_COUNT} header rows, found {found}"
        )


def validate_balancing_result(result: BalancingResult) -> None:
    """Validate that a result is internally consistent.

    Args:
        result: Output of a balancing cost calculation

    Raises:
        ValidationError: If an event or total breaks the accounting rules
    """
    for direction, events in (("up", result.up_regulation), ("down", result.down_regulation)):
        for event in events:
            if event.direction != direction or event.cost.direction != direction:
                raise ValidationError(f"{direction} list holds a {event.direction} event for {event.site}")

            if event.imbalance <= 0:
                raise ValidationError(f"Non-positive imbalance for {event.site} at row {event.row_index}")

            expected = event.imbalance * event.cost.cost_per_unit
            if abs(event.cost.total_cost - expected) > NUMERICAL_TOLERANCE * max(1.0, abs(expected)):
                raise ValidationError(
                    f"Total cost {event.cost.total_cost} != imbalance x cost per unit {expected} "
                    f"for {event.site} at row {event.row_index}"
                )

    # Site totals
    for site, totals in result.totals_by_site.items():
        expected = totals.up_regulation_cost + totals.down_regulation_cost
        if abs(totals.total_cost - expected) > NUMERICAL_TOLERANCE * max(1.0, abs(expected)):
            raise ValidationError(f"Site {site} total cost does not equal up + down cost")

    # Event counts
    summary = result.summary
    if summary.number_of_up_regulations != len(result.up_regulation):
        raise ValidationError("Up regulation count does not match events")

    if summary.number_of_down_regulations != len(result.down_regulation):
        raise ValidationError("Down regulation count does not match events")
