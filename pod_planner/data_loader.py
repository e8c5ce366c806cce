"""Load participant rosters from CSV files."""

import logging
from pathlib import Path

import pandas as pd

from pod_planner.power import GRID_STEP, MAX_POWER, MIN_POWER, is_on_grid
from pod_planner.types import Participant

logger = logging.getLogger(__name__)

# Bracket labels stand in for power levels so the same search can place them
BRACKET_POWERS = {
    "1": 1.0,
    "2": 2.0,
    "3": 3.0,
    "4": 4.0,
    "cedh": 10.0,
}


def parse_power(token: str) -> float:
    """Parse one power value on the 0.5 grid between 1 and 10.

    Raises:
        ValueError: If the token is not a number, off the grid or out of range
    """
    try:
        value = float(token)
    except ValueError as e:
        raise ValueError(f"Invalid power value '{token}'") from e

    if not MIN_POWER <= value <= MAX_POWER:
        raise ValueError(
            f"Power {token} is outside {MIN_POWER:g}-{MAX_POWER:g}"
        )
    if not is_on_grid(value):
        raise ValueError(f"Power {token} is not a multiple of {GRID_STEP}")
    return value


def parse_powers(text: str) -> list[float]:
    """Parse a power selection such as "6, 7.5" or "6-8".

    Ranges are inclusive and expand in 0.5 steps.
    """
    powers: list[float] = []
    for token in str(text).split(","):
        token = token.strip()
        if not token:
            continue
        low, sep, high = token.partition("-")
        if not sep:
            powers.append(parse_power(token))
            continue

        start, end = parse_power(low.strip()), parse_power(high.strip())
        if start > end:
            raise ValueError(f"Invalid power range '{token}'")
        steps = int(round((end - start) / GRID_STEP))
        powers.extend(start + i * GRID_STEP for i in range(steps + 1))
    return sorted(set(powers))


def parse_brackets(text: str) -> list[str]:
    """Parse a bracket selection such as "3, 4" or "cedh"."""
    brackets: list[str] = []
    for token in str(text).split(","):
        label = token.strip().lower()
        if not label:
            continue
        if label not in BRACKET_POWERS:
            raise ValueError(
                f"Unknown bracket '{token.strip()}' "
                f"(expected one of {', '.join(BRACKET_POWERS)})"
            )
        if label not in brackets:
            brackets.append(label)
    return brackets


def load_roster_from_csv(
    filepath: Path | str,
    bracket_mode: bool = False,
) -> tuple[list[Participant], dict[str, list[str]]]:
    """Load a participant roster from a CSV file.

    Args:
        filepath: Path to a CSV with a `name` column, a `powers` column
            (or `brackets` in bracket mode) and an optional `group` column.
        bracket_mode: Read the `brackets` column and map each bracket to
            its power level instead of reading `powers`.

    Returns:
        Tuple of (participants, grouping) where:
        - participants: Participants in roster order, identified by name
        - grouping: Dict mapping group label -> [participant names, ...]

    Raises:
        ValueError: If the CSV is empty, malformed, misses a required column,
            or a row has a blank or duplicate name or no valid selection.
    """
    if isinstance(filepath, str):
        filepath = Path(filepath)

    try:
        df = pd.read_csv(filepath, dtype=str, skipinitialspace=True)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"CSV file is empty: {filepath}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Failed to parse CSV: {e}") from e

    df.columns = [str(col).strip().lower() for col in df.columns]
    selection_column = "brackets" if bracket_mode else "powers"
    for column in ("name", selection_column):
        if column not in df.columns:
            raise ValueError(f"CSV is missing the '{column}' column: {filepath}")

    if df.empty:
        raise ValueError(f"CSV file contains no data rows: {filepath}")

    participants: list[Participant] = []
    grouping: dict[str, list[str]] = {}
    seen: set[str] = set()

    for row_number, row in enumerate(df.itertuples(index=False), start=2):
        name = row.name.strip() if pd.notna(row.name) else ""
        if not name:
            raise ValueError(f"Row {row_number} has no participant name")
        if name in seen:
            raise ValueError(f"Duplicate participant name '{name}'")
        seen.add(name)

        selection = getattr(row, selection_column)
        selection = selection if pd.notna(selection) else ""
        if bracket_mode:
            brackets = parse_brackets(selection)
            powers = [BRACKET_POWERS[label] for label in brackets]
        else:
            brackets = []
            powers = parse_powers(selection)

        if not powers:
            raise ValueError(
                f"No {selection_column} selected for participant '{name}'"
            )

        participants.append(
            Participant(id=name, name=name, powers=tuple(powers), brackets=tuple(brackets))
        )

        group = getattr(row, "group", None)
        if group is not None and pd.notna(group) and group.strip():
            grouping.setdefault(group.strip(), []).append(name)

    logger.debug(
        "Loaded %d participants and %d groups from %s",
        len(participants),
        len(grouping),
        filepath,
    )
    return participants, grouping
