"""CLI entry point for the pod planner."""

import logging
import random
from pathlib import Path
from typing import Annotated, Optional

import typer

from pod_planner.data_loader import load_roster_from_csv
from pod_planner.output import export_results_to_csv, print_pod_summary
from pod_planner.planner import MIN_POD_SIZE
from pod_planner.solver import generate_pods
from pod_planner.types import LeniencyMode, PlanStrategy

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Seat participants and groups into pods that play at one shared power level"
)


@app.command()
def main(
    csv_file: Annotated[
        Path,
        typer.Argument(
            help="Path to roster CSV (columns: name, powers or brackets, optional group)"
        ),
    ],
    leniency: Annotated[
        LeniencyMode,
        typer.Option(
            "-l",
            "--leniency",
            case_sensitive=False,
            help="Power tolerance: none (exact), regular (±0.5) or super (±1)",
        ),
    ] = LeniencyMode.NONE,
    strategy: Annotated[
        PlanStrategy,
        typer.Option(
            "--strategy",
            case_sensitive=False,
            help="Pod size policy: balanced, or avoid-five to prefer pods of 3 and 4",
        ),
    ] = PlanStrategy.BALANCED,
    bracket: Annotated[
        bool,
        typer.Option(
            "--bracket",
            help="Read the brackets column instead of powers (disables leniency)",
        ),
    ] = False,
    strict_spread: Annotated[
        bool,
        typer.Option(
            "--strict-spread",
            help="Reject pods whose powers span more than the leniency tolerance",
        ),
    ] = False,
    shuffle: Annotated[
        bool,
        typer.Option(
            "--shuffle",
            help="Shuffle roster order (affects tie-breaking); if --seed is not set, not reproducible",
        ),
    ] = False,
    seed: Annotated[
        Optional[int],
        typer.Option(
            "-s",
            "--seed",
            help="Random seed for reproducible shuffling (implies --shuffle)",
        ),
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option("-o", "--output", help="Export results to CSV")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Log search details")
    ] = False,
) -> None:
    """Generate pods from a roster."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not csv_file.exists():
        typer.echo(f"Error: File not found: {csv_file}", err=True)
        raise typer.Exit(1)

    try:
        participants, grouping = load_roster_from_csv(csv_file, bracket_mode=bracket)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if len(participants) < MIN_POD_SIZE:
        typer.echo(
            f"Error: At least {MIN_POD_SIZE} participants are needed to form a pod "
            f"(found {len(participants)})",
            err=True,
        )
        raise typer.Exit(1)

    if bracket and leniency != LeniencyMode.NONE:
        logger.warning("Bracket mode matches brackets exactly; ignoring %s leniency", leniency.value)
        leniency = LeniencyMode.NONE

    # Shuffle order if requested (affects tie-breaking)
    if shuffle and seed is None:
        seed = random.randrange(2**32)

    try:
        result = generate_pods(
            participants,
            grouping,
            leniency=leniency,
            strategy=strategy,
            seed=seed,
            strict_spread=strict_spread,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    print_pod_summary(result)

    if output:
        export_results_to_csv(result, str(output))
        typer.echo(f"\nResults exported to: {output}")


if __name__ == "__main__":
    app()
